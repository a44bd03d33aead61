import pytest

from reimbursement_tracker.config import Settings
from reimbursement_tracker.providers import SimulatedBudgetSyncProvider
from reimbursement_tracker.stores import InMemoryRowStore
from reimbursement_tracker.tracker import ReimbursementTracker

from helpers import FakeClock


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", budget_api_url=None, list_default_limit=20)


@pytest.fixture
def store():
    return InMemoryRowStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sync_provider():
    return SimulatedBudgetSyncProvider()


@pytest.fixture
def tracker(settings, store, clock, sync_provider):
    return ReimbursementTracker(settings, store, sync_provider=sync_provider, clock=clock)
