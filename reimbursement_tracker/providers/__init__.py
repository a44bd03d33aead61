from typing import Optional

from ..config import Settings
from .base import BudgetSyncProviderBase
from .webhook import HttpBudgetSyncProvider
from .simulated import SimulatedBudgetSyncProvider

__all__ = [
    "BudgetSyncProviderBase",
    "HttpBudgetSyncProvider",
    "SimulatedBudgetSyncProvider",
    "provider_from_settings",
]


def provider_from_settings(settings: Settings) -> Optional[BudgetSyncProviderBase]:
    if settings.budget_sync_simulated:
        return SimulatedBudgetSyncProvider()
    if settings.budget_api_url:
        return HttpBudgetSyncProvider(
            settings.budget_api_url,
            timeout=settings.budget_sync_timeout_seconds,
        )
    return None
