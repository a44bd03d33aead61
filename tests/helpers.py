from datetime import datetime, timedelta, timezone

from reimbursement_tracker.models import CLAIM_HEADERS, CLAIMS_TABLE, HeaderIndex


class FakeClock:
    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def claim_payload(**overrides):
    payload = {
        "category": "hmo",
        "source": "Avega Managed Care",
        "description": "Consultation - Dr. Santos",
        "amountClaimed": 1500,
        "date": "2024-04-10",
    }
    payload.update(overrides)
    return payload


def add_claim(tracker, clock=None, **overrides):
    """Insert a claim bypassing the duplicate check; returns its id."""
    overrides.setdefault("skipDuplicateCheck", True)
    result = tracker.add_reimbursement(claim_payload(**overrides))
    assert result["success"], result
    if clock is not None:
        clock.advance(milliseconds=5)
    return result["reimbursementId"]


def append_raw_claim(store, **cells):
    """Append a row the way older installations stored it."""
    store.create_table(CLAIMS_TABLE, CLAIM_HEADERS)
    idx = HeaderIndex(store.headers(CLAIMS_TABLE))
    store.append_row(CLAIMS_TABLE, idx.build_row(cells))
