from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from ..models import APPROVED_STATUSES, ClaimRecord, ClaimStatus
from ..schemas import SummaryRequest
from .claims import ClaimTable, matches_filters


@dataclass
class Totals:
    claimed: float = 0.0
    approved: float = 0.0
    paid: float = 0.0
    pending: float = 0.0
    count: int = 0

    def add(self, record: ClaimRecord) -> None:
        self.count += 1
        self.claimed += record.amount_claimed
        # A zero approved amount falls back to the claimed amount
        settled = record.amount_approved or record.amount_claimed
        if record.status in {s.value for s in APPROVED_STATUSES}:
            self.approved += settled
        if record.status == ClaimStatus.paid.value:
            self.paid += settled
        if record.status == ClaimStatus.pending.value:
            self.pending += record.amount_claimed


class SummaryAggregator:
    def __init__(self, table: ClaimTable):
        self.table = table

    def summarize(self, req: SummaryRequest) -> Dict[str, Any]:
        overall = Totals()
        by_category: Dict[str, Totals] = {}
        by_source: Dict[str, Totals] = {}

        for record in self.table.records():
            if not matches_filters(record, req.category, req.source, req.status):
                continue
            purchase_date = record.purchase_date
            if req.date_from and purchase_date and purchase_date < req.date_from:
                continue
            if req.date_to and purchase_date and purchase_date > req.date_to:
                continue

            overall.add(record)
            by_category.setdefault(record.category, Totals()).add(record)
            by_source.setdefault(record.source, Totals()).add(record)

        return {
            "summary": {
                "totalClaimed": overall.claimed,
                "totalApproved": overall.approved,
                "totalPaid": overall.paid,
                "totalPending": overall.pending,
                "count": overall.count,
            },
            "byCategory": _breakdown("category", by_category),
            "bySource": _breakdown("source", by_source),
        }


def _breakdown(label: str, groups: Dict[str, Totals]) -> List[Dict[str, Any]]:
    return [{label: key, **asdict(totals)} for key, totals in groups.items()]
