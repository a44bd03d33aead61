"""Heuristic detection of claims that are already being tracked.

Each existing claim is compared against the candidate through a fixed sequence of
tiers; the first tier that fires decides the match reason for that claim:

1. the candidate's external claim id equals the stored ClaimID
2. the candidate's external claim id equals the stored ReimbursementID (older rows
   stored the institution's claim id as the primary id)
3. identical receipt numbers, compared trimmed
4. a still-pending claim from the same source for the same amount whose purchase
   date falls in the same calendar quarter
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from ..models import CLAIMS_TABLE, ClaimRecord, ClaimStatus, HeaderIndex
from ..schemas import ClaimCandidate
from ..stores import RowStoreBase

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.01


@dataclass
class DuplicateMatch:
    claim: ClaimRecord
    match_reason: str

    def to_dict(self) -> Dict[str, Any]:
        c = self.claim
        return {
            "reimbursementId": c.id,
            "claimId": c.external_claim_id,
            "claimType": c.claim_type,
            "benefitType": c.benefit_type,
            "source": c.source,
            "description": c.description,
            "amountClaimed": c.amount_claimed,
            "amountApproved": c.amount_approved,
            "amountDisapproved": c.amount_disapproved,
            "status": c.status,
            "purchaseDate": c.purchase_date.isoformat() if c.purchase_date else None,
            "submittedDate": c.submitted_date.isoformat() if c.submitted_date else None,
            "approvedDate": c.approved_date.isoformat() if c.approved_date else None,
            "receiptNumber": c.receipt_number,
            "matchReason": self.match_reason,
        }


def quarter_of(d: date) -> Tuple[int, int]:
    return d.year, (d.month - 1) // 3


def same_quarter(a: Optional[date], b: Optional[date]) -> bool:
    if a is None or b is None:
        return False
    return quarter_of(a) == quarter_of(b)


def descriptions_overlap(a: Optional[str], b: Optional[str]) -> bool:
    a = (a or "").lower()
    b = (b or "").lower()
    if not a or not b:
        return False
    return a in b or b in a


def match_reason(candidate: ClaimCandidate, existing: ClaimRecord) -> Optional[str]:
    external_id = candidate.external_claim_id
    if external_id:
        if existing.external_claim_id == external_id:
            return f"Same ClaimID: {external_id}"
        if existing.id == external_id:
            return f"Same ReimbursementID: {external_id}"

    if candidate.receipt_number:
        wanted = candidate.receipt_number.strip()
        stored = (existing.receipt_number or "").strip()
        if stored and stored == wanted:
            return f"Same ReceiptNumber: {wanted}"

    # Zero amounts never take part in the quarterly heuristic
    if candidate.amount_claimed and candidate.source:
        if (
            existing.status == ClaimStatus.pending.value
            and abs(existing.amount_claimed - candidate.amount_claimed) < AMOUNT_TOLERANCE
            and existing.source == candidate.source
            and same_quarter(existing.purchase_date, candidate.purchase_date)
        ):
            reason = "Same source + amount + pending + same quarter"
            if descriptions_overlap(existing.description, candidate.description):
                reason += " + description match"
            return reason

    return None


class DuplicateMatcher:
    def __init__(self, store: RowStoreBase):
        self.store = store

    def find_duplicates(self, candidate: ClaimCandidate) -> List[DuplicateMatch]:
        if not self.store.has_table(CLAIMS_TABLE):
            return []

        idx = HeaderIndex(self.store.headers(CLAIMS_TABLE))
        matches = []
        for i, row in enumerate(self.store.read_rows(CLAIMS_TABLE)):
            existing = ClaimRecord.from_row(idx, i, row)
            reason = match_reason(candidate, existing)
            if reason:
                matches.append(DuplicateMatch(claim=existing, match_reason=reason))

        if matches:
            logger.info(
                "Duplicate check found %d match(es): %s",
                len(matches), ", ".join(m.claim.id for m in matches)
            )
        return matches
