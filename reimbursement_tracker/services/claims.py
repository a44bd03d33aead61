from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import DuplicateDetected, NotFound, NotInitialized, ValidationError
from ..models import (
    CATEGORY_VALUES,
    CLAIM_HEADERS,
    CLAIMS_TABLE,
    ClaimRecord,
    ClaimStatus,
    HeaderIndex,
    parse_status,
)
from ..schemas import ClaimCandidate, ClaimCreateRequest, ListRequest
from ..stores import RowStoreBase
from .duplicates import DuplicateMatch, DuplicateMatcher
from .reference import ReferenceCatalog

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_SORT_KEY = "purchaseDate"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_claim_id(now: datetime) -> str:
    return f"R-{int(now.timestamp() * 1000)}"


class ClaimTable:
    """Row-level access to the claims table by header name."""

    def __init__(self, store: RowStoreBase):
        self.store = store

    def exists(self) -> bool:
        return self.store.has_table(CLAIMS_TABLE)

    def ensure(self) -> HeaderIndex:
        self.store.create_table(CLAIMS_TABLE, CLAIM_HEADERS)
        return self.index()

    def index(self) -> HeaderIndex:
        if not self.exists():
            raise NotInitialized(CLAIMS_TABLE, "Reimbursements sheet not found")
        return HeaderIndex(self.store.headers(CLAIMS_TABLE))

    def records(self) -> List[ClaimRecord]:
        if not self.exists():
            return []
        idx = self.index()
        return [ClaimRecord.from_row(idx, i, row) for i, row in enumerate(self.store.read_rows(CLAIMS_TABLE))]

    def find(self, claim_id: str) -> Tuple[HeaderIndex, ClaimRecord]:
        idx = self.index()
        for i, row in enumerate(self.store.read_rows(CLAIMS_TABLE)):
            if str(idx.get(row, "ReimbursementID")) == claim_id:
                return idx, ClaimRecord.from_row(idx, i, row)
        raise NotFound(f"Reimbursement not found: {claim_id}")

    def set(self, idx: HeaderIndex, record: ClaimRecord, column: str, value: Any) -> None:
        self.store.update_cell(CLAIMS_TABLE, record.row_index, idx.position(column), value)


def matches_filters(record: ClaimRecord, category: Optional[str], source: Optional[str],
                     statuses: Optional[List[str]]) -> bool:
    if category and record.category != category.lower():
        return False
    if source and record.source != source:
        return False
    if statuses and record.status not in statuses:
        return False
    return True


class ClaimRepository:
    def __init__(
        self,
        store: RowStoreBase,
        catalog: ReferenceCatalog,
        matcher: DuplicateMatcher,
        clock: Clock = utc_now,
        default_limit: int = 20,
    ):
        self.table = ClaimTable(store)
        self.catalog = catalog
        self.matcher = matcher
        self.clock = clock
        self.default_limit = default_limit

    def check_duplicate(self, candidate: ClaimCandidate) -> List[DuplicateMatch]:
        return self.matcher.find_duplicates(candidate)

    def create(self, req: ClaimCreateRequest) -> Dict[str, Any]:
        if not req.skip_duplicate_check:
            matches = self.matcher.find_duplicates(req)
            if matches:
                logger.warning(
                    "Duplicate claim rejected: claim_id=%s, receipt_number=%s, matches=%d",
                    req.external_claim_id, req.receipt_number, len(matches)
                )
                raise DuplicateDetected([m.to_dict() for m in matches])

        self._validate_required(req)

        category = req.category.lower()
        if category not in CATEGORY_VALUES:
            raise ValidationError("Invalid category. Must be one of: " + ", ".join(CATEGORY_VALUES))

        self._validate_against_catalog(req)

        # Unrecognized statuses fall back to pending rather than failing the create
        status = parse_status(req.status) or ClaimStatus.pending

        now = self.clock()
        claim_id = req.external_claim_id or generate_claim_id(now)
        submitted_date = req.submitted_date or now.date()
        amount_claimed = req.amount_claimed or 0.0
        amount_approved = req.amount_approved or 0.0
        amount_disapproved = req.amount_disapproved or 0.0

        idx = self.table.ensure()
        row = idx.build_row({
            "ReimbursementID": claim_id,
            "Category": category,
            "Source": req.source,
            "BenefitType": req.benefit_type or "",
            "ClaimType": req.claim_type or "",
            "ClaimID": req.external_claim_id or "",
            "Description": req.description,
            "AmountClaimed": amount_claimed,
            "AmountApproved": amount_approved,
            "AmountDisapproved": amount_disapproved,
            "Status": status.value,
            "SubmittedDate": submitted_date.isoformat(),
            "ApprovedDate": req.approved_date.isoformat() if req.approved_date else "",
            "PaidDate": req.paid_date.isoformat() if req.paid_date else "",
            "PurchaseDate": req.purchase_date.isoformat(),
            "LinkedTransactionID": req.linked_transaction_id or "",
            "ReceiptImageURL": req.receipt_image_url or "",
            "Notes": req.notes or "",
            "CreatedAt": now.isoformat(),
            "UpdatedAt": now.isoformat(),
            "ReceiptNumber": req.receipt_number or "",
        })
        self.table.store.append_row(CLAIMS_TABLE, row)

        logger.info(
            "Reimbursement added: reimbursement_id=%s, category=%s, source=%s, amount_claimed=%s, status=%s",
            claim_id, category, req.source, amount_claimed, status.value
        )

        return {
            "reimbursementId": claim_id,
            "status": status.value,
            "category": category,
            "source": req.source,
            "amountClaimed": amount_claimed,
            "amountApproved": amount_approved,
            "amountDisapproved": amount_disapproved,
            "claimType": req.claim_type,
            "claimId": req.external_claim_id,
            "receiptNumber": req.receipt_number,
        }

    @staticmethod
    def _validate_required(req: ClaimCreateRequest) -> None:
        if not req.category:
            raise ValidationError("category is required (" + ", ".join(CATEGORY_VALUES) + ")")
        if not req.source:
            raise ValidationError("source is required (who will reimburse)")
        if not req.description:
            raise ValidationError("description is required")
        if req.amount_claimed is None:
            raise ValidationError("amountClaimed is required")
        if req.purchase_date is None:
            raise ValidationError("date is required (YYYY-MM-DD)")

    def _validate_against_catalog(self, req: ClaimCreateRequest) -> None:
        allowed = self.catalog.allowed_values()
        if allowed is None:
            logger.debug("Reference catalog not initialized, skipping benefitType/claimType validation")
            return

        benefit_types = allowed.get("BenefitType")
        if req.benefit_type and benefit_types and req.benefit_type not in benefit_types:
            raise ValidationError(
                f'Invalid benefitType "{req.benefit_type}". Valid: ' + ", ".join(benefit_types)
            )

        claim_types = allowed.get("ClaimType")
        if req.claim_type and claim_types and req.claim_type not in claim_types:
            raise ValidationError(
                f'Invalid claimType "{req.claim_type}". Valid: ' + ", ".join(claim_types)
            )

    def list(self, req: ListRequest) -> Tuple[List[Dict[str, Any]], int]:
        """Filtered, sorted page of claims plus the unpaged match count."""
        results = [
            record.to_dict()
            for record in self.table.records()
            if matches_filters(record, req.category, req.source, req.status)
        ]

        sort_key = req.sort_by or DEFAULT_SORT_KEY
        descending = (req.sort_order or "desc").lower() != "asc"

        def key(item: Dict[str, Any]) -> Tuple[bool, Any]:
            value = item.get(sort_key)
            if value is None or value == "":
                return (False, "")
            return (True, value)

        # sorted() is stable in both directions, so ties keep table order
        results = sorted(results, key=key, reverse=descending)

        limit = req.limit or self.default_limit
        return results[:limit], len(results)

    def link(self, claim_id: Optional[str], transaction_id: Optional[str]) -> Dict[str, Any]:
        if not claim_id:
            raise ValidationError("reimbursementId is required")
        if not transaction_id:
            raise ValidationError("transactionId (budget system) is required")

        idx, record = self.table.find(claim_id)
        self.table.set(idx, record, "LinkedTransactionID", transaction_id)
        self.table.set(idx, record, "UpdatedAt", self.clock().isoformat())

        logger.info("Reimbursement linked: reimbursement_id=%s, transaction_id=%s", claim_id, transaction_id)
        return {"reimbursementId": claim_id, "linkedTransactionId": transaction_id}
