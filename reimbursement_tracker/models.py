from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Sequence


CLAIMS_TABLE = "Reimbursements"
REFERENCE_TABLE = "ReferenceData"

CLAIM_HEADERS: List[str] = [
    "ReimbursementID", "Category", "Source", "BenefitType", "ClaimType", "ClaimID",
    "Description", "AmountClaimed", "AmountApproved", "AmountDisapproved", "Status",
    "SubmittedDate", "ApprovedDate", "PaidDate", "PurchaseDate", "LinkedTransactionID",
    "ReceiptImageURL", "Notes", "CreatedAt", "UpdatedAt", "ReceiptNumber",
]

REFERENCE_HEADERS: List[str] = ["Type", "Value", "DisplayName", "Description"]


class ClaimStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    paid = "paid"
    rejected = "rejected"
    expired = "expired"
    lacking = "lacking"
    denied = "denied"


class ClaimCategory(str, Enum):
    hmo = "hmo"
    business = "business"
    client = "client"
    personal = "personal"
    other = "other"


class ReferenceType(str, Enum):
    source = "Source"
    benefit_type = "BenefitType"
    claim_type = "ClaimType"


STATUS_VALUES: List[str] = [s.value for s in ClaimStatus]
CATEGORY_VALUES: List[str] = [c.value for c in ClaimCategory]
REFERENCE_TYPE_VALUES: List[str] = [t.value for t in ReferenceType]

# Statuses for which an approved amount counts towards the approved total
APPROVED_STATUSES: FrozenSet[ClaimStatus] = frozenset({ClaimStatus.approved, ClaimStatus.paid})


def parse_status(value: Optional[str]) -> Optional[ClaimStatus]:
    if not value:
        return None
    try:
        return ClaimStatus(str(value).strip().lower())
    except ValueError:
        return None


def parse_amount(value: Any) -> float:
    """Lenient numeric read of a cell or payload value; blanks and junk read as 0."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def blank_to_none(value: Any) -> Any:
    if value is None or value == "":
        return None
    return value


class HeaderIndex:
    """Column positions of a table keyed by header name."""

    def __init__(self, headers: Sequence[str]):
        self.headers = list(headers)
        self._positions = {name: i for i, name in enumerate(self.headers)}

    def __contains__(self, name: str) -> bool:
        return name in self._positions

    def position(self, name: str) -> int:
        return self._positions[name]

    def get(self, row: Sequence[Any], name: str, default: Any = "") -> Any:
        pos = self._positions.get(name)
        if pos is None or pos >= len(row):
            return default
        return row[pos]

    def build_row(self, values: Dict[str, Any]) -> List[Any]:
        return [values.get(name, "") for name in self.headers]


@dataclass
class ClaimRecord:
    """A claim as read back from one row of the claims table."""

    row_index: int
    id: str
    category: str
    source: str
    benefit_type: Optional[str]
    claim_type: Optional[str]
    external_claim_id: Optional[str]
    description: Optional[str]
    amount_claimed: float
    amount_approved: float
    amount_disapproved: float
    status: str
    submitted_date: Optional[date]
    approved_date: Optional[date]
    paid_date: Optional[date]
    purchase_date: Optional[date]
    linked_transaction_id: Optional[str]
    receipt_image_url: Optional[str]
    notes: Optional[str]
    receipt_number: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]
    # Raw cell presence; a filled but unparsable date still counts as set
    has_approved_date: bool = False
    has_paid_date: bool = False

    @classmethod
    def from_row(cls, idx: HeaderIndex, row_index: int, row: Sequence[Any]) -> "ClaimRecord":
        def text(name: str) -> Optional[str]:
            value = blank_to_none(idx.get(row, name))
            return str(value) if value is not None else None

        return cls(
            row_index=row_index,
            id=str(idx.get(row, "ReimbursementID")),
            category=str(idx.get(row, "Category")),
            source=str(idx.get(row, "Source")),
            benefit_type=text("BenefitType"),
            claim_type=text("ClaimType"),
            external_claim_id=text("ClaimID"),
            description=text("Description"),
            amount_claimed=parse_amount(idx.get(row, "AmountClaimed")),
            amount_approved=parse_amount(idx.get(row, "AmountApproved")),
            amount_disapproved=parse_amount(idx.get(row, "AmountDisapproved")),
            status=str(idx.get(row, "Status")),
            submitted_date=parse_date(idx.get(row, "SubmittedDate")),
            approved_date=parse_date(idx.get(row, "ApprovedDate")),
            paid_date=parse_date(idx.get(row, "PaidDate")),
            purchase_date=parse_date(idx.get(row, "PurchaseDate")),
            linked_transaction_id=text("LinkedTransactionID"),
            receipt_image_url=text("ReceiptImageURL"),
            notes=text("Notes"),
            receipt_number=text("ReceiptNumber"),
            created_at=text("CreatedAt"),
            updated_at=text("UpdatedAt"),
            has_approved_date=text("ApprovedDate") is not None,
            has_paid_date=text("PaidDate") is not None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reimbursementId": self.id,
            "category": self.category,
            "source": self.source,
            "benefitType": self.benefit_type,
            "claimType": self.claim_type,
            "claimId": self.external_claim_id,
            "description": self.description,
            "amountClaimed": self.amount_claimed,
            "amountApproved": self.amount_approved,
            "amountDisapproved": self.amount_disapproved,
            "status": self.status,
            "submittedDate": _iso(self.submitted_date),
            "approvedDate": _iso(self.approved_date),
            "paidDate": _iso(self.paid_date),
            "purchaseDate": _iso(self.purchase_date),
            "linkedTransactionId": self.linked_transaction_id,
            "receiptImageURL": self.receipt_image_url,
            "notes": self.notes,
            "receiptNumber": self.receipt_number,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ReferenceEntry:
    type: str
    value: str
    display_name: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type,
            "value": self.value,
            "displayName": self.display_name,
            "description": self.description,
        }


DEFAULT_REFERENCE_ENTRIES: List[ReferenceEntry] = [
    ReferenceEntry("Source", "Avega Managed Care", "Avega Managed Care", "HMO provider"),
    ReferenceEntry("BenefitType", "maternity_assistance", "Maternity Assistance"),
    ReferenceEntry("BenefitType", "medicine_reimbursement", "Medicine (Confinement)"),
    ReferenceEntry("BenefitType", "pet_support", "Pet Support Program"),
    ReferenceEntry("BenefitType", "optical", "Optical Benefit"),
    ReferenceEntry("BenefitType", "psychology_sessions", "Psychology Sessions"),
    ReferenceEntry("BenefitType", "dental_reimbursement", "Dental (Provincial)"),
    ReferenceEntry("ClaimType", "OT", "Outpatient Treatment"),
    ReferenceEntry("ClaimType", "OL", "Outpatient Lab"),
    ReferenceEntry("ClaimType", "DP", "Dental Procedure"),
    ReferenceEntry("ClaimType", "APE", "Annual Physical Exam"),
    ReferenceEntry("ClaimType", "PS", "Pet Support"),
    ReferenceEntry("ClaimType", "OP", "Optical"),
    ReferenceEntry("ClaimType", "PY", "Psychology"),
    ReferenceEntry("ClaimType", "MT", "Maternity"),
    ReferenceEntry("ClaimType", "MR", "Medicine Reimbursement"),
]
