from datetime import date
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
    return v


def _coerce_date(v: Any) -> Any:
    v = _blank_to_none(v)
    if isinstance(v, str) and len(v) > 10:
        # Accept full timestamps ("2024-03-31T08:00:00.000Z") as their date part
        return v[:10]
    return v


def _status_list(v: Any) -> Any:
    v = _blank_to_none(v)
    if isinstance(v, str):
        return [s.strip() for s in v.split(",") if s.strip()]
    return v


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ClaimCandidate(Payload):
    """Fields the duplicate matcher looks at."""

    external_claim_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("externalClaimId", "claimId", "external_claim_id")
    )
    receipt_number: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("receiptNumber", "receipt_number")
    )
    amount_claimed: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("amountClaimed", "amount_claimed")
    )
    source: Optional[str] = None
    description: Optional[str] = None
    purchase_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("date", "purchaseDate", "purchase_date")
    )

    @field_validator("external_claim_id", "receipt_number", "source", "description", mode="before")
    @classmethod
    def blank_strings(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return str(v) if v is not None else None

    @field_validator("amount_claimed", mode="before")
    @classmethod
    def blank_amount(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("purchase_date", mode="before")
    @classmethod
    def purchase_date_part(cls, v: Any) -> Any:
        return _coerce_date(v)


class ClaimCreateRequest(ClaimCandidate):
    category: Optional[str] = None
    benefit_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("benefitType", "benefit_type")
    )
    claim_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("claimType", "claim_type")
    )
    amount_approved: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("amountApproved", "amount_approved")
    )
    amount_disapproved: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("amountDisapproved", "amount_disapproved")
    )
    status: Optional[str] = None
    submitted_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("submittedDate", "submitted_date")
    )
    approved_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("approvedDate", "approved_date")
    )
    paid_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("paidDate", "paid_date")
    )
    linked_transaction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("linkedTransactionId", "linked_transaction_id")
    )
    receipt_image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("receiptImageURL", "receiptImageUrl", "receipt_image_url")
    )
    notes: Optional[str] = None
    skip_duplicate_check: bool = Field(
        default=False, validation_alias=AliasChoices("skipDuplicateCheck", "skip_duplicate_check")
    )

    @field_validator(
        "category", "benefit_type", "claim_type", "status",
        "linked_transaction_id", "receipt_image_url", "notes",
        mode="before",
    )
    @classmethod
    def blank_optional_strings(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return str(v) if v is not None else None

    @field_validator("amount_approved", "amount_disapproved", mode="before")
    @classmethod
    def blank_optional_amounts(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("amount_claimed", "amount_approved", "amount_disapproved")
    @classmethod
    def amount_not_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("amounts cannot be negative")
        return v

    @field_validator("submitted_date", "approved_date", "paid_date", mode="before")
    @classmethod
    def date_part(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator("skip_duplicate_check", mode="before")
    @classmethod
    def blank_flag(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return False if v is None else v


class ClaimUpdateRequest(Payload):
    reimbursement_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("reimbursementId", "reimbursement_id", "id")
    )
    status: Optional[str] = None
    external_claim_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("externalClaimId", "claimId", "external_claim_id")
    )
    claim_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("claimType", "claim_type")
    )
    benefit_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("benefitType", "benefit_type")
    )
    description: Optional[str] = None
    amount_approved: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("amountApproved", "amount_approved")
    )
    amount_disapproved: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("amountDisapproved", "amount_disapproved")
    )
    approved_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("approvedDate", "approved_date")
    )
    submitted_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("submittedDate", "submitted_date")
    )
    paid_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("paidDate", "paid_date")
    )
    receipt_number: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("receiptNumber", "receipt_number")
    )
    notes: Optional[str] = None

    @field_validator(
        "reimbursement_id", "status", "external_claim_id", "claim_type", "benefit_type",
        "description", "receipt_number", "notes",
        mode="before",
    )
    @classmethod
    def blank_strings(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return str(v) if v is not None else None

    @field_validator("amount_approved", "amount_disapproved", mode="before")
    @classmethod
    def blank_amounts(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("amount_approved", "amount_disapproved")
    @classmethod
    def amount_not_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("amounts cannot be negative")
        return v

    @field_validator("approved_date", "submitted_date", "paid_date", mode="before")
    @classmethod
    def date_part(cls, v: Any) -> Any:
        return _coerce_date(v)


class ClaimFilters(Payload):
    category: Optional[str] = None
    source: Optional[str] = None
    status: Optional[List[str]] = None

    @field_validator("category", "source", mode="before")
    @classmethod
    def blank_strings(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("status", mode="before")
    @classmethod
    def split_status(cls, v: Any) -> Any:
        return _status_list(v)


class ListRequest(ClaimFilters):
    sort_by: Optional[str] = Field(default=None, validation_alias=AliasChoices("sortBy", "sort_by"))
    sort_order: Optional[str] = Field(default=None, validation_alias=AliasChoices("sortOrder", "sort_order"))
    limit: Optional[int] = None

    @field_validator("sort_by", "sort_order", mode="before")
    @classmethod
    def blank_sort(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("limit", mode="before")
    @classmethod
    def blank_limit(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("limit")
    @classmethod
    def limit_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("limit cannot be negative")
        return v


class SummaryRequest(ClaimFilters):
    date_from: Optional[date] = Field(default=None, validation_alias=AliasChoices("dateFrom", "date_from"))
    date_to: Optional[date] = Field(default=None, validation_alias=AliasChoices("dateTo", "date_to"))

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def date_part(cls, v: Any) -> Any:
        return _coerce_date(v)


class ReferenceQuery(Payload):
    type: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def blank_type(cls, v: Any) -> Any:
        return _blank_to_none(v)


class ReferenceItemRequest(Payload):
    type: Optional[str] = None
    value: Optional[str] = None
    display_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("displayName", "display_name")
    )
    description: Optional[str] = None

    @field_validator("type", "value", "display_name", "description", mode="before")
    @classmethod
    def blank_strings(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return str(v) if v is not None else None


class LinkRequest(Payload):
    reimbursement_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("reimbursementId", "reimbursement_id")
    )
    transaction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transactionId", "transaction_id")
    )

    @field_validator("reimbursement_id", "transaction_id", mode="before")
    @classmethod
    def blank_strings(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return str(v) if v is not None else None


class SyncNetCostRequest(Payload):
    transaction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transactionId", "transaction_id")
    )
    amount_reimbursed: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("amountReimbursed", "amount_reimbursed")
    )

    @field_validator("transaction_id", mode="before")
    @classmethod
    def blank_transaction(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return str(v) if v is not None else None

    @field_validator("amount_reimbursed", mode="before")
    @classmethod
    def blank_amount(cls, v: Any) -> Any:
        return _blank_to_none(v)
