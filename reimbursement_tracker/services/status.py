from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..models import APPROVED_STATUSES, STATUS_VALUES, ClaimStatus, parse_status
from ..providers import BudgetSyncProviderBase
from ..schemas import ClaimUpdateRequest
from ..stores import RowStoreBase
from .claims import ClaimTable, Clock, utc_now

logger = logging.getLogger(__name__)

NOTES_SEPARATOR = " | "


class StatusTransitionHandler:
    """Applies status and field changes to a stored claim.

    Reaching ``approved`` or ``paid`` stamps ApprovedDate once; reaching ``paid``
    stamps PaidDate and pushes the reimbursed amount to the budgeting system when
    the claim is linked to a budget transaction. A failed push is reported back
    but never undoes the status change.
    """

    def __init__(
        self,
        store: RowStoreBase,
        sync_provider: Optional[BudgetSyncProviderBase] = None,
        clock: Clock = utc_now,
    ):
        self.table = ClaimTable(store)
        self.sync_provider = sync_provider
        self.clock = clock

    def update(self, req: ClaimUpdateRequest) -> Dict[str, Any]:
        if not req.reimbursement_id:
            raise ValidationError("reimbursementId is required")

        new_status: Optional[ClaimStatus] = None
        if req.status:
            new_status = parse_status(req.status)
            if new_status is None:
                raise ValidationError("Invalid status. Must be one of: " + ", ".join(STATUS_VALUES))

        idx, record = self.table.find(req.reimbursement_id)
        now = self.clock()
        today = now.date().isoformat()
        updated_fields: List[str] = []
        result: Dict[str, Any] = {}

        def write(column: str, value: Any, description: str) -> None:
            self.table.set(idx, record, column, value)
            updated_fields.append(description)

        approved_date_stamped = False
        paid_date_stamped = False

        if new_status is not None:
            write("Status", new_status.value, f"status -> {new_status.value}")

            if new_status in APPROVED_STATUSES and not record.has_approved_date:
                approved = req.approved_date.isoformat() if req.approved_date else today
                write("ApprovedDate", approved, "approvedDate")
                approved_date_stamped = True

            if new_status == ClaimStatus.paid:
                if req.paid_date is not None:
                    write("PaidDate", req.paid_date.isoformat(), "paidDate")
                    paid_date_stamped = True
                elif not record.has_paid_date:
                    write("PaidDate", today, "paidDate")
                    paid_date_stamped = True

                if record.linked_transaction_id and self.sync_provider is not None:
                    amount = req.amount_approved or record.amount_claimed
                    result.update(self._sync(record.id, record.linked_transaction_id, amount))

        if req.external_claim_id:
            write("ClaimID", req.external_claim_id, f"claimId -> {req.external_claim_id}")
        if req.claim_type:
            write("ClaimType", req.claim_type, f"claimType -> {req.claim_type}")
        if req.benefit_type:
            write("BenefitType", req.benefit_type, f"benefitType -> {req.benefit_type}")
        if req.description:
            write("Description", req.description, "description")
        if req.amount_approved is not None:
            write("AmountApproved", req.amount_approved, f"amountApproved -> {req.amount_approved}")
        if req.amount_disapproved is not None:
            write("AmountDisapproved", req.amount_disapproved, f"amountDisapproved -> {req.amount_disapproved}")

        # Explicit dates overwrite, unless already written by the status stamp above
        if req.approved_date and not approved_date_stamped:
            write("ApprovedDate", req.approved_date.isoformat(), f"approvedDate -> {req.approved_date.isoformat()}")
        if req.submitted_date:
            write("SubmittedDate", req.submitted_date.isoformat(), f"submittedDate -> {req.submitted_date.isoformat()}")
        if req.paid_date and not paid_date_stamped:
            write("PaidDate", req.paid_date.isoformat(), f"paidDate -> {req.paid_date.isoformat()}")

        if req.receipt_number:
            write("ReceiptNumber", req.receipt_number, f"receiptNumber -> {req.receipt_number}")

        if req.notes:
            notes = record.notes + NOTES_SEPARATOR + req.notes if record.notes else req.notes
            write("Notes", notes, "notes")

        self.table.set(idx, record, "UpdatedAt", now.isoformat())

        logger.info(
            "Reimbursement updated: reimbursement_id=%s, fields=%s",
            record.id, ", ".join(updated_fields) or "none"
        )

        result.update({
            "reimbursementId": record.id,
            "newStatus": new_status.value if new_status is not None else record.status,
            "updatedFields": updated_fields,
        })
        return result

    def _sync(self, claim_id: str, transaction_id: str, amount: float) -> Dict[str, Any]:
        try:
            sync_result = self.sync_provider.update_net_cost(transaction_id, amount)
        except Exception as e:
            logger.warning(
                "NetCost sync failed: reimbursement_id=%s, transaction_id=%s, error=%s",
                claim_id, transaction_id, e
            )
            return {"syncWarning": f"NetCost sync failed: {e}"}

        if not isinstance(sync_result, dict):
            logger.warning(
                "NetCost sync returned no result: reimbursement_id=%s, transaction_id=%s, result=%r",
                claim_id, transaction_id, sync_result
            )
            return {
                "syncResult": sync_result,
                "syncWarning": "NetCost sync failed: unexpected response from budget system",
            }

        if not sync_result.get("success", False):
            logger.warning(
                "NetCost sync rejected: reimbursement_id=%s, transaction_id=%s, error=%s",
                claim_id, transaction_id, sync_result.get("error")
            )
            return {
                "syncResult": sync_result,
                "syncWarning": "NetCost sync failed: " + str(sync_result.get("error", "unknown error")),
            }

        logger.info("NetCost synced: reimbursement_id=%s, transaction_id=%s, amount=%s",
                    claim_id, transaction_id, amount)
        return {"syncResult": sync_result}
