import logging
from typing import Any, Dict, List, Tuple

from .base import BudgetSyncProviderBase

logger = logging.getLogger(__name__)


class SimulatedBudgetSyncProvider(BudgetSyncProviderBase):
    def __init__(self, force_fail: bool = False):
        self.force_fail = force_fail
        self.calls: List[Tuple[str, float]] = []

    def update_net_cost(self, transaction_id: str, amount_reimbursed: float) -> Dict[str, Any]:
        self.calls.append((transaction_id, amount_reimbursed))

        if self.force_fail:
            logger.warning(
                f"Simulated NetCost sync FAILED: transaction={transaction_id}, amount={amount_reimbursed}"
            )
            return {"success": False, "error": f"Transaction not found: {transaction_id}"}

        logger.info(
            f"Simulated NetCost sync SUCCESS: transaction={transaction_id}, amount={amount_reimbursed}"
        )
        return {
            "success": True,
            "transactionId": transaction_id,
            "amountReimbursed": amount_reimbursed,
        }

    def reset(self) -> None:
        self.calls.clear()
        logger.info("Simulated budget sync state reset")
