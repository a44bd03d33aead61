import logging
from typing import Any, Dict

import httpx

from .base import BudgetSyncProviderBase

logger = logging.getLogger(__name__)

NET_COST_ACTION = "updateTransactionNetCost"


class HttpBudgetSyncProvider(BudgetSyncProviderBase):
    def __init__(self, api_url: str, timeout: float = 30.0):
        self.api_url = api_url
        self.timeout = timeout

    def update_net_cost(self, transaction_id: str, amount_reimbursed: float) -> Dict[str, Any]:
        logger.info(
            "Syncing NetCost: transaction_id=%s, amount_reimbursed=%s",
            transaction_id, amount_reimbursed
        )
        resp = httpx.get(
            self.api_url,
            params={
                "action": NET_COST_ACTION,
                "transactionId": transaction_id,
                "amountReimbursed": amount_reimbursed,
            },
            timeout=self.timeout,
            follow_redirects=True,
        )
        try:
            return resp.json()
        except ValueError:
            logger.warning(
                "Budget sync returned non-JSON response: status=%s", resp.status_code
            )
            return {
                "success": False,
                "error": f"Budget system returned non-JSON response (HTTP {resp.status_code})",
            }
