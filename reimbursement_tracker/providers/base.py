from abc import ABC, abstractmethod
from typing import Any, Dict


class BudgetSyncProviderBase(ABC):
    """One-way sync of reimbursed amounts into the external budgeting system."""

    @abstractmethod
    def update_net_cost(self, transaction_id: str, amount_reimbursed: float) -> Dict[str, Any]:
        pass
