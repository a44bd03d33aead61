"""Result-returning entry points of the reimbursement tracker.

Every public method takes a flat payload dict and returns a JSON-serializable dict
with a ``success`` flag. Errors never propagate past this layer: tracker errors and
unexpected exceptions alike come back as ``{"success": False, "error": ...}``.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Optional

import pydantic

from .config import Settings
from .errors import ConfigurationMissing, DuplicateDetected, TrackerError, ValidationError
from .models import CLAIM_HEADERS
from .providers import BudgetSyncProviderBase
from .schemas import (
    ClaimCandidate,
    ClaimCreateRequest,
    ClaimUpdateRequest,
    LinkRequest,
    ListRequest,
    ReferenceItemRequest,
    ReferenceQuery,
    SummaryRequest,
    SyncNetCostRequest,
)
from .services import (
    ClaimRepository,
    ClaimTable,
    DuplicateMatcher,
    ReferenceCatalog,
    StatusTransitionHandler,
    SummaryAggregator,
)
from .services.claims import Clock, utc_now
from .stores import RowStoreBase

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]
Result = Dict[str, Any]


def _describe_validation_error(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        parts.append(f"{field}: {err.get('msg')}")
    return "Invalid input - " + "; ".join(parts)


def operation(func: Callable[..., Result]) -> Callable[..., Result]:
    @functools.wraps(func)
    def wrapper(self: "ReimbursementTracker", payload: Optional[Payload] = None) -> Result:
        try:
            return func(self, payload or {})
        except pydantic.ValidationError as e:
            message = _describe_validation_error(e)
            logger.warning("%s rejected: %s", func.__name__, message)
            return {"success": False, "error": message}
        except DuplicateDetected as e:
            return {
                "success": False,
                "isDuplicate": True,
                "error": e.message,
                "duplicates": e.duplicates,
                "message": "This claim appears to already exist. Use skipDuplicateCheck=true to add anyway.",
            }
        except TrackerError as e:
            logger.warning("%s failed: %s", func.__name__, e.message)
            return {"success": False, "error": e.message}
        except Exception as e:
            logger.exception("%s error", func.__name__)
            return {"success": False, "error": str(e)}

    return wrapper


class ReimbursementTracker:
    def __init__(
        self,
        settings: Settings,
        store: RowStoreBase,
        sync_provider: Optional[BudgetSyncProviderBase] = None,
        clock: Clock = utc_now,
    ):
        self.settings = settings
        self.store = store
        self.sync_provider = sync_provider
        self.catalog = ReferenceCatalog(store)
        self.matcher = DuplicateMatcher(store)
        self.claims = ClaimRepository(
            store,
            self.catalog,
            self.matcher,
            clock=clock,
            default_limit=settings.list_default_limit,
        )
        self.status = StatusTransitionHandler(store, sync_provider=sync_provider, clock=clock)
        self.summary = SummaryAggregator(ClaimTable(store))

    @operation
    def ping(self, payload: Payload) -> Result:
        return {"success": True, "message": "ReimbursementTracker API is working!"}

    @operation
    def get_config(self, payload: Payload) -> Result:
        return {
            "success": True,
            "databaseUrl": self.settings.database_url,
            "budgetApiUrl": self.settings.budget_api_url,
            "hasStore": self.store is not None,
            "hasBudgetIntegration": self.sync_provider is not None,
        }

    @operation
    def initialize(self, payload: Payload) -> Result:
        ClaimTable(self.store).ensure()
        return {"success": True, "message": "Reimbursements sheet initialized", "headers": list(CLAIM_HEADERS)}

    @operation
    def initialize_reference_data(self, payload: Payload) -> Result:
        return {"success": True, "message": self.catalog.initialize()}

    @operation
    def add_reimbursement(self, payload: Payload) -> Result:
        req = ClaimCreateRequest.model_validate(payload)
        created = self.claims.create(req)
        return {"success": True, "message": "Reimbursement added successfully", **created}

    @operation
    def check_duplicate(self, payload: Payload) -> Result:
        candidate = ClaimCandidate.model_validate(payload)
        matches = self.claims.check_duplicate(candidate)
        return {
            "success": True,
            "isDuplicate": len(matches) > 0,
            "duplicateCount": len(matches),
            "duplicates": [m.to_dict() for m in matches],
        }

    @operation
    def update_status(self, payload: Payload) -> Result:
        req = ClaimUpdateRequest.model_validate(payload)
        updated = self.status.update(req)
        return {
            "success": True,
            "message": "Reimbursement updated: " + ", ".join(updated["updatedFields"]),
            **updated,
        }

    @operation
    def list_reimbursements(self, payload: Payload) -> Result:
        req = ListRequest.model_validate(payload)
        page, total = self.claims.list(req)
        return {"success": True, "reimbursements": page, "count": len(page), "totalCount": total}

    @operation
    def get_summary(self, payload: Payload) -> Result:
        req = SummaryRequest.model_validate(payload)
        return {"success": True, **self.summary.summarize(req)}

    @operation
    def get_reference_data(self, payload: Payload) -> Result:
        query = ReferenceQuery.model_validate(payload)
        entries = self.catalog.get_entries(query.type)
        grouped: Dict[str, list] = {}
        for entry in entries:
            grouped.setdefault(entry.type, []).append(entry.to_dict())
        return {
            "success": True,
            "referenceData": [e.to_dict() for e in entries],
            "grouped": grouped,
            "count": len(entries),
        }

    @operation
    def add_reference_item(self, payload: Payload) -> Result:
        req = ReferenceItemRequest.model_validate(payload)
        entry = self.catalog.add_entry(req.type, req.value, req.display_name, req.description)
        return {
            "success": True,
            "message": f'{entry.type} "{entry.value}" added to reference data',
            "item": {"type": entry.type, "value": entry.value, "displayName": entry.display_name},
        }

    @operation
    def link_to_external_system(self, payload: Payload) -> Result:
        req = LinkRequest.model_validate(payload)
        linked = self.claims.link(req.reimbursement_id, req.transaction_id)
        return {"success": True, "message": "Linked to budget transaction", **linked}

    @operation
    def sync_net_cost(self, payload: Payload) -> Result:
        if self.sync_provider is None:
            raise ConfigurationMissing("Budget system API URL not configured")
        req = SyncNetCostRequest.model_validate(payload)
        if not req.transaction_id:
            raise ValidationError("transactionId is required")
        if req.amount_reimbursed is None:
            raise ValidationError("amountReimbursed is required")
        return self.sync_provider.update_net_cost(req.transaction_id, req.amount_reimbursed)
