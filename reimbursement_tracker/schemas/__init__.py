from .requests import (
    ClaimCandidate,
    ClaimCreateRequest,
    ClaimFilters,
    ClaimUpdateRequest,
    LinkRequest,
    ListRequest,
    ReferenceItemRequest,
    ReferenceQuery,
    SummaryRequest,
    SyncNetCostRequest,
)

__all__ = [
    "ClaimCandidate",
    "ClaimCreateRequest",
    "ClaimFilters",
    "ClaimUpdateRequest",
    "LinkRequest",
    "ListRequest",
    "ReferenceItemRequest",
    "ReferenceQuery",
    "SummaryRequest",
    "SyncNetCostRequest",
]
