from .claims import ClaimRepository, ClaimTable
from .duplicates import DuplicateMatch, DuplicateMatcher
from .reference import ReferenceCatalog
from .status import StatusTransitionHandler
from .summary import SummaryAggregator

__all__ = [
    "ClaimRepository",
    "ClaimTable",
    "DuplicateMatch",
    "DuplicateMatcher",
    "ReferenceCatalog",
    "StatusTransitionHandler",
    "SummaryAggregator",
]
