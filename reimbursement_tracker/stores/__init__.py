from .base import RowStoreBase, TableNotFound
from .memory import InMemoryRowStore
from .sql import SqlRowStore

__all__ = [
    "RowStoreBase",
    "TableNotFound",
    "InMemoryRowStore",
    "SqlRowStore",
]
