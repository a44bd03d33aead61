import logging
from typing import Any, Dict, List, Sequence

from .base import RowStoreBase, TableNotFound

logger = logging.getLogger(__name__)


class InMemoryRowStore(RowStoreBase):
    def __init__(self) -> None:
        self._headers: Dict[str, List[str]] = {}
        self._rows: Dict[str, List[List[Any]]] = {}

    def has_table(self, name: str) -> bool:
        return name in self._headers

    def create_table(self, name: str, headers: Sequence[str]) -> None:
        if name in self._headers:
            return
        self._headers[name] = list(headers)
        self._rows[name] = []
        logger.info("Created table %s with %d columns", name, len(headers))

    def headers(self, name: str) -> List[str]:
        if name not in self._headers:
            raise TableNotFound(name)
        return list(self._headers[name])

    def read_rows(self, name: str) -> List[List[Any]]:
        if name not in self._rows:
            raise TableNotFound(name)
        return [list(row) for row in self._rows[name]]

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        if name not in self._rows:
            raise TableNotFound(name)
        self._rows[name].append(list(values))
        return len(self._rows[name]) - 1

    def update_cell(self, name: str, row_index: int, column_index: int, value: Any) -> None:
        if name not in self._rows:
            raise TableNotFound(name)
        row = self._rows[name][row_index]
        if column_index >= len(row):
            row.extend([""] * (column_index + 1 - len(row)))
        row[column_index] = value
