from abc import ABC, abstractmethod
from typing import Any, List, Sequence


class TableNotFound(KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(name)


class RowStoreBase(ABC):
    """Named tables of rows under a fixed header row.

    Row indices are 0-based positions among data rows; the header row is not counted.
    """

    @abstractmethod
    def has_table(self, name: str) -> bool:
        pass

    @abstractmethod
    def create_table(self, name: str, headers: Sequence[str]) -> None:
        pass

    @abstractmethod
    def headers(self, name: str) -> List[str]:
        pass

    @abstractmethod
    def read_rows(self, name: str) -> List[List[Any]]:
        pass

    @abstractmethod
    def append_row(self, name: str, values: Sequence[Any]) -> int:
        pass

    @abstractmethod
    def update_cell(self, name: str, row_index: int, column_index: int, value: Any) -> None:
        pass

    def row_count(self, name: str) -> int:
        return len(self.read_rows(name))
