from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlmodel import Field, SQLModel, select

from ..db import session_scope
from .base import RowStoreBase, TableNotFound

logger = logging.getLogger(__name__)


class SheetTable(SQLModel, table=True):
    __tablename__ = "sheet_tables"

    name: str = Field(primary_key=True)

    # JSON-encoded list of column names, in column order
    headers_json: str


class SheetRow(SQLModel, table=True):
    __tablename__ = "sheet_rows"

    id: Optional[int] = Field(default=None, primary_key=True)
    table_name: str = Field(foreign_key="sheet_tables.name", index=True)
    position: int = Field(index=True)

    # JSON-encoded list of cell values
    values_json: str


class SqlRowStore(RowStoreBase):
    """Row store persisted in a relational database through SQLModel."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine

    def _table(self, session, name: str) -> SheetTable:
        table = session.exec(select(SheetTable).where(SheetTable.name == name)).first()
        if table is None:
            raise TableNotFound(name)
        return table

    def has_table(self, name: str) -> bool:
        with session_scope(self.engine) as session:
            return session.exec(select(SheetTable).where(SheetTable.name == name)).first() is not None

    def create_table(self, name: str, headers: Sequence[str]) -> None:
        with session_scope(self.engine) as session:
            existing = session.exec(select(SheetTable).where(SheetTable.name == name)).first()
            if existing is not None:
                return
            session.add(SheetTable(name=name, headers_json=json.dumps(list(headers))))
        logger.info("Created table %s with %d columns", name, len(headers))

    def headers(self, name: str) -> List[str]:
        with session_scope(self.engine) as session:
            return json.loads(self._table(session, name).headers_json)

    def read_rows(self, name: str) -> List[List[Any]]:
        with session_scope(self.engine) as session:
            self._table(session, name)
            rows = session.exec(
                select(SheetRow)
                .where(SheetRow.table_name == name)
                .order_by(SheetRow.position)
            ).all()
            return [json.loads(row.values_json) for row in rows]

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        with session_scope(self.engine) as session:
            self._table(session, name)
            position = session.exec(
                select(func.count()).select_from(SheetRow).where(SheetRow.table_name == name)
            ).one()
            session.add(SheetRow(
                table_name=name,
                position=position,
                values_json=json.dumps(list(values), default=str),
            ))
            return position

    def update_cell(self, name: str, row_index: int, column_index: int, value: Any) -> None:
        with session_scope(self.engine) as session:
            self._table(session, name)
            row = session.exec(
                select(SheetRow)
                .where(SheetRow.table_name == name)
                .where(SheetRow.position == row_index)
            ).first()
            if row is None:
                raise IndexError(f"Row {row_index} not found in table {name}")
            values = json.loads(row.values_json)
            if column_index >= len(values):
                values.extend([""] * (column_index + 1 - len(values)))
            values[column_index] = value
            row.values_json = json.dumps(values, default=str)
            session.add(row)
