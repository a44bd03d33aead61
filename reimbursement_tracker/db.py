from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from .config import get_settings


def make_engine(database_url: str, **kwargs) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        echo=False,
        connect_args=connect_args,
        **kwargs,
    )


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = make_engine(get_settings().database_url)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    # Registers the sheet tables on SQLModel.metadata
    from .stores import sql  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())


@contextmanager
def session_scope(engine: Optional[Engine] = None) -> Iterator[Session]:
    session = Session(engine or get_engine())
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
