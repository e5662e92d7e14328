"""Database setup and session management."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlmodel import Session, SQLModel, create_engine

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine


def init_db(db_path: str | Path) -> Engine:
    """Create the engine and all tables.

    Args:
        db_path: Path to the SQLite database file.
    """
    url = f"sqlite:///{db_path}"
    # Store calls run in worker threads via asyncio.to_thread
    engine = create_engine(url, echo=False, connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    return engine


def get_session(engine: Engine) -> Session:
    """Get a database session."""
    return Session(engine)
