"""Database utilities - engine and session."""

from src.backoffice.core.db.engine import dispose_engine, get_engine
from src.backoffice.core.db.session import get_session

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
]
