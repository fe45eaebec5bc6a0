"""Engine construction and schema creation"""

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from mdreview.crud import models  # noqa: F401  registers tables on SQLModel.metadata


_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def make_engine(db_url: str):
    """Create an engine; in-memory SQLite shares a single connection so tables persist across sessions."""
    if db_url in _MEMORY_URLS:
        return create_engine(db_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(db_url, echo=False)


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)
