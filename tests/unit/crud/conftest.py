"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdreview.core.utils.hashing import sha256
from mdreview.crud.models import Explanation
from mdreview.lifecycle.state import ExplanationStatus


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="explanation")
def explanation_fixture(session):
    """A minimal Explanation persisted to the session."""
    e = Explanation(
        title="Hello",
        content="# Hello\n\nWorld",
        status=ExplanationStatus.published,
        hash=sha256("# Hello\n\nWorld"),
    )
    session.add(e)
    session.flush()
    return e
