"""Unit tests for crud/sql_repo.py and crud/memory_repo.py"""

from uuid import uuid4

import pytest

from mdreview.crud.database import init_db, make_engine
from mdreview.crud.memory_repo import MemoryExplanationRepo
from mdreview.crud.sql_repo import SQLExplanationRepo
from mdreview.errors import ExplanationNotFoundError
from mdreview.lifecycle.state import ExplanationStatus


@pytest.fixture(name="repo", params=["sql", "memory"])
def repo_fixture(request):
    """Each explanation store implementation, empty."""
    if request.param == "memory":
        return MemoryExplanationRepo()
    engine = make_engine("sqlite://")
    init_db(engine)
    return SQLExplanationRepo(engine, max_versions=5)


def test_create_then_get(repo):
    """A created explanation can be fetched by its id."""
    created = repo.create("# Hi", "Greeting", ExplanationStatus.published)
    fetched = repo.get(created.id)
    assert fetched is not None
    assert (fetched.content, fetched.title, fetched.status) == ("# Hi", "Greeting", ExplanationStatus.published)


def test_get_unknown_returns_none(repo):
    """Unknown ids return None rather than raising."""
    assert repo.get(str(uuid4())) is None


def test_save_overwrites(repo):
    """save replaces content, title, and status."""
    created = repo.create("# Hi", "Greeting")
    saved = repo.save(created.id, "# Hello", "Greeting 2", ExplanationStatus.published)
    assert saved.id == created.id
    assert repo.get(created.id).content == "# Hello"
    assert repo.get(created.id).status == ExplanationStatus.published


def test_save_unknown_raises(repo):
    """save raises ExplanationNotFoundError for an unknown id."""
    with pytest.raises(ExplanationNotFoundError):
        repo.save(str(uuid4()), "x", "y", ExplanationStatus.draft)


def test_sql_repo_persists_across_sessions():
    """The in-memory SQL engine keeps rows between repo calls."""
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    repo = SQLExplanationRepo(engine)
    created = repo.create("body", "title")
    repo.save(created.id, "body 2", "title", ExplanationStatus.draft)
    assert SQLExplanationRepo(engine).get(created.id).content == "body 2"
