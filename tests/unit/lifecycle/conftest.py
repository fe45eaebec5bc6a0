"""Shared fixtures for lifecycle unit tests"""

import pytest

from mdreview.lifecycle.actions import EnterEditMode, LoadExplanation
from mdreview.lifecycle.reducer import reduce
from mdreview.lifecycle.state import ExplanationStatus, Idle


@pytest.fixture(name="viewing")
def viewing_fixture():
    """A published explanation loaded into viewing mode."""
    return reduce(Idle(), LoadExplanation("Body", "Title", ExplanationStatus.published))


@pytest.fixture(name="editing")
def editing_fixture(viewing):
    return reduce(viewing, EnterEditMode())


@pytest.fixture(name="run")
def run_fixture():
    """Return a function folding a sequence of actions over a starting state."""
    def _run(state, *actions):
        for action in actions:
            state = reduce(state, action)
        return state
    return _run
