"""Unit tests for session.py (ReviewSession over the in-memory store)"""

import pytest

from mdreview.crud.memory_repo import MemoryExplanationRepo
from mdreview.lifecycle import selectors
from mdreview.lifecycle.state import Editing, ErrorState, ExplanationStatus, Idle, Viewing
from mdreview.session import ReviewSession


class _FailingSaveRepo(MemoryExplanationRepo):
    def save(self, explanation_id, content, title, status):
        raise RuntimeError("disk full")


@pytest.fixture(name="repo")
def repo_fixture():
    return MemoryExplanationRepo()


@pytest.fixture(name="explanation_id")
def explanation_id_fixture(repo):
    return repo.create("The cat sat.", "Cats", ExplanationStatus.published).id


@pytest.fixture(name="session")
def session_fixture(repo, explanation_id):
    """A session with the sample explanation loaded."""
    s = ReviewSession(repo)
    s.load(explanation_id)
    return s


# --- loading ---

def test_load_enters_viewing(session):
    assert isinstance(session.state, Viewing)
    assert selectors.get_content(session.state) == "The cat sat."


def test_load_unknown_id_is_an_error(repo):
    session = ReviewSession(repo)
    session.load("nope")
    assert isinstance(session.state, ErrorState)
    assert session.state.error == "Explanation nope not found"


def test_generate_streams_then_views(repo):
    session = ReviewSession(repo)
    session.generate(["Hello", " world"], title="Greeting")
    assert isinstance(session.state, Viewing)
    assert selectors.get_content(session.state) == "Hello world"
    assert session.explanation_id is None


def test_generate_stream_failure(repo):
    def chunks():
        yield "Hel"
        raise ConnectionError("dropped")

    session = ReviewSession(repo)
    session.generate(chunks())
    assert isinstance(session.state, ErrorState)
    assert session.state.error == "Generation failed: dropped"


def test_generated_explanation_is_created_on_save(repo):
    session = ReviewSession(repo)
    session.generate(["# New"], title="Fresh")
    session.enter_edit_mode()
    session.save()
    assert isinstance(session.state, Viewing)
    assert session.explanation_id is not None
    assert repo.get(session.explanation_id).content == "# New"


# --- suggestions ---

def test_suggest_enters_editing_with_markup(session):
    result = session.suggest(revised="The dog sat.")
    assert result.markup == "The {--cat--}{++dog++} sat."
    assert isinstance(session.state, Editing)
    assert selectors.get_content(session.state) == result.markup
    assert session.registry.keys_in_order() == ["diff-1", "diff-2"]
    assert session.has_pending_suggestions


def test_suggest_uses_suggest_function(repo, explanation_id):
    calls = []

    def suggest(current, instruction):
        calls.append((current, instruction))
        return "The cat sat down."

    session = ReviewSession(repo, suggest=suggest)
    session.load(explanation_id)
    result = session.suggest("Be precise")
    assert calls == [("The cat sat.", "Be precise")]
    assert result.markup == "The cat sat{++ down++}."


def test_suggest_without_function_is_an_error(session):
    assert session.suggest("anything") is None
    assert isinstance(session.state, ErrorState)
    assert session.state.error == "no suggest function configured"
    assert session.state.draft.content == "The cat sat."


def test_suggest_function_failure_preserves_draft(repo, explanation_id):
    def suggest(current, instruction):
        raise RuntimeError("rate limited")

    session = ReviewSession(repo, suggest=suggest)
    session.load(explanation_id)
    assert session.suggest() is None
    assert session.state.error == "AI suggestion failed: rate limited"
    assert session.state.draft.content == "The cat sat."


def test_suggest_rejects_non_text_revision(repo, explanation_id):
    session = ReviewSession(repo, suggest=lambda current, instruction: None)
    session.load(explanation_id)
    assert session.suggest() is None
    assert session.state.error.startswith("revised: ")


def test_suggest_outside_document_is_ignored(repo):
    session = ReviewSession(repo)
    assert session.suggest(revised="x") is None
    assert session.state == Idle()


def test_new_suggestion_discards_pending_nodes(session):
    session.suggest(revised="The dog sat.")
    result = session.suggest(revised="The cow sat.")
    assert result.markup == "The {--cat--}{++cow++} sat."


# --- accept / reject ---

def test_accept_nodes_one_at_a_time(session):
    session.suggest(revised="The dog sat.")
    session.accept("diff-1")
    assert selectors.get_content(session.state) == "The {++dog++} sat."
    assert session.registry.keys_in_order() == ["diff-2"]
    session.accept("diff-2")
    assert selectors.get_content(session.state) == "The dog sat."
    assert not session.has_pending_suggestions
    assert selectors.get_pending_mutations(session.state) == ()


def test_reject_all_restores_original(session):
    session.suggest(revised="The dog sat.")
    session.reject_all()
    assert selectors.get_content(session.state) == "The cat sat."
    assert selectors.has_unsaved_changes(session.state) is False


def test_accept_all_matches_revision(session):
    result = session.suggest(revised="# Title\n\nThe dog sat.\n\n- one\n- two")
    session.accept_all()
    assert selectors.get_content(session.state) == result.revised


def test_unknown_key_records_mutation_error(session):
    session.suggest(revised="The dog sat.")
    session.accept("diff-9")
    assert "diff-9" in selectors.get_last_mutation_error(session.state)
    assert selectors.get_content(session.state) == "The {--cat--}{++dog++} sat."
    assert isinstance(session.state, Editing)


def test_mode_toggle_waits_for_queue(session):
    session.suggest(revised="The dog sat.")
    session.accept("diff-1", drain=False)
    session.toggle_mode()
    assert isinstance(session.state, Editing)
    assert selectors.has_pending_mode_toggle(session.state)
    session.process_mutations()
    assert isinstance(session.state, Viewing)
    assert selectors.get_content(session.state) == "The {++dog++} sat."


def test_update_content_refreshes_registry(session):
    session.suggest(revised="The dog sat.")
    session.update_content("The {--cat--} sat.")
    assert session.registry.keys_in_order() == ["diff-1"]


# --- save ---

def test_save_blocked_while_suggestions_pending(session, repo):
    session.suggest(revised="The dog sat.")
    assert not session.can_save
    session.save()
    assert isinstance(session.state, Editing)
    assert repo.saves == 0


def test_save_after_resolution_rebaselines(session, repo, explanation_id):
    session.suggest(revised="The dog sat.")
    session.accept_all()
    assert session.can_save
    session.save()
    assert isinstance(session.state, Viewing)
    assert session.state.original_content == "The dog sat."
    assert session.state.has_unsaved_changes is False
    stored = repo.get(explanation_id)
    assert stored.content == "The dog sat."
    assert stored.status == ExplanationStatus.draft


def test_save_failure_keeps_draft():
    repo = _FailingSaveRepo()
    explanation_id = repo.create("The cat sat.", "Cats").id
    session = ReviewSession(repo)
    session.load(explanation_id)
    session.enter_edit_mode()
    session.update_content("The cat sat down.")
    session.save()
    assert isinstance(session.state, ErrorState)
    assert session.state.error == "Save failed: disk full"
    assert session.state.draft.content == "The cat sat down."


def test_reset(session):
    session.suggest(revised="The dog sat.")
    session.reset()
    assert session.state == Idle()
    assert session.document is None
    assert len(session.registry) == 0
