"""Page lifecycle reducer: (state, action) -> state, pure and synchronous

An action dispatched in a phase that does not accept it is logged as a
warning and leaves the state unchanged. Objects that are not lifecycle
actions raise TypeError.
"""

from dataclasses import replace
from typing import Callable

from mdreview.core.utils.logger import get_logger
from mdreview.lifecycle import queue
from mdreview.lifecycle.actions import (
    ApplyAISuggestion,
    CompleteMutation,
    EnterEditMode,
    ExitEditMode,
    FailMutation,
    LoadExplanation,
    PageError,
    PageLifecycleAction,
    QueueMutation,
    RequestModeToggle,
    Reset,
    SaveSuccess,
    StartGeneration,
    StartMutation,
    StartSave,
    StartStreaming,
    StreamContent,
    StreamTitle,
    UpdateContent,
    UpdateTitle,
)
from mdreview.lifecycle.state import (
    DocumentPhase,
    Editing,
    ErrorState,
    ExplanationStatus,
    Idle,
    Loading,
    MutationOp,
    PageLifecycleState,
    Saving,
    Streaming,
    Viewing,
    displayed_status,
    to_editing,
    to_viewing,
    with_changes,
)


logger = get_logger(__name__)


def _ignored(state: PageLifecycleState, action, reason: str) -> PageLifecycleState:
    logger.warning("%s ignored in phase '%s': %s", action.type, state.phase.value, reason)
    return state


# --- generation & streaming ---

def _start_generation(state, action):
    if isinstance(state, (Idle, Viewing, Editing, ErrorState)):
        return Loading()
    return _ignored(state, action, "a generation or save is already in progress")


def _start_streaming(state, action):
    if isinstance(state, Loading):
        return Streaming()
    return _ignored(state, action, "expected phase 'loading'")


def _stream_content(state, action):
    if isinstance(state, Streaming):
        return replace(state, content=action.content)
    return _ignored(state, action, "expected phase 'streaming'")


def _stream_title(state, action):
    if isinstance(state, Streaming):
        return replace(state, title=action.title)
    return _ignored(state, action, "expected phase 'streaming'")


def _load_explanation(state, action):
    status = ExplanationStatus(action.status)
    return Viewing(
        content=action.content,
        title=action.title,
        status=status,
        original_content=action.content,
        original_title=action.title,
        original_status=status,
    )


# --- modes & edits ---

def _enter_edit_mode(state, action):
    if isinstance(state, Viewing):
        return to_editing(state)
    return _ignored(state, action, "expected phase 'viewing'")


def _exit_edit_mode(state, action):
    if isinstance(state, Editing):
        return to_viewing(state)
    return _ignored(state, action, "expected phase 'editing'")


def _update_content(state, action):
    if isinstance(state, Editing):
        return with_changes(state, content=action.content)
    return _ignored(state, action, "expected phase 'editing'")


def _update_title(state, action):
    if isinstance(state, Editing):
        return with_changes(state, title=action.title)
    return _ignored(state, action, "expected phase 'editing'")


def _apply_ai_suggestion(state, action):
    if not isinstance(state, (Viewing, Editing)):
        return _ignored(state, action, "no document is loaded")
    return Editing(**{
        **state.as_fields(),
        "content": action.content,
        "has_unsaved_changes": True,
        "status": displayed_status(state.original_status, True),
        "pending_mutations": (),
        "processing_mutation": None,
        "pending_mode_toggle": False,
        "last_mutation_error": None,
    })


# --- save ---

def _start_save(state, action):
    if not isinstance(state, Editing):
        return _ignored(state, action, "expected phase 'editing'")
    if not queue.is_idle(state):
        return _ignored(state, action, "diff mutations are still pending")
    return Saving(draft=state)


def _save_success(state, action):
    # The page leaves 'saving' by navigating or reloading; nothing to record here.
    return state


# --- errors & reset ---

def _error(state, action):
    if isinstance(state, DocumentPhase):
        return ErrorState(error=action.error, draft=state)
    if isinstance(state, Saving):
        return ErrorState(error=action.error, draft=state.draft)
    return ErrorState(error=action.error)


def _reset(state, action):
    return Idle()


# --- mutation queue ---

def _queue_mutation(state, action):
    if not isinstance(state, DocumentPhase):
        return _ignored(state, action, "no diff nodes are addressable")
    op = MutationOp(id=action.id, type=action.mutation_type, node_key=action.node_key)
    return queue.enqueue(state, op)


def _start_mutation(state, action):
    if not isinstance(state, DocumentPhase):
        return _ignored(state, action, "no diff nodes are addressable")
    new = queue.start(state, action.id)
    return new if new is not None else _ignored(state, action, f"{action.id} is not the next pending mutation")


def _complete_mutation(state, action):
    if not isinstance(state, DocumentPhase):
        return _ignored(state, action, "no diff nodes are addressable")
    new = queue.complete(state, action.id, action.new_content)
    return new if new is not None else _ignored(state, action, f"{action.id} is not processing")


def _fail_mutation(state, action):
    if not isinstance(state, DocumentPhase):
        return _ignored(state, action, "no diff nodes are addressable")
    new = queue.fail(state, action.id, action.error)
    return new if new is not None else _ignored(state, action, f"{action.id} is not processing")


def _request_mode_toggle(state, action):
    if not isinstance(state, DocumentPhase):
        return _ignored(state, action, "expected phase 'viewing' or 'editing'")
    return queue.request_toggle(state)


_HANDLERS: dict[type, Callable] = {
    StartGeneration: _start_generation,
    StartStreaming: _start_streaming,
    StreamContent: _stream_content,
    StreamTitle: _stream_title,
    LoadExplanation: _load_explanation,
    EnterEditMode: _enter_edit_mode,
    ExitEditMode: _exit_edit_mode,
    UpdateContent: _update_content,
    UpdateTitle: _update_title,
    StartSave: _start_save,
    SaveSuccess: _save_success,
    PageError: _error,
    Reset: _reset,
    QueueMutation: _queue_mutation,
    StartMutation: _start_mutation,
    CompleteMutation: _complete_mutation,
    FailMutation: _fail_mutation,
    RequestModeToggle: _request_mode_toggle,
    ApplyAISuggestion: _apply_ai_suggestion,
}


def reduce(state: PageLifecycleState, action: PageLifecycleAction) -> PageLifecycleState:
    """Return the state that results from applying action to state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"not a lifecycle action: {action!r}")
    return handler(state, action)
