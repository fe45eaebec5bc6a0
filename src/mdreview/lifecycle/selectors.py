"""Read-only accessors that work in every lifecycle phase"""

from typing import Optional

from mdreview.lifecycle.state import (
    DocumentPhase,
    Editing,
    ErrorState,
    ExplanationStatus,
    MutationOp,
    PageLifecycleState,
    Saving,
    Streaming,
)


def _document(state: PageLifecycleState) -> Optional[DocumentPhase]:
    """The document slice held by the state, directly or as a saving/error draft."""
    if isinstance(state, DocumentPhase):
        return state
    if isinstance(state, (Saving, ErrorState)):
        return state.draft
    return None


def get_content(state: PageLifecycleState) -> str:
    if isinstance(state, Streaming):
        return state.content
    doc = _document(state)
    return doc.content if doc else ""


def get_title(state: PageLifecycleState) -> str:
    if isinstance(state, Streaming):
        return state.title
    doc = _document(state)
    return doc.title if doc else ""


def get_status(state: PageLifecycleState) -> ExplanationStatus:
    doc = _document(state)
    return doc.status if doc else ExplanationStatus.draft


def get_original_content(state: PageLifecycleState) -> str:
    doc = _document(state)
    return doc.original_content if doc else ""


def get_original_title(state: PageLifecycleState) -> str:
    doc = _document(state)
    return doc.original_title if doc else ""


def get_original_status(state: PageLifecycleState) -> ExplanationStatus:
    doc = _document(state)
    return doc.original_status if doc else ExplanationStatus.draft


def has_unsaved_changes(state: PageLifecycleState) -> bool:
    doc = _document(state)
    return doc.has_unsaved_changes if doc else False


def is_edit_mode(state: PageLifecycleState) -> bool:
    return isinstance(state, Editing)


def is_streaming(state: PageLifecycleState) -> bool:
    return isinstance(state, Streaming)


def is_saving(state: PageLifecycleState) -> bool:
    return isinstance(state, Saving)


def get_error(state: PageLifecycleState) -> Optional[str]:
    return state.error if isinstance(state, ErrorState) else None


def get_pending_mutations(state: PageLifecycleState) -> tuple[MutationOp, ...]:
    return state.pending_mutations if isinstance(state, DocumentPhase) else ()


def get_processing_mutation(state: PageLifecycleState) -> Optional[MutationOp]:
    return state.processing_mutation if isinstance(state, DocumentPhase) else None


def get_last_mutation_error(state: PageLifecycleState) -> Optional[str]:
    return state.last_mutation_error if isinstance(state, DocumentPhase) else None


def has_pending_mode_toggle(state: PageLifecycleState) -> bool:
    return state.pending_mode_toggle if isinstance(state, DocumentPhase) else False


def can_save(state: PageLifecycleState) -> bool:
    """Only editing with an idle mutation queue can start a save."""
    return (
        isinstance(state, Editing)
        and not state.pending_mutations
        and state.processing_mutation is None
    )
