"""FIFO mutation queue carried by the viewing/editing phases

All functions are pure: they take a DocumentPhase and return a new one, or
None when the request breaks queue discipline (the reducer then logs and
keeps the old state). At most one op is ever processing, and only the head
of the pending ops can be started.
"""

from dataclasses import replace
from typing import Optional

from mdreview.lifecycle.state import DocumentPhase, MutationOp, MutationStatus, toggled, with_changes


def pending_ops(state: DocumentPhase) -> list[MutationOp]:
    return [op for op in state.pending_mutations if op.status == MutationStatus.pending]


def head(state: DocumentPhase) -> Optional[MutationOp]:
    ops = pending_ops(state)
    return ops[0] if ops else None


def is_idle(state: DocumentPhase) -> bool:
    """True when nothing is queued or processing."""
    return not state.pending_mutations and state.processing_mutation is None


def enqueue(state: DocumentPhase, op: MutationOp) -> DocumentPhase:
    return replace(state, pending_mutations=state.pending_mutations + (op,))


def start(state: DocumentPhase, op_id: str) -> Optional[DocumentPhase]:
    """Promote the head pending op to processing; None if busy or op_id is not the head."""
    if state.processing_mutation is not None:
        return None
    first = head(state)
    if first is None or first.id != op_id:
        return None
    running = replace(first, status=MutationStatus.processing)
    ops = tuple(running if op.id == op_id else op for op in state.pending_mutations)
    return replace(state, pending_mutations=ops, processing_mutation=running)


def _finish(state: DocumentPhase, op_id: str, **changes) -> DocumentPhase:
    remaining = tuple(op for op in state.pending_mutations if op.id != op_id)
    state = replace(state, pending_mutations=remaining, processing_mutation=None, **changes)
    if not remaining and state.pending_mode_toggle:
        state = replace(toggled(state), pending_mode_toggle=False)
    return state


def complete(state: DocumentPhase, op_id: str, new_content: str) -> Optional[DocumentPhase]:
    """Retire the processing op and adopt new_content; runs a deferred toggle once drained."""
    if state.processing_mutation is None or state.processing_mutation.id != op_id:
        return None
    state = with_changes(state, content=new_content)
    return _finish(state, op_id, last_mutation_error=None)


def fail(state: DocumentPhase, op_id: str, error: str) -> Optional[DocumentPhase]:
    """Retire the processing op, keep content, and record the error for display."""
    if state.processing_mutation is None or state.processing_mutation.id != op_id:
        return None
    return _finish(state, op_id, last_mutation_error=error)


def request_toggle(state: DocumentPhase) -> DocumentPhase:
    """Toggle now if the queue is idle, otherwise defer until it drains."""
    if is_idle(state):
        return replace(toggled(state), pending_mode_toggle=False)
    return replace(state, pending_mode_toggle=True)
