"""Page lifecycle phases: one frozen dataclass per phase, each holding only its own fields"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import ClassVar, Optional, Union


class Phase(str, Enum):
    idle = "idle"
    loading = "loading"
    streaming = "streaming"
    viewing = "viewing"
    editing = "editing"
    saving = "saving"
    error = "error"


class ExplanationStatus(str, Enum):
    draft = "draft"
    published = "published"


class MutationType(str, Enum):
    accept = "accept"
    reject = "reject"


class MutationStatus(str, Enum):
    pending = "pending"
    processing = "processing"


@dataclass(frozen=True)
class MutationOp:
    id: str
    type: MutationType
    node_key: str
    status: MutationStatus = MutationStatus.pending


@dataclass(frozen=True)
class Idle:
    phase: ClassVar[Phase] = Phase.idle


@dataclass(frozen=True)
class Loading:
    phase: ClassVar[Phase] = Phase.loading


@dataclass(frozen=True)
class Streaming:
    phase: ClassVar[Phase] = Phase.streaming
    content: str = ""
    title: str = ""


@dataclass(frozen=True)
class DocumentPhase:
    """Fields shared by the two phases that hold an addressable document."""
    content: str
    title: str
    status: ExplanationStatus
    original_content: str
    original_title: str
    original_status: ExplanationStatus
    has_unsaved_changes: bool = False
    pending_mutations: tuple[MutationOp, ...] = ()
    processing_mutation: Optional[MutationOp] = None
    pending_mode_toggle: bool = False
    last_mutation_error: Optional[str] = None

    def as_fields(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Viewing(DocumentPhase):
    phase: ClassVar[Phase] = Phase.viewing


@dataclass(frozen=True)
class Editing(DocumentPhase):
    phase: ClassVar[Phase] = Phase.editing


@dataclass(frozen=True)
class Saving:
    phase: ClassVar[Phase] = Phase.saving
    draft: Editing


@dataclass(frozen=True)
class ErrorState:
    phase: ClassVar[Phase] = Phase.error
    error: str
    draft: Optional[DocumentPhase] = field(default=None)


PageLifecycleState = Union[Idle, Loading, Streaming, Viewing, Editing, Saving, ErrorState]

INITIAL_STATE: PageLifecycleState = Idle()


def displayed_status(original_status: ExplanationStatus, dirty: bool) -> ExplanationStatus:
    """Published content with unsaved changes shows as draft; draft stays draft."""
    if original_status == ExplanationStatus.published and dirty:
        return ExplanationStatus.draft
    return original_status


def with_changes(state: DocumentPhase, **changes) -> DocumentPhase:
    """Apply field changes and recompute has_unsaved_changes and status against the baseline."""
    new = replace(state, **changes)
    dirty = new.content != new.original_content or new.title != new.original_title
    return replace(new, has_unsaved_changes=dirty, status=displayed_status(new.original_status, dirty))


def to_editing(state: DocumentPhase) -> Editing:
    return Editing(**state.as_fields())


def to_viewing(state: DocumentPhase) -> Viewing:
    return Viewing(**state.as_fields())


def toggled(state: DocumentPhase) -> DocumentPhase:
    """The same document in the other presentation mode."""
    return to_viewing(state) if isinstance(state, Editing) else to_editing(state)
