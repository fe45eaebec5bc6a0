"""Lifecycle actions: the only inputs the page reducer accepts"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union
from uuid import uuid4

from mdreview.lifecycle.state import ExplanationStatus, MutationType


def _mutation_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class StartGeneration:
    type: ClassVar[str] = "START_GENERATION"


@dataclass(frozen=True)
class StartStreaming:
    type: ClassVar[str] = "START_STREAMING"


@dataclass(frozen=True)
class StreamContent:
    type: ClassVar[str] = "STREAM_CONTENT"
    content: str


@dataclass(frozen=True)
class StreamTitle:
    type: ClassVar[str] = "STREAM_TITLE"
    title: str


@dataclass(frozen=True)
class LoadExplanation:
    type: ClassVar[str] = "LOAD_EXPLANATION"
    content: str
    title: str
    status: ExplanationStatus = ExplanationStatus.draft


@dataclass(frozen=True)
class EnterEditMode:
    type: ClassVar[str] = "ENTER_EDIT_MODE"


@dataclass(frozen=True)
class ExitEditMode:
    type: ClassVar[str] = "EXIT_EDIT_MODE"


@dataclass(frozen=True)
class UpdateContent:
    type: ClassVar[str] = "UPDATE_CONTENT"
    content: str


@dataclass(frozen=True)
class UpdateTitle:
    type: ClassVar[str] = "UPDATE_TITLE"
    title: str


@dataclass(frozen=True)
class StartSave:
    type: ClassVar[str] = "START_SAVE"


@dataclass(frozen=True)
class SaveSuccess:
    type: ClassVar[str] = "SAVE_SUCCESS"
    new_id: Optional[str] = None
    is_new_explanation: bool = False


@dataclass(frozen=True)
class PageError:
    type: ClassVar[str] = "ERROR"
    error: str


@dataclass(frozen=True)
class Reset:
    type: ClassVar[str] = "RESET"


@dataclass(frozen=True)
class QueueMutation:
    type: ClassVar[str] = "QUEUE_MUTATION"
    mutation_type: MutationType
    node_key: str
    id: str = field(default_factory=_mutation_id)


@dataclass(frozen=True)
class StartMutation:
    type: ClassVar[str] = "START_MUTATION"
    id: str


@dataclass(frozen=True)
class CompleteMutation:
    type: ClassVar[str] = "COMPLETE_MUTATION"
    id: str
    new_content: str


@dataclass(frozen=True)
class FailMutation:
    type: ClassVar[str] = "FAIL_MUTATION"
    id: str
    error: str


@dataclass(frozen=True)
class RequestModeToggle:
    type: ClassVar[str] = "REQUEST_MODE_TOGGLE"


@dataclass(frozen=True)
class ApplyAISuggestion:
    type: ClassVar[str] = "APPLY_AI_SUGGESTION"
    content: str


PageLifecycleAction = Union[
    StartGeneration, StartStreaming, StreamContent, StreamTitle, LoadExplanation,
    EnterEditMode, ExitEditMode, UpdateContent, UpdateTitle, StartSave, SaveSuccess,
    PageError, Reset, QueueMutation, StartMutation, CompleteMutation, FailMutation,
    RequestModeToggle, ApplyAISuggestion,
]
