"""Review session host: drives the lifecycle reducer and owns the live diff document

All I/O (the AI suggest function, the explanation store, streamed chunks)
happens here; results enter the pure reducer as actions, in order. UI-level
accept/reject calls are translated into QUEUE_MUTATION, START_MUTATION, and
COMPLETE_MUTATION or FAIL_MUTATION, one mutation at a time.
"""

from typing import Iterable, Optional

from mdreview.config import Settings
from mdreview.core.markdown.parse import parse_markdown
from mdreview.core.markup.document import DiffDocument
from mdreview.core.markup.registry import DiffNodeRegistry
from mdreview.core.pipeline import SuggestionResult, run_suggestion_pipeline
from mdreview.core.utils.logger import get_logger
from mdreview.crud.repo import ExplanationRecord, ExplanationRepo
from mdreview.errors import DiffNodeNotFoundError, MarkdownParseError, ReviewError
from mdreview.lifecycle import queue, selectors
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
from mdreview.lifecycle.reducer import reduce
from mdreview.lifecycle.state import (
    INITIAL_STATE,
    DocumentPhase,
    Editing,
    ExplanationStatus,
    Loading,
    MutationOp,
    MutationType,
    PageLifecycleState,
    Saving,
    Streaming,
)
from mdreview.suggestions import SuggestFn


logger = get_logger(__name__)


class ReviewSession:
    def __init__(
        self,
        repo: ExplanationRepo,
        suggest: Optional[SuggestFn] = None,
        settings: Optional[Settings] = None,
        ):
        self.repo = repo
        self.suggest_fn = suggest
        self.settings = settings or Settings()
        self.state: PageLifecycleState = INITIAL_STATE
        self.explanation_id: Optional[str] = None
        self.document: Optional[DiffDocument] = None
        self.registry = DiffNodeRegistry()

    def dispatch(self, action: PageLifecycleAction) -> PageLifecycleState:
        self.state = reduce(self.state, action)
        return self.state

    # --- document attachment ---

    def _attach(self, markup: str) -> None:
        """Rebuild the diff document and registry from markup; drop them if no spans remain."""
        document = DiffDocument.parse(markup, self.settings.break_token)
        self.document = None if document.resolved else document
        self.registry = DiffNodeRegistry.from_document(document)

    def _detach(self) -> None:
        self.document = None
        self.registry = DiffNodeRegistry()

    @property
    def has_pending_suggestions(self) -> bool:
        return self.document is not None and not self.document.resolved

    @property
    def can_save(self) -> bool:
        return selectors.can_save(self.state) and not self.has_pending_suggestions

    # --- loading & generation ---

    def _load_record(self, record: ExplanationRecord) -> PageLifecycleState:
        try:
            parse_markdown(record.content, self.settings.parser_config, source=f"explanation {record.id}")
        except MarkdownParseError as e:
            return self.dispatch(PageError(str(e)))
        self.explanation_id = record.id
        self._detach()
        return self.dispatch(LoadExplanation(record.content, record.title, record.status))

    def load(self, explanation_id: str) -> PageLifecycleState:
        """Fetch an explanation from the store and show it in viewing mode."""
        record = self.repo.get(explanation_id)
        if record is None:
            logger.info("explanation %s not found", explanation_id)
            return self.dispatch(PageError(f"Explanation {explanation_id} not found"))
        return self._load_record(record)

    def generate(
        self,
        chunks: Iterable[str],
        title: str = "",
        status: ExplanationStatus = ExplanationStatus.draft,
        ) -> PageLifecycleState:
        """Stream a freshly generated explanation; it is unsaved until save() creates it."""
        if not isinstance(self.dispatch(StartGeneration()), Loading):
            return self.state
        self.dispatch(StartStreaming())
        self.dispatch(StreamTitle(title))
        buffer = ""
        try:
            for chunk in chunks:
                buffer += chunk
                self.dispatch(StreamContent(buffer))
        except Exception as e:
            logger.warning("generation stream failed: %s", e)
            return self.dispatch(PageError(f"Generation failed: {e}"))
        if not isinstance(self.state, Streaming):
            return self.state
        self.explanation_id = None
        self._detach()
        return self.dispatch(LoadExplanation(self.state.content, self.state.title, status))

    # --- modes & edits ---

    def enter_edit_mode(self) -> PageLifecycleState:
        return self.dispatch(EnterEditMode())

    def exit_edit_mode(self) -> PageLifecycleState:
        return self.dispatch(ExitEditMode())

    def toggle_mode(self) -> PageLifecycleState:
        """Switch viewing/editing now, or once the mutation queue drains."""
        return self.dispatch(RequestModeToggle())

    def update_content(self, content: str) -> PageLifecycleState:
        before = self.state
        self.dispatch(UpdateContent(content))
        if self.state is not before and self.document is not None:
            self._attach(content)
        return self.state

    def update_title(self, title: str) -> PageLifecycleState:
        return self.dispatch(UpdateTitle(title))

    # --- AI suggestions ---

    def _base_content(self) -> str:
        """Current content with any unresolved suggestion rejected."""
        if not self.has_pending_suggestions:
            return selectors.get_content(self.state)
        logger.warning("discarding %d unresolved diff nodes before a new suggestion", len(self.registry))
        pending = DiffDocument(list(self.document), self.document.break_token)
        pending.reject_all()
        return pending.to_markup()

    def suggest(self, instruction: str = "", revised: Optional[str] = None) -> Optional[SuggestionResult]:
        """Diff the current content against an AI revision and enter editing with the diff markup.

        revised bypasses the suggest function (e.g. a revision produced elsewhere).
        Parse and suggest failures dispatch ERROR and return None.
        """
        if not isinstance(self.state, DocumentPhase):
            logger.warning("suggest ignored in phase '%s': no document is loaded", self.state.phase.value)
            return None
        current = self._base_content()
        try:
            if revised is None:
                if self.suggest_fn is None:
                    raise ReviewError("no suggest function configured")
                revised = self.suggest_fn(current, instruction)
            result = run_suggestion_pipeline(
                current,
                revised,
                parser_config=self.settings.parser_config,
                granularity=self.settings.granularity,
                break_token=self.settings.break_token,
            )
        except ReviewError as e:
            self.dispatch(PageError(str(e)))
            return None
        except Exception as e:
            logger.warning("suggest function failed: %s", e)
            self.dispatch(PageError(f"AI suggestion failed: {e}"))
            return None

        if isinstance(self.dispatch(ApplyAISuggestion(result.markup)), Editing):
            self.document = None if result.document.resolved else result.document
            self.registry = result.registry
        return result

    # --- diff mutations ---

    def _enqueue(self, mutation_type: MutationType, key: str) -> Optional[str]:
        action = QueueMutation(mutation_type, key)
        before = self.state
        self.dispatch(action)
        return action.id if self.state is not before else None

    def accept(self, key: str, drain: bool = True) -> Optional[str]:
        """Queue acceptance of one diff node; returns the mutation id, or None if not queued."""
        op_id = self._enqueue(MutationType.accept, key)
        if drain:
            self.process_mutations()
        return op_id

    def reject(self, key: str, drain: bool = True) -> Optional[str]:
        op_id = self._enqueue(MutationType.reject, key)
        if drain:
            self.process_mutations()
        return op_id

    def accept_all(self) -> None:
        for key in self.registry.keys_in_order():
            self._enqueue(MutationType.accept, key)
        self.process_mutations()

    def reject_all(self) -> None:
        for key in self.registry.keys_in_order():
            self._enqueue(MutationType.reject, key)
        self.process_mutations()

    def _next_mutation(self) -> Optional[MutationOp]:
        if not isinstance(self.state, DocumentPhase) or self.state.processing_mutation is not None:
            return None
        return queue.head(self.state)

    def _apply(self, op: MutationOp) -> str:
        if self.document is None:
            raise DiffNodeNotFoundError(op.node_key)
        if op.type == MutationType.accept:
            self.document.accept(op.node_key)
        else:
            self.document.reject(op.node_key)
        return self.document.to_markup()

    def process_mutations(self) -> PageLifecycleState:
        """Apply queued mutations strictly in order, one in flight at a time."""
        while (op := self._next_mutation()) is not None:
            self.dispatch(StartMutation(op.id))
            processing = selectors.get_processing_mutation(self.state)
            if processing is None or processing.id != op.id:
                break
            try:
                content = self._apply(op)
            except DiffNodeNotFoundError as e:
                logger.info("mutation %s on %s failed: %s", op.type.value, op.node_key, e)
                self.dispatch(FailMutation(op.id, str(e)))
                continue
            self.dispatch(CompleteMutation(op.id, content))
            self.registry = DiffNodeRegistry.from_document(self.document)
        if self.document is not None and self.document.resolved:
            self.document = None
        return self.state

    # --- save & reset ---

    def save(self) -> PageLifecycleState:
        """Persist the editing draft, then re-baseline from what the store returned."""
        if self.has_pending_suggestions:
            logger.warning("save blocked: %d diff nodes are unresolved", len(self.registry))
            return self.state
        if not isinstance(self.dispatch(StartSave()), Saving):
            return self.state
        draft = self.state.draft
        is_new = self.explanation_id is None
        try:
            if is_new:
                record = self.repo.create(draft.content, draft.title, draft.status)
            else:
                record = self.repo.save(self.explanation_id, draft.content, draft.title, draft.status)
        except Exception as e:
            logger.warning("save failed: %s", e)
            return self.dispatch(PageError(f"Save failed: {e}"))
        self.dispatch(SaveSuccess(new_id=record.id, is_new_explanation=is_new))
        self.explanation_id = record.id
        self._detach()
        return self.dispatch(LoadExplanation(record.content, record.title, record.status))

    def reset(self) -> PageLifecycleState:
        self.explanation_id = None
        self._detach()
        return self.dispatch(Reset())
