from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from mdreview.crud.repo import ExplanationRecord, ExplanationRepo
from mdreview.errors import ExplanationNotFoundError
from mdreview.lifecycle.state import ExplanationStatus


@dataclass
class MemoryExplanationRepo(ExplanationRepo):
    _records: dict[str, ExplanationRecord] = field(default_factory=dict)
    saves: int = 0

    def get(self, explanation_id: str) -> ExplanationRecord | None:
        return self._records.get(explanation_id)

    def create(self, content: str, title: str, status: ExplanationStatus = ExplanationStatus.draft) -> ExplanationRecord:
        record = ExplanationRecord(id=uuid4().hex, title=title, content=content, status=status, updated_at=datetime.now())
        self._records[record.id] = record
        return record

    def save(self, explanation_id: str, content: str, title: str, status: ExplanationStatus) -> ExplanationRecord:
        if explanation_id not in self._records:
            raise ExplanationNotFoundError(explanation_id)
        record = self._records[explanation_id].model_copy(
            update={"content": content, "title": title, "status": ExplanationStatus(status), "updated_at": datetime.now()}
        )
        self._records[explanation_id] = record
        self.saves += 1
        return record
