"""Explanation store interface consumed by the review session"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from mdreview.lifecycle.state import ExplanationStatus


class ExplanationRecord(BaseModel):
    """Store-independent view of a persisted explanation."""
    id: str
    title: str
    content: str
    status: ExplanationStatus = ExplanationStatus.draft
    updated_at: Optional[datetime] = None


class ExplanationRepo(ABC):
    @abstractmethod
    def get(self, explanation_id: str) -> ExplanationRecord | None:
        raise NotImplementedError

    @abstractmethod
    def create(self, content: str, title: str, status: ExplanationStatus = ExplanationStatus.draft) -> ExplanationRecord:
        raise NotImplementedError

    @abstractmethod
    def save(self, explanation_id: str, content: str, title: str, status: ExplanationStatus) -> ExplanationRecord:
        """Persist new content for an existing explanation. Raises ExplanationNotFoundError."""
        raise NotImplementedError
