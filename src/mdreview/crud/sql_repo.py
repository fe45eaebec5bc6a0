"""SQL-backed explanation store; one committed transaction per call"""

from sqlmodel import Session

from mdreview.crud.explanations import create_explanation, get_explanation, update_explanation
from mdreview.crud.models import Explanation
from mdreview.crud.repo import ExplanationRecord, ExplanationRepo
from mdreview.errors import ExplanationNotFoundError
from mdreview.lifecycle.state import ExplanationStatus


def _to_record(row: Explanation) -> ExplanationRecord:
    return ExplanationRecord(
        id=str(row.id),
        title=row.title,
        content=row.content,
        status=row.status,
        updated_at=row.updated_at,
    )


class SQLExplanationRepo(ExplanationRepo):
    def __init__(self, engine, max_versions: int = 10):
        self.engine = engine
        self.max_versions = max_versions

    def get(self, explanation_id: str) -> ExplanationRecord | None:
        with Session(self.engine) as session:
            row = get_explanation(session, explanation_id)
            return _to_record(row) if row else None

    def create(self, content: str, title: str, status: ExplanationStatus = ExplanationStatus.draft) -> ExplanationRecord:
        with Session(self.engine) as session:
            row = create_explanation(session, content, title, status)
            session.commit()
            session.refresh(row)
            return _to_record(row)

    def save(self, explanation_id: str, content: str, title: str, status: ExplanationStatus) -> ExplanationRecord:
        with Session(self.engine) as session:
            row = get_explanation(session, explanation_id)
            if row is None:
                raise ExplanationNotFoundError(explanation_id)
            row, _ = update_explanation(session, row, content, title, status, self.max_versions)
            session.commit()
            session.refresh(row)
            return _to_record(row)
