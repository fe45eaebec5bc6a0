"""Explanation persistence: lookup, create, and versioned update"""

from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from mdreview.core.utils.hashing import sha256
from mdreview.crud.models import Explanation
from mdreview.crud.versioning import save_version
from mdreview.lifecycle.state import ExplanationStatus


def parse_id(explanation_id: str | UUID) -> UUID | None:
    """UUID for a stored id string, or None if it is not a valid UUID."""
    if isinstance(explanation_id, UUID):
        return explanation_id
    try:
        return UUID(str(explanation_id))
    except ValueError:
        return None


def get_explanation(session: Session, explanation_id: str | UUID) -> Explanation | None:
    """Return the Explanation with the given id, or None if not found."""
    uid = parse_id(explanation_id)
    return session.get(Explanation, uid) if uid else None


def list_explanations(session: Session) -> list[Explanation]:
    """Return all explanations, most recently updated first."""
    return list(session.exec(select(Explanation).order_by(Explanation.updated_at.desc())).all())


def create_explanation(
    session: Session,
    content: str,
    title: str,
    status: ExplanationStatus = ExplanationStatus.draft,
    ) -> Explanation:
    """Insert a new Explanation. Flushes but does not commit."""
    explanation = Explanation(title=title, content=content, status=ExplanationStatus(status), hash=sha256(content))
    session.add(explanation)
    session.flush()
    return explanation


def update_explanation(
    session: Session,
    explanation: Explanation,
    content: str,
    title: str,
    status: ExplanationStatus,
    max_versions: int = 10,
    ) -> tuple[Explanation, str]:
    """Overwrite an Explanation, snapshotting its previous state first.

    Returns (explanation, status) where status is 'updated' or 'unchanged'.
    Flushes but does not commit; the caller owns the transaction.
    """
    status = ExplanationStatus(status)
    new_hash = sha256(content)
    if explanation.hash == new_hash and explanation.title == title and explanation.status == status:
        return explanation, "unchanged"

    save_version(session, explanation, max_versions)
    explanation.title = title
    explanation.content = content
    explanation.status = status
    explanation.hash = new_hash
    explanation.updated_at = datetime.now()
    session.add(explanation)
    session.flush()
    return explanation, "updated"
