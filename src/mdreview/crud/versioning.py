"""Explanation version persistence: save, prune, list, diff, and revert operations"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from mdreview.core.utils.diff import unified_diff
from mdreview.crud.models import Explanation, ExplanationVersion


def _get_version(session: Session, explanation_id: UUID, num: int) -> ExplanationVersion:
    v = session.exec(
        select(ExplanationVersion)
        .where(ExplanationVersion.explanation_id == explanation_id)
        .where(ExplanationVersion.version_num == num)
    ).one_or_none()
    if v is None:
        raise ValueError(f"Version {num} not found for explanation {explanation_id}")
    return v


def diff_versions(session: Session, explanation_id: UUID, from_num: int, to_num: int, context: int = 3) -> list[str]:
    """Unified diff lines between two stored versions. Raises ValueError if either is missing."""
    v_from = _get_version(session, explanation_id, from_num)
    v_to = _get_version(session, explanation_id, to_num)
    return unified_diff(v_from.content, v_to.content, f"v{from_num}", f"v{to_num}", context)


def list_versions(session: Session, explanation_id: UUID) -> list[ExplanationVersion]:
    """Return all versions for an explanation ordered by version_num ascending."""
    return list(
        session.exec(
            select(ExplanationVersion)
            .where(ExplanationVersion.explanation_id == explanation_id)
            .order_by(ExplanationVersion.version_num.asc())
        ).all()
    )


def prune_versions(session: Session, explanation_id: UUID, max_versions: int) -> int:
    """Delete oldest versions beyond max_versions. Returns count deleted. No-op if max_versions=0."""
    if max_versions == 0:
        return 0

    versions = list_versions(session, explanation_id)
    excess = len(versions) - max_versions
    if excess <= 0:
        return 0

    for v in versions[:excess]:
        session.delete(v)
    session.flush()
    return excess


def save_version(session: Session, explanation: Explanation, max_versions: int = 10) -> ExplanationVersion:
    """Snapshot the current Explanation state as a new immutable version.

    The next version_num is MAX(version_num)+1 for this explanation; older
    versions beyond max_versions are pruned when max_versions > 0.
    """
    latest = session.exec(
        select(func.max(ExplanationVersion.version_num))
        .where(ExplanationVersion.explanation_id == explanation.id)
    ).one()

    version = ExplanationVersion(
        explanation_id=explanation.id,
        version_num=(latest or 0) + 1,
        title=explanation.title,
        content=explanation.content,
        status=explanation.status,
        hash=explanation.hash,
    )
    session.add(version)
    session.flush()

    if max_versions > 0:
        prune_versions(session, explanation.id, max_versions)
    return version


def revert_to_version(session: Session, explanation: Explanation, version_num: int, max_versions: int = 10) -> Explanation:
    """Restore a prior version's title/content/status as the current state.

    The current state is snapshotted first so the revert itself can be undone.
    Flushes but does not commit; the caller owns the transaction.
    """
    target = _get_version(session, explanation.id, version_num)
    save_version(session, explanation, max_versions=max_versions)

    explanation.title = target.title
    explanation.content = target.content
    explanation.status = target.status
    explanation.hash = target.hash
    explanation.updated_at = datetime.now()
    session.add(explanation)
    session.flush()
    return explanation
