"""Render ChangeRecords as markdown annotated with CriticMarkup-style spans"""

from typing import Iterable

from mdreview.core.markup.syntax import wrap_del, wrap_ins
from mdreview.core.models import ChangeKind, ChangeRecord


def render(changes: Iterable[ChangeRecord]) -> str:
    """Equal text verbatim, inserts as {++t++}, deletes as {--t--}, substitutes as {--old--}{++new++}."""
    parts = []
    for change in changes:
        if change.kind == ChangeKind.equal:
            parts.append(change.after_text)
        elif change.kind == ChangeKind.insert:
            parts.append(wrap_ins(change.after_text))
        elif change.kind == ChangeKind.delete:
            parts.append(wrap_del(change.before_text))
        else:
            parts.append(wrap_del(change.before_text) + wrap_ins(change.after_text))
    return "".join(parts)
