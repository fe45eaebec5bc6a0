"""Change-record writer shared by the serializer and the differ

Text is written in document order tagged with a change kind. Line breaks are
expanded with the active container prefixes (blockquote markers, list item
indentation) so nested content keeps its structure in every view. Adjacent
writes of one kind coalesce, and deletes and inserts written without an equal
run between them flush as a single substitute record.
"""

from contextlib import contextmanager
from typing import Iterator

from mdreview.core.models import ChangeKind, ChangeRecord


class MarkdownWriter:
    def __init__(self):
        self._records: list[ChangeRecord] = []
        self._prefixes: list[str] = []
        self._equal: list[str] = []
        self._deleted: list[str] = []
        self._inserted: list[str] = []

    @contextmanager
    def prefixed(self, prefix: str) -> Iterator["MarkdownWriter"]:
        """Prefix every line break written inside the block with prefix."""
        self._prefixes.append(prefix)
        try:
            yield self
        finally:
            self._prefixes.pop()

    def _expand(self, text: str) -> str:
        if not self._prefixes or "\n" not in text:
            return text
        return text.replace("\n", "\n" + "".join(self._prefixes))

    def write(self, kind: ChangeKind, text: str) -> None:
        """Append text under kind (equal, delete, or insert); empty text is ignored."""
        if not text:
            return
        text = self._expand(text)
        if kind == ChangeKind.equal:
            self._flush_changes()
            self._equal.append(text)
        elif kind == ChangeKind.delete:
            self._flush_equal()
            self._deleted.append(text)
        elif kind == ChangeKind.insert:
            self._flush_equal()
            self._inserted.append(text)
        else:
            raise ValueError(f"cannot write {kind.value!r} text directly")

    def equal(self, text: str) -> None:
        self.write(ChangeKind.equal, text)

    def delete(self, text: str) -> None:
        self.write(ChangeKind.delete, text)

    def insert(self, text: str) -> None:
        self.write(ChangeKind.insert, text)

    def _flush_equal(self) -> None:
        if self._equal:
            self._records.append(ChangeRecord.equal("".join(self._equal)))
            self._equal = []

    def _flush_changes(self) -> None:
        before, after = "".join(self._deleted), "".join(self._inserted)
        if before and after:
            self._records.append(ChangeRecord.substitute(before, after))
        elif before:
            self._records.append(ChangeRecord.delete(before))
        elif after:
            self._records.append(ChangeRecord.insert(after))
        self._deleted, self._inserted = [], []

    def records(self) -> list[ChangeRecord]:
        """Flush pending text and return all records written so far."""
        self._flush_equal()
        self._flush_changes()
        return list(self._records)

    def text(self, side: str = "after") -> str:
        """Concatenated text of one view: 'before' (original) or 'after' (revised)."""
        attr = "before_text" if side == "before" else "after_text"
        return "".join(getattr(r, attr) or "" for r in self.records())
