"""Structural diff of two DocumentNode trees into ChangeRecords

Children of matched containers are anchored by exact serialization (LCS), the
unanchored nodes between anchors are paired by position when structurally
compatible, and compatible pairs recurse down to a token-level alignment of
their inline content. Everything is written through the serializer's own
writer, so the delete/equal text of the output is serialize(original) and the
insert/equal text is serialize(revised), up to block separators.
"""

from typing import Callable, NamedTuple, Sequence

from mdreview.core.diff.lcs import align_tokens, lcs_pairs
from mdreview.core.markdown.serialize import (
    BLOCK_SEP,
    QUOTE_PREFIX,
    heading_prefix,
    inline_tokens,
    item_body,
    list_indent,
    list_marker,
    list_separator,
    row_text,
    serialize,
    table_head,
    write_blocks,
    write_list_item,
    write_node,
)
from mdreview.core.markdown.writer import MarkdownWriter
from mdreview.core.models import ChangeKind, ChangeRecord, DocumentNode, NodeKind
from mdreview.core.utils.logger import get_logger


logger = get_logger(__name__)

# Replaced as a whole (one delete + one insert) whenever they differ.
ATOMIC_KINDS = frozenset({
    NodeKind.code,
    NodeKind.table_row,
    NodeKind.html,
    NodeKind.thematic_break,
})

_LIST_SHAPE = ("ordered", "bullet", "delimiter", "start", "tight")


class _Op(NamedTuple):
    kind: str               # equal | pair | delete | insert
    a: DocumentNode | None
    b: DocumentNode | None
    ai: int
    bi: int

    @property
    def in_original(self) -> bool:
        return self.kind != "insert"

    @property
    def in_revised(self) -> bool:
        return self.kind != "delete"


def compatible(a: DocumentNode, b: DocumentNode) -> bool:
    """True if a and b can be diffed in place rather than replaced."""
    if a.kind != b.kind or a.kind in ATOMIC_KINDS:
        return False
    if a.kind == NodeKind.heading:
        return a.attr("depth") == b.attr("depth")
    if a.kind == NodeKind.list:
        return all(a.attr(k) == b.attr(k) for k in _LIST_SHAPE)
    if a.kind == NodeKind.table:
        return a.attr("align") == b.attr("align") and row_text(a.children[0]) == row_text(b.children[0])
    return True


def diff(original: DocumentNode, revised: DocumentNode, granularity: str = "word") -> list[ChangeRecord]:
    """Diff two parsed documents into an ordered list of change records."""
    return TreeDiffer(granularity).diff(original, revised)


class TreeDiffer:
    def __init__(self, granularity: str = "word"):
        if granularity not in ("word", "char"):
            raise ValueError(f"granularity must be 'word' or 'char', got {granularity!r}")
        self.granularity = granularity

    def diff(self, original: DocumentNode, revised: DocumentNode) -> list[ChangeRecord]:
        writer = MarkdownWriter()
        if original.kind == NodeKind.document and revised.kind == NodeKind.document:
            a_nodes, b_nodes = original.children, revised.children
        else:
            a_nodes, b_nodes = (original,), (revised,)
        self._sequence(writer, a_nodes, b_nodes, BLOCK_SEP, shared_separators=True)
        records = writer.records()
        logger.debug("diffed %d/%d blocks into %d records", len(a_nodes), len(b_nodes), len(records))
        return records

    # --- alignment ---

    def _align(
        self,
        a_nodes: Sequence[DocumentNode],
        b_nodes: Sequence[DocumentNode],
        key: Callable[[DocumentNode], str],
        ) -> list[_Op]:
        anchors = lcs_pairs([key(n) for n in a_nodes], [key(n) for n in b_nodes])
        ops: list[_Op] = []
        ai = bi = 0
        for x, y in anchors + [(len(a_nodes), len(b_nodes))]:
            ops.extend(self._gap(a_nodes, b_nodes, ai, x, bi, y))
            if x < len(a_nodes):
                ops.append(_Op("equal", a_nodes[x], b_nodes[y], x, y))
            ai, bi = x + 1, y + 1
        return ops

    def _gap(self, a_nodes, b_nodes, a0: int, a1: int, b0: int, b1: int) -> list[_Op]:
        ops = []
        paired = min(a1 - a0, b1 - b0)
        for k in range(paired):
            a, b = a_nodes[a0 + k], b_nodes[b0 + k]
            if compatible(a, b):
                ops.append(_Op("pair", a, b, a0 + k, b0 + k))
            else:
                ops.append(_Op("delete", a, None, a0 + k, -1))
                ops.append(_Op("insert", None, b, -1, b0 + k))
        ops.extend(_Op("delete", a_nodes[i], None, i, -1) for i in range(a0 + paired, a1))
        ops.extend(_Op("insert", None, b_nodes[j], -1, j) for j in range(b0 + paired, b1))
        return ops

    def _sequence(
        self,
        writer: MarkdownWriter,
        a_nodes: Sequence[DocumentNode],
        b_nodes: Sequence[DocumentNode],
        sep: str,
        shared_separators: bool = False,
        leading: bool = False,
        key: Callable[[DocumentNode], str] = serialize,
        emit: Callable[[MarkdownWriter, _Op], None] | None = None,
        ) -> None:
        """Write aligned children joined by sep.

        With shared_separators (document level) sep is written as unchanged text
        between every pair of ops; an orphaned separator around a resolved span
        is dropped when the diff document is resolved. Otherwise each separator
        is attributed to the views that actually contain it. leading means a
        separator also precedes the first child in both views.
        """
        emit = emit or self._emit_block
        ops = self._align(a_nodes, b_nodes, key)
        seen_a = seen_b = leading
        for i, op in enumerate(ops):
            if shared_separators:
                if i:
                    writer.equal(sep)
            else:
                need_a = op.in_original and seen_a
                need_b = op.in_revised and seen_b
                if need_a and need_b:
                    writer.equal(sep)
                elif need_a:
                    writer.delete(sep)
                elif need_b:
                    writer.insert(sep)
                seen_a = seen_a or op.in_original
                seen_b = seen_b or op.in_revised
            emit(writer, op)

    # --- blocks ---

    def _emit_block(self, writer: MarkdownWriter, op: _Op) -> None:
        if op.kind == "equal":
            write_node(writer, op.a, ChangeKind.equal)
        elif op.kind == "delete":
            write_node(writer, op.a, ChangeKind.delete)
        elif op.kind == "insert":
            write_node(writer, op.b, ChangeKind.insert)
        else:
            self._pair(writer, op.a, op.b)

    def _pair(self, writer: MarkdownWriter, a: DocumentNode, b: DocumentNode) -> None:
        k = a.kind
        if k == NodeKind.paragraph:
            self._inline(writer, a.children, b.children)
        elif k == NodeKind.heading:
            writer.equal(heading_prefix(a))
            self._inline(writer, a.children, b.children)
        elif k == NodeKind.list:
            self._list(writer, a, b)
        elif k == NodeKind.blockquote:
            writer.equal(QUOTE_PREFIX)
            with writer.prefixed(QUOTE_PREFIX):
                self._sequence(writer, a.children, b.children, BLOCK_SEP)
        elif k == NodeKind.table:
            writer.equal(table_head(a))
            self._sequence(writer, a.children[1:], b.children[1:], "\n", leading=True)
        elif k == NodeKind.list_item:
            self._sequence(writer, a.children, b.children, BLOCK_SEP)
        else:
            write_node(writer, a, ChangeKind.delete)
            write_node(writer, b, ChangeKind.insert)

    def _list(self, writer: MarkdownWriter, a: DocumentNode, b: DocumentNode) -> None:
        sep = list_separator(a)

        def emit(w: MarkdownWriter, op: _Op) -> None:
            if op.kind == "delete":
                write_list_item(w, a, op.ai, op.a, ChangeKind.delete)
                return
            if op.kind == "insert":
                write_list_item(w, b, op.bi, op.b, ChangeKind.insert)
                return
            marker_a, marker_b = list_marker(a, op.ai), list_marker(b, op.bi)
            if marker_a == marker_b:
                w.equal(marker_a)
            else:
                w.delete(marker_a)
                w.insert(marker_b)
            with w.prefixed(list_indent(a)):
                if op.kind == "equal":
                    write_blocks(w, op.a.children, ChangeKind.equal, sep)
                else:
                    self._sequence(w, op.a.children, op.b.children, sep)

        self._sequence(writer, a.children, b.children, sep, key=lambda item: item_body(a, item), emit=emit)

    # --- inline ---

    def _inline(self, writer: MarkdownWriter, a_inline, b_inline) -> None:
        ta = inline_tokens(a_inline, self.granularity)
        tb = inline_tokens(b_inline, self.granularity)
        for kind, token in align_tokens(ta, tb):
            writer.write(kind, token)
