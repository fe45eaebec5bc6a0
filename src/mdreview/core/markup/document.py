"""Editor-side model of a diff-annotated document: keyed spans that can be accepted or rejected"""

from typing import Iterator, Union

from mdreview.core.markup.preprocess import DEFAULT_BREAK_TOKEN, decode_breaks, encode_breaks
from mdreview.core.markup.syntax import DEL_OPEN, INS_OPEN, SUB_ARROW, scan_spans, wrap_del, wrap_ins
from mdreview.core.models import DiffNode, DiffNodeType
from mdreview.errors import DiffNodeNotFoundError


BLOCK_SEP = "\n\n"

Segment = Union[str, DiffNode]


class DiffDocument:
    """Ordered text segments interleaved with DiffNodes.

    Keys are assigned once, in document order, when the markup is parsed;
    resolving a node never renumbers the others. Any literal break token inside
    a span is decoded back to a newline.
    """

    def __init__(self, segments: list[Segment], break_token: str = DEFAULT_BREAK_TOKEN):
        self._segments = list(segments)
        self.break_token = break_token
        self._merge_text()

    @classmethod
    def parse(cls, markup: str, break_token: str = DEFAULT_BREAK_TOKEN) -> "DiffDocument":
        segments: list[Segment] = []
        counter = 0

        def node(type_: DiffNodeType, body: str) -> DiffNode:
            nonlocal counter
            counter += 1
            return DiffNode(key=f"diff-{counter}", type=type_, text=decode_breaks(body, break_token))

        pos = 0
        for span in scan_spans(markup):
            if not span.closed:
                break
            segments.append(markup[pos:span.start])
            body = markup[span.body_start:span.body_end]
            if span.opener == INS_OPEN:
                segments.append(node(DiffNodeType.insertion, body))
            elif span.opener == DEL_OPEN:
                segments.append(node(DiffNodeType.deletion, body))
            elif SUB_ARROW in body:
                before, after = body.split(SUB_ARROW, 1)
                segments.extend(n for n in (
                    node(DiffNodeType.deletion, before) if before else None,
                    node(DiffNodeType.insertion, after) if after else None,
                ) if n is not None)
            else:
                segments.append(markup[span.start:span.end])
            pos = span.end
        segments.append(markup[pos:])
        return cls([s for s in segments if not isinstance(s, DiffNode) or s.text], break_token)

    # --- queries ---

    def nodes(self) -> list[DiffNode]:
        return [s for s in self._segments if isinstance(s, DiffNode)]

    def node(self, key: str) -> DiffNode:
        return self._segments[self._index(key)]

    def __contains__(self, key: str) -> bool:
        return any(isinstance(s, DiffNode) and s.key == key for s in self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def substitution_pairs(self) -> list[tuple[str, str]]:
        """(del_key, ins_key) for each deletion immediately followed by an insertion."""
        pairs = []
        for prev, cur in zip(self._segments, self._segments[1:]):
            if (
                isinstance(prev, DiffNode) and isinstance(cur, DiffNode)
                and prev.type == DiffNodeType.deletion and cur.type == DiffNodeType.insertion
            ):
                pairs.append((prev.key, cur.key))
        return pairs

    @property
    def resolved(self) -> bool:
        return not self.nodes()

    # --- mutations ---

    def accept(self, key: str) -> None:
        """Insertions keep their text, deletions drop it."""
        node = self.node(key)
        self._resolve(key, keep=node.type == DiffNodeType.insertion)

    def reject(self, key: str) -> None:
        """Insertions drop their text, deletions keep it."""
        node = self.node(key)
        self._resolve(key, keep=node.type == DiffNodeType.deletion)

    def accept_all(self) -> None:
        for n in self.nodes():
            self.accept(n.key)

    def reject_all(self) -> None:
        for n in self.nodes():
            self.reject(n.key)

    def _index(self, key: str) -> int:
        for i, s in enumerate(self._segments):
            if isinstance(s, DiffNode) and s.key == key:
                return i
        raise DiffNodeNotFoundError(key)

    def _resolve(self, key: str, keep: bool) -> None:
        i = self._index(key)
        if keep:
            self._segments[i] = self._segments[i].text
        else:
            del self._segments[i]
            self._drop_orphan_separator(i)
        self._merge_text()

    def _drop_orphan_separator(self, i: int) -> None:
        """Remove one block separator left doubled where a whole block was dropped."""
        prev = self._segments[i - 1] if i > 0 else None
        nxt = self._segments[i] if i < len(self._segments) else None
        if prev is None and nxt is None:
            return
        prev_open = prev is None or (isinstance(prev, str) and prev.endswith(BLOCK_SEP))
        next_open = nxt is None or (isinstance(nxt, str) and nxt.startswith(BLOCK_SEP))
        if not (prev_open and next_open):
            return
        if nxt is not None:
            self._segments[i] = nxt[len(BLOCK_SEP):]
        else:
            self._segments[i - 1] = prev[:-len(BLOCK_SEP)]

    def _merge_text(self) -> None:
        merged: list[Segment] = []
        for s in self._segments:
            if isinstance(s, str):
                if not s:
                    continue
                if merged and isinstance(merged[-1], str):
                    merged[-1] += s
                    continue
            merged.append(s)
        self._segments = merged

    # --- output ---

    def to_markup(self) -> str:
        """Serialize back to preprocessed diff markup; plain markdown once every node is resolved."""
        parts = []
        for s in self._segments:
            if isinstance(s, str):
                parts.append(s)
                continue
            body = encode_breaks(s.text, self.break_token)
            parts.append(wrap_ins(body) if s.type == DiffNodeType.insertion else wrap_del(body))
        return "".join(parts)
