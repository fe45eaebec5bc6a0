"""CriticMarkup-style diff span syntax: markers and a span scanner"""

from dataclasses import dataclass
from typing import Iterator


INS_OPEN, INS_CLOSE = "{++", "++}"
DEL_OPEN, DEL_CLOSE = "{--", "--}"
SUB_OPEN, SUB_CLOSE = "{~~", "~~}"
SUB_ARROW = "~>"

CLOSERS = {INS_OPEN: INS_CLOSE, DEL_OPEN: DEL_CLOSE, SUB_OPEN: SUB_CLOSE}


def wrap_ins(text: str) -> str:
    return f"{INS_OPEN}{text}{INS_CLOSE}" if text else ""


def wrap_del(text: str) -> str:
    return f"{DEL_OPEN}{text}{DEL_CLOSE}" if text else ""


@dataclass(frozen=True)
class Span:
    """One diff span found in markup; end is None when the span is never closed."""
    opener: str
    start: int
    body_start: int
    body_end: int
    end: int | None

    @property
    def closed(self) -> bool:
        return self.end is not None


def scan_spans(markup: str) -> Iterator[Span]:
    """Yield diff spans in document order.

    A span runs from its opener to the first matching closer; an opener with
    no closer yields an unterminated span reaching the end of the input.
    """
    pos = 0
    while True:
        found = [(markup.find(o, pos), o) for o in CLOSERS]
        found = [(i, o) for i, o in found if i >= 0]
        if not found:
            return
        start, opener = min(found)
        body_start = start + len(opener)
        close = markup.find(CLOSERS[opener], body_start)
        if close < 0:
            yield Span(opener, start, body_start, len(markup), None)
            return
        end = close + len(CLOSERS[opener])
        yield Span(opener, start, body_start, close, end)
        pos = end
