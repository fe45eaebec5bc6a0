"""Unit tests for core/diff/render.py and core/markup/syntax.py"""

from mdreview.core.diff.render import render
from mdreview.core.markup.syntax import DEL_OPEN, INS_OPEN, scan_spans, wrap_del, wrap_ins
from mdreview.core.models import ChangeRecord


def test_render_each_kind():
    records = [
        ChangeRecord.equal("a "),
        ChangeRecord.insert("b"),
        ChangeRecord.equal(" c "),
        ChangeRecord.delete("d"),
        ChangeRecord.equal(" "),
        ChangeRecord.substitute("e", "f"),
    ]
    assert render(records) == "a {++b++} c {--d--} {--e--}{++f++}"


def test_render_empty():
    assert render([]) == ""


def test_wrap_skips_empty_text():
    assert wrap_ins("") == ""
    assert wrap_del("") == ""


# --- scan_spans ---

def test_scan_spans_in_order():
    spans = list(scan_spans("x {--a--} y {++b++}"))
    assert [s.opener for s in spans] == [DEL_OPEN, INS_OPEN]
    assert all(s.closed for s in spans)


def test_scan_spans_body_bounds():
    markup = "x {++new++} y"
    (span,) = scan_spans(markup)
    assert markup[span.body_start:span.body_end] == "new"
    assert markup[span.start:span.end] == "{++new++}"


def test_scan_spans_body_ending_in_marker_char():
    """A body ending in the closer's character still closes at the last marker."""
    markup = wrap_del("---")
    (span,) = scan_spans(markup)
    assert markup[span.body_start:span.body_end] == "---"


def test_scan_spans_unterminated():
    """An opener with no closer spans to the end of the input."""
    (span,) = scan_spans("a {++b\nc")
    assert not span.closed
    assert span.body_end == len("a {++b\nc")
