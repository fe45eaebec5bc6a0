"""Unit tests for core/diff/differ.py"""

import pytest

from mdreview.core.diff.differ import TreeDiffer, compatible, diff
from mdreview.core.markdown.parse import parse_markdown
from mdreview.core.markdown.serialize import serialize
from mdreview.core.models import ChangeKind, ChangeRecord


# --- inline changes ---

def test_diff_word_insertion(markup_for):
    assert markup_for("The cat sat.", "The black cat sat.") == "The {++black ++}cat sat."


def test_diff_word_substitution(markup_for):
    assert markup_for("The cat sat.", "The dog sat.") == "The {--cat--}{++dog++} sat."


def test_diff_records_for_substitution():
    """A replaced word yields one substitute record between equal runs."""
    records = diff(parse_markdown("The cat sat."), parse_markdown("The dog sat."))
    assert records == [
        ChangeRecord.equal("The "),
        ChangeRecord.substitute("cat", "dog"),
        ChangeRecord.equal(" sat."),
    ]


def test_diff_collapsed_whitespace(markup_for):
    """Collapsing a double space deletes only the extra space."""
    assert markup_for("The  cat sat.", "The cat sat.") == "The {-- --}cat sat."


def test_diff_emphasis_markup_change(markup_for):
    """Changing emphasis to strong touches only the markers."""
    assert markup_for("Hello *world*", "Hello **world**") == "Hello {--*--}{++**++}world{--*--}{++**++}"


def test_diff_char_granularity(markup_for):
    assert markup_for("cat", "cut", granularity="char") == "c{--a--}{++u++}t"


def test_diff_heading_text_change(markup_for):
    """Headings of the same depth diff their inline content in place."""
    assert markup_for("## Old title", "## New title") == "## {--Old--}{++New++} title"


# --- block changes ---

def test_diff_identical_documents(sample_doc):
    """Identical trees produce a single equal record of the whole document."""
    assert diff(sample_doc, sample_doc) == [ChangeRecord.equal(serialize(sample_doc))]


def test_diff_empty_documents():
    assert diff(parse_markdown(""), parse_markdown("")) == []


def test_diff_paragraph_inserted(markup_for):
    assert markup_for("A\n\nC", "A\n\nB\n\nC") == "A\n\n{++B++}\n\nC"


def test_diff_paragraph_deleted(markup_for):
    assert markup_for("A\n\nB\n\nC", "A\n\nC") == "A\n\n{--B--}\n\nC"


def test_diff_heading_depth_change_replaces_block(markup_for):
    """Headings of different depth are replaced rather than diffed in place."""
    assert markup_for("# Title", "## Title") == "{--# Title--}\n\n{++## Title++}"


def test_diff_code_block_is_atomic(markup_for):
    """A changed code block is replaced as a whole."""
    assert markup_for("```\na = 1\n```", "```\na = 2\n```") == (
        "{--```\na = 1\n```--}\n\n{++```\na = 2\n```++}"
    )


def test_diff_list_item_appended(markup_for):
    assert markup_for("- Item 1\n- Item 2", "- Item 1\n- Item 2\n- Item 3") == (
        "- Item 1\n- Item 2{++\n- Item 3++}"
    )


def test_diff_list_item_removed(markup_for):
    assert markup_for("- a\n- b\n- c", "- a\n- c") == "- a{--\n- b--}\n- c"


def test_diff_list_item_text_change(markup_for):
    assert markup_for("- one\n- two", "- one\n- three") == "- one\n- {--two--}{++three++}"


def test_diff_table_row_change(markup_for):
    """Table rows are atomic; the header and delimiter stay unchanged."""
    original = "| a | b |\n| --- | --- |\n| 1 | 2 |"
    revised = "| a | b |\n| --- | --- |\n| 1 | 3 |"
    assert markup_for(original, revised) == (
        "| a | b |\n| --- | --- |{--\n| 1 | 2 |--}{++\n| 1 | 3 |++}"
    )


def test_diff_blockquote_paragraph_added(markup_for):
    assert markup_for("> a", "> a\n>\n> b") == "> a{++\n> \n> b++}"


# --- round trips ---

@pytest.mark.parametrize("original,revised", [
    ("1. b\n2. c", "1. a\n2. b\n3. c"),
    ("- a\n- b", "- a\n\n- b"),
    ("# T\n\n- x\n  - y\n- z", "# T\n\n- x\n  - y2\n  - w\n- z"),
    ("> one\n>\n> two", "> one\n>\n> 2\n>\n> three"),
    ("Para\n\n---\n\nEnd", "End"),
    ("", "# New\n\nBody"),
    ("| a |\n| --- |\n| 1 |", "| b |\n| --- |\n| 1 |"),
])
def test_diff_accept_and_reject_round_trip(resolve_all, original, revised):
    """Accepting every node yields the revision; rejecting every node yields the original."""
    assert resolve_all(original, revised, accept=True) == serialize(parse_markdown(revised))
    assert resolve_all(original, revised, accept=False) == serialize(parse_markdown(original))


def test_diff_views_match_serialization(sample_md):
    """The before/after views of the records are the two canonical serializations."""
    revised = sample_md.replace("item two", "item 2").replace("Footer", "Closing")
    a, b = parse_markdown(sample_md), parse_markdown(revised)
    records = diff(a, b)
    before = "".join(r.before_text or "" for r in records)
    after = "".join(r.after_text or "" for r in records)
    assert (before, after) == (serialize(a), serialize(b))
    assert any(r.kind == ChangeKind.substitute for r in records)


# --- compatibility ---

@pytest.mark.parametrize("a,b,expected", [
    ("# A", "# B", True),
    ("# A", "## A", False),
    ("- a", "- b", True),
    ("- a", "* a", False),
    ("1. a", "2. a", False),
    ("- a\n- b", "- a\n\n- b", False),
    ("A", "- A", False),
    ("```\na\n```", "```\na\n```", False),
])
def test_compatible(a, b, expected):
    assert compatible(parse_markdown(a).children[0], parse_markdown(b).children[0]) is expected


def test_tree_differ_rejects_unknown_granularity():
    with pytest.raises(ValueError):
        TreeDiffer("sentence")
