"""Unit tests for suggestions.py"""

import json

import pytest

from mdreview.errors import SuggestionFormatError
from mdreview.suggestions import (
    EXISTING_TEXT_MARKER,
    SuggestionEdits,
    build_apply_prompt,
    build_suggestion_prompt,
    merge_edits,
    parse_suggestion_edits,
    two_step_suggester,
)


def _payload(*edits: str) -> str:
    return json.dumps({"edits": list(edits)})


# --- schema ---

def test_parse_valid_edits():
    edits = parse_suggestion_edits(_payload("# New intro", EXISTING_TEXT_MARKER, "New ending."))
    assert edits.edits[0] == "# New intro"


@pytest.mark.parametrize("raw", [
    "not json",
    json.dumps({"edits": []}),
    json.dumps({"other": ["x"]}),
    _payload(EXISTING_TEXT_MARKER, "x"),
    _payload("a", "b"),
])
def test_parse_invalid_edits(raw):
    """Malformed JSON, empty lists, and broken alternation are rejected."""
    with pytest.raises(SuggestionFormatError):
        parse_suggestion_edits(raw)


def test_suggestion_format_error_is_value_error():
    with pytest.raises(ValueError):
        parse_suggestion_edits("{}")


def test_merge_edits_joins_lines():
    edits = SuggestionEdits(edits=["a", EXISTING_TEXT_MARKER, "b"])
    assert merge_edits(edits) == f"a\n{EXISTING_TEXT_MARKER}\nb"


# --- prompts ---

def test_suggestion_prompt_includes_document_and_instruction():
    prompt = build_suggestion_prompt("# Doc", "Fix typos")
    assert "# Doc" in prompt
    assert "Fix typos" in prompt
    assert EXISTING_TEXT_MARKER in prompt


def test_suggestion_prompt_default_instruction():
    assert "Improve clarity" in build_suggestion_prompt("# Doc", "  ")


def test_apply_prompt_includes_edits():
    prompt = build_apply_prompt("# Doc", "a\nb")
    assert prompt.endswith("Edits:\na\nb")


# --- composition ---

def test_two_step_suggester_calls_model_twice():
    prompts = []
    replies = iter([_payload("# Better doc"), "# Better doc\n"])

    def complete(prompt: str) -> str:
        prompts.append(prompt)
        return next(replies)

    suggest = two_step_suggester(complete)
    assert suggest("# Doc", "Improve") == "# Better doc\n"
    assert len(prompts) == 2
    assert "# Better doc" in prompts[1]


def test_two_step_suggester_propagates_format_errors():
    suggest = two_step_suggester(lambda prompt: "nonsense")
    with pytest.raises(SuggestionFormatError):
        suggest("# Doc", "")
