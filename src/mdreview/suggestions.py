"""AI suggestion boundary: edit-list schema, prompt builders, and suggest-function composition

The language model itself is an injected callable; nothing here performs I/O.
"""

from typing import Callable

from pydantic import BaseModel, Field, ValidationError, field_validator

from mdreview.errors import SuggestionFormatError


EXISTING_TEXT_MARKER = "... existing text ..."

# (current_markdown, instruction) -> revised_markdown
SuggestFn = Callable[[str, str], str]
# prompt -> completion text
CompleteFn = Callable[[str], str]


class SuggestionEdits(BaseModel):
    """Edited passages alternating with the existing-text marker: content at even indices, marker at odd."""
    edits: list[str] = Field(..., min_length=1)

    @field_validator("edits")
    @classmethod
    def _alternates(cls, edits: list[str]) -> list[str]:
        for i, entry in enumerate(edits):
            is_marker = entry.strip() == EXISTING_TEXT_MARKER
            if i % 2 and not is_marker:
                raise ValueError(f"edits[{i}] must be the marker {EXISTING_TEXT_MARKER!r}")
            if not i % 2 and is_marker:
                raise ValueError(f"edits[{i}] must be edited content, not the marker")
        return edits


def parse_suggestion_edits(raw: str) -> SuggestionEdits:
    """Validate a JSON edits payload. Raises SuggestionFormatError on any schema violation."""
    try:
        return SuggestionEdits.model_validate_json(raw)
    except ValidationError as e:
        raise SuggestionFormatError(f"Invalid suggestion payload: {e}") from e


def merge_edits(edits: SuggestionEdits) -> str:
    return "\n".join(edits.edits)


def build_suggestion_prompt(current: str, instruction: str) -> str:
    return (
        "You are improving a markdown document.\n"
        f"Instruction: {instruction.strip() or 'Improve clarity and correctness.'}\n\n"
        'Reply with JSON of the form {"edits": [...]} where entries alternate between '
        f'rewritten passages and the exact string "{EXISTING_TEXT_MARKER}" standing for '
        "unchanged text. Start with a rewritten passage.\n\n"
        f"Document:\n{current}"
    )


def build_apply_prompt(current: str, merged_edits: str) -> str:
    return (
        "Apply the edits below to the document and return the complete revised markdown only.\n"
        f'Each "{EXISTING_TEXT_MARKER}" stands for the original text at that position.\n\n'
        f"Document:\n{current}\n\n"
        f"Edits:\n{merged_edits}"
    )


def two_step_suggester(complete: CompleteFn) -> SuggestFn:
    """Build a SuggestFn that asks for an edit list, validates it, then asks for the merged document."""
    def suggest(current: str, instruction: str) -> str:
        edits = parse_suggestion_edits(complete(build_suggestion_prompt(current, instruction)))
        return complete(build_apply_prompt(current, merge_edits(edits)))
    return suggest
