"""Exception classes raised by the review pipeline and its stores"""


class ReviewError(Exception):
    """Base exception for all mdreview errors."""


class MarkdownParseError(ReviewError, ValueError):
    """Markdown input could not be parsed into a document tree."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.message = message
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")


class DiffNodeNotFoundError(ReviewError, LookupError):
    """An accept/reject referenced a diff node key that is not in the current document."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Diff node {key!r} not found in the current document")


class SuggestionFormatError(ReviewError, ValueError):
    """The AI suggestion payload did not match the expected edits schema."""


class ExplanationNotFoundError(ReviewError, LookupError):
    """No stored explanation exists for the requested id."""

    def __init__(self, explanation_id) -> None:
        self.explanation_id = explanation_id
        super().__init__(f"Explanation {explanation_id} not found")
