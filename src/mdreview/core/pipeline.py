"""Pipeline step functions: parse -> diff -> render -> preprocess orchestration"""

from dataclasses import dataclass

from mdreview.core.diff.differ import diff
from mdreview.core.diff.render import render
from mdreview.core.markdown.parse import parse_markdown
from mdreview.core.markdown.serialize import serialize
from mdreview.core.markup.document import DiffDocument
from mdreview.core.markup.preprocess import DEFAULT_BREAK_TOKEN, preprocess
from mdreview.core.markup.registry import DiffNodeRegistry
from mdreview.core.models import ChangeRecord
from mdreview.core.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class SuggestionResult:
    """Everything produced by one diff/render cycle."""
    original:  str                  # canonical original markdown (reject-all target)
    revised:   str                  # canonical revised markdown (accept-all target)
    changes:   list[ChangeRecord]
    markup:    str                  # preprocessed diff markup handed to the editor
    document:  DiffDocument
    registry:  DiffNodeRegistry


def render_diff(
    original: str,
    revised: str,
    parser_config: str = "gfm-like",
    granularity: str = "word",
    ) -> tuple[list[ChangeRecord], str]:
    """Parse both texts and return (change records, raw diff markup before preprocessing)."""
    before = parse_markdown(original, parser_config, source="original")
    after = parse_markdown(revised, parser_config, source="revised")
    changes = diff(before, after, granularity)
    return changes, render(changes)


def run_suggestion_pipeline(
    original: str,
    revised: str,
    parser_config: str = "gfm-like",
    granularity: str = "word",
    break_token: str = DEFAULT_BREAK_TOKEN,
    ) -> SuggestionResult:
    """Diff original against an AI revision and build the keyed diff document.

    Raises MarkdownParseError if either text cannot be parsed.
    """
    before = parse_markdown(original, parser_config, source="original")
    after = parse_markdown(revised, parser_config, source="revised")
    changes = diff(before, after, granularity)
    markup = preprocess(render(changes), break_token)
    document = DiffDocument.parse(markup, break_token)
    registry = DiffNodeRegistry.from_document(document)
    logger.debug(
        "suggestion diff: %d records, %d diff nodes (%d ins, %d del)",
        len(changes), registry.count(), registry.count("ins"), registry.count("del"),
    )
    return SuggestionResult(
        original=serialize(before),
        revised=serialize(after),
        changes=changes,
        markup=markup,
        document=document,
        registry=registry,
    )
