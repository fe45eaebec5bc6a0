"""Markdown parsing: markdown-it syntax tree to DocumentNode conversion"""

import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdreview.core.models import DocumentNode, NodeKind
from mdreview.core.utils.logger import get_logger
from mdreview.errors import MarkdownParseError


logger = get_logger(__name__)

_BACKTICK_RUN_RE = re.compile(r"`{3,}")
_ALIGN_RE = re.compile(r"text-align:\s*(left|right|center)")

_CONTAINERS = {
    "bullet_list": NodeKind.list,
    "ordered_list": NodeKind.list,
    "list_item": NodeKind.list_item,
    "blockquote": NodeKind.blockquote,
}
_SPANS = {
    "em": NodeKind.emphasis,
    "strong": NodeKind.strong,
    "s": NodeKind.strikethrough,
}


def make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def parse_markdown(text: str, preset: str = "gfm-like", source: str | None = None) -> DocumentNode:
    """Parse markdown text into an immutable DocumentNode tree rooted at a document node."""
    if not isinstance(text, str):
        raise MarkdownParseError(f"expected markdown text, got {type(text).__name__}", source)
    try:
        tokens = make_parser(preset).parse(text)
        root = SyntaxTreeNode(tokens)
    except Exception as e:
        raise MarkdownParseError(f"markdown-it failed ({preset}): {e}", source) from e
    doc = DocumentNode(kind=NodeKind.document, children=tuple(_blocks(root.children)))
    logger.debug("parsed %d chars into %d top-level blocks", len(text), len(doc.children))
    return doc


# --- blocks ---

def _blocks(nodes: list[SyntaxTreeNode]) -> list[DocumentNode]:
    return [_block(n) for n in nodes]


def _block(node: SyntaxTreeNode) -> DocumentNode:
    t = node.type
    if t == "paragraph":
        return DocumentNode(kind=NodeKind.paragraph, children=_inline_of(node))
    if t == "heading":
        return DocumentNode(kind=NodeKind.heading, attrs={"depth": int(node.tag[1:])}, children=_inline_of(node))
    if t in ("bullet_list", "ordered_list"):
        return _list(node)
    if t in _CONTAINERS:
        return DocumentNode(kind=_CONTAINERS[t], children=tuple(_blocks(node.children)))
    if t == "fence":
        return DocumentNode(
            kind=NodeKind.code,
            attrs={"lang": node.info.strip(), "fence": node.markup},
            value=node.content,
        )
    if t == "code_block":
        return DocumentNode(kind=NodeKind.code, attrs={"lang": "", "fence": _fence_for(node.content)}, value=node.content)
    if t == "hr":
        return DocumentNode(kind=NodeKind.thematic_break)
    if t == "table":
        return _table(node)
    if t != "html_block":
        logger.debug("unsupported block %r kept as raw html", t)
    return DocumentNode(kind=NodeKind.html, value=node.content.rstrip("\n"))


def _fence_for(content: str) -> str:
    """Backtick fence one longer than any backtick run in content (min 3)."""
    longest = max((len(m.group(0)) for m in _BACKTICK_RUN_RE.finditer(content)), default=2)
    return "`" * (longest + 1)


def _list(node: SyntaxTreeNode) -> DocumentNode:
    ordered = node.type == "ordered_list"
    items = _blocks(node.children)
    tight = all(
        p.hidden
        for item in node.children
        for p in item.children
        if p.type == "paragraph"
    )
    attrs = {
        "ordered": ordered,
        "start": int(node.attrs.get("start", 1)) if ordered else 1,
        "bullet": "" if ordered else node.markup,
        "delimiter": node.markup if ordered else "",
        "tight": tight,
    }
    return DocumentNode(kind=NodeKind.list, attrs=attrs, children=tuple(items))


def _table(node: SyntaxTreeNode) -> DocumentNode:
    rows = []
    align: list[str | None] = []
    for section in node.children:
        header = section.type == "thead"
        for tr in section.children:
            cells = []
            for cell in tr.children:
                if header:
                    m = _ALIGN_RE.search(str(cell.attrs.get("style", "")))
                    align.append(m.group(1) if m else None)
                cells.append(DocumentNode(kind=NodeKind.table_cell, attrs={"header": header}, children=_inline_of(cell)))
            rows.append(DocumentNode(kind=NodeKind.table_row, children=tuple(cells)))
    return DocumentNode(kind=NodeKind.table, attrs={"align": tuple(align)}, children=tuple(rows))


# --- inline ---

def _inline_of(node: SyntaxTreeNode) -> tuple[DocumentNode, ...]:
    """Inline children of a paragraph/heading/cell (held by its single 'inline' child)."""
    out: list[DocumentNode] = []
    for child in node.children:
        if child.type == "inline":
            out.extend(_inlines(child.children))
    return tuple(out)


def _inlines(nodes: list[SyntaxTreeNode]) -> list[DocumentNode]:
    out: list[DocumentNode] = []
    for n in nodes:
        converted = _inline(n)
        # adjacent text runs (e.g. around escapes) read as one run
        if out and converted.kind == NodeKind.text and out[-1].kind == NodeKind.text:
            out[-1] = DocumentNode(kind=NodeKind.text, value=out[-1].value + converted.value)
        else:
            out.append(converted)
    return out


def _inline(node: SyntaxTreeNode) -> DocumentNode:
    t = node.type
    if t in ("text", "text_special"):
        return DocumentNode(kind=NodeKind.text, value=node.content)
    if t == "softbreak":
        return DocumentNode(kind=NodeKind.softbreak)
    if t == "hardbreak":
        return DocumentNode(kind=NodeKind.hardbreak)
    if t in _SPANS:
        return DocumentNode(kind=_SPANS[t], attrs={"markup": node.markup}, children=tuple(_inlines(node.children)))
    if t == "code_inline":
        return DocumentNode(kind=NodeKind.inline_code, attrs={"markup": node.markup}, value=node.content)
    if t == "link":
        attrs = {
            "url": str(node.attrs.get("href", "")),
            "title": str(node.attrs.get("title", "") or ""),
            "autolink": node.markup == "autolink",
        }
        return DocumentNode(kind=NodeKind.link, attrs=attrs, children=tuple(_inlines(node.children)))
    if t == "image":
        attrs = {
            "url": str(node.attrs.get("src", "")),
            "title": str(node.attrs.get("title", "") or ""),
            "alt": node.content,
        }
        return DocumentNode(kind=NodeKind.image, attrs=attrs)
    if t != "html_inline":
        logger.debug("unsupported inline %r kept as raw html", t)
    return DocumentNode(kind=NodeKind.html, value=node.content)
