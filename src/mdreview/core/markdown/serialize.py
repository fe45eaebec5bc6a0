"""Canonical markdown serialization of DocumentNode trees

Every node is written through a MarkdownWriter so the differ, which writes the
same nodes under delete/insert kinds, produces exactly the text serialize()
produces for each view.
"""

import re

from mdreview.core.markdown.writer import MarkdownWriter
from mdreview.core.models import ChangeKind, DocumentNode, NodeKind


BLOCK_SEP = "\n\n"
QUOTE_PREFIX = "> "

_WORD_RE = re.compile(r"\w+|\s|[^\w\s]")
_ALIGN_MARKERS = {"left": ":---", "right": "---:", "center": ":---:", None: "---"}


def serialize(node: DocumentNode) -> str:
    """Return canonical markdown for node (a document or any block)."""
    writer = MarkdownWriter()
    write_node(writer, node, ChangeKind.equal)
    return writer.text()


# --- blocks ---

def write_node(writer: MarkdownWriter, node: DocumentNode, kind: ChangeKind) -> None:
    """Write node and its descendants to writer under a single change kind."""
    k = node.kind
    if k == NodeKind.document:
        write_blocks(writer, node.children, kind, BLOCK_SEP)
    elif k == NodeKind.paragraph:
        writer.write(kind, inline_text(node.children))
    elif k == NodeKind.heading:
        writer.write(kind, heading_prefix(node) + inline_text(node.children))
    elif k == NodeKind.list:
        for i, item in enumerate(node.children):
            if i:
                writer.write(kind, list_separator(node))
            write_list_item(writer, node, i, item, kind)
    elif k == NodeKind.blockquote:
        writer.write(kind, QUOTE_PREFIX)
        with writer.prefixed(QUOTE_PREFIX):
            write_blocks(writer, node.children, kind, BLOCK_SEP)
    elif k == NodeKind.code:
        writer.write(kind, code_text(node))
    elif k == NodeKind.table:
        writer.write(kind, table_text(node))
    elif k == NodeKind.table_row:
        writer.write(kind, row_text(node))
    elif k == NodeKind.thematic_break:
        writer.write(kind, "---")
    elif k == NodeKind.list_item:
        write_blocks(writer, node.children, kind, BLOCK_SEP)
    else:
        writer.write(kind, inline_text([node]))


def write_blocks(writer: MarkdownWriter, nodes, kind: ChangeKind, sep: str) -> None:
    for i, child in enumerate(nodes):
        if i:
            writer.write(kind, sep)
        write_node(writer, child, kind)


def heading_prefix(node: DocumentNode) -> str:
    return "#" * node.attr("depth", 1) + " "


def list_separator(node: DocumentNode) -> str:
    """Separator between items of a list, and between blocks inside one item."""
    return "\n" if node.attr("tight", True) else BLOCK_SEP


def list_marker(node: DocumentNode, index: int) -> str:
    if node.attr("ordered"):
        return f"{node.attr('start', 1) + index}{node.attr('delimiter', '.')} "
    return f"{node.attr('bullet', '-')} "


def list_indent(node: DocumentNode) -> str:
    return "    " if node.attr("ordered") else "  "


def write_list_item(
    writer: MarkdownWriter,
    list_node: DocumentNode,
    index: int,
    item: DocumentNode,
    kind: ChangeKind,
    ) -> None:
    writer.write(kind, list_marker(list_node, index))
    with writer.prefixed(list_indent(list_node)):
        write_blocks(writer, item.children, kind, list_separator(list_node))


def item_body(list_node: DocumentNode, item: DocumentNode) -> str:
    """Serialized item content without its marker; used to anchor items across lists."""
    writer = MarkdownWriter()
    write_blocks(writer, item.children, ChangeKind.equal, list_separator(list_node))
    return writer.text()


def code_text(node: DocumentNode) -> str:
    fence = node.attr("fence") or "```"
    body = node.value if not node.value or node.value.endswith("\n") else node.value + "\n"
    return f"{fence}{node.attr('lang', '')}\n{body}{fence}"


def row_text(node: DocumentNode) -> str:
    cells = [inline_text(c.children).replace("|", "\\|") for c in node.children]
    return "| " + " | ".join(cells) + " |"


def table_delimiter(node: DocumentNode) -> str:
    return "| " + " | ".join(_ALIGN_MARKERS.get(a, "---") for a in node.attr("align", ())) + " |"


def table_head(node: DocumentNode) -> str:
    """Header row plus alignment row."""
    return row_text(node.children[0]) + "\n" + table_delimiter(node)


def table_text(node: DocumentNode) -> str:
    rows = [table_head(node)] + [row_text(r) for r in node.children[1:]]
    return "\n".join(rows)


# --- inline ---

def inline_text(nodes) -> str:
    return "".join(inline_tokens(nodes))


def text_tokens(value: str, granularity: str = "word") -> list[str]:
    """Split a text run into word runs, single whitespace chars, and single punctuation chars."""
    if granularity == "char":
        return list(value)
    return _WORD_RE.findall(value)


def inline_tokens(nodes, granularity: str = "word") -> list[str]:
    """Flatten inline nodes into diff tokens; joining the tokens yields the serialized text."""
    tokens: list[str] = []
    for node in nodes:
        k = node.kind
        if k == NodeKind.text:
            tokens.extend(text_tokens(node.value, granularity))
        elif k == NodeKind.softbreak:
            tokens.append("\n")
        elif k == NodeKind.hardbreak:
            tokens.append("\\\n")
        elif k in (NodeKind.emphasis, NodeKind.strong, NodeKind.strikethrough):
            markup = node.attr("markup", "")
            tokens.append(markup)
            tokens.extend(inline_tokens(node.children, granularity))
            tokens.append(markup)
        elif k == NodeKind.inline_code:
            markup = node.attr("markup", "`")
            tokens.append(f"{markup}{node.value}{markup}")
        elif k == NodeKind.link:
            if node.attr("autolink"):
                tokens.append(f"<{node.attr('url')}>")
            else:
                tokens.append("[")
                tokens.extend(inline_tokens(node.children, granularity))
                tokens.append(f"]({_destination(node)})")
        elif k == NodeKind.image:
            tokens.append(f"![{node.attr('alt', '')}]({_destination(node)})")
        elif k == NodeKind.html:
            tokens.append(node.value)
        else:
            tokens.extend(inline_tokens(node.children, granularity))
    return tokens


def _destination(node: DocumentNode) -> str:
    url = node.attr("url", "")
    if " " in url or not url:
        url = f"<{url}>"
    title = node.attr("title")
    return f'{url} "{title}"' if title else url
