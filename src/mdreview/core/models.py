"""Data models shared by the parse, diff, and markup stages"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class NodeKind(str, Enum):
    """Restrict document tree nodes to the markdown constructs the differ understands"""
    document = "document"
    paragraph = "paragraph"
    heading = "heading"
    list = "list"
    list_item = "listItem"
    code = "code"
    table = "table"
    table_row = "tableRow"
    table_cell = "tableCell"
    blockquote = "blockquote"
    thematic_break = "thematicBreak"
    html = "html"
    text = "text"
    emphasis = "emphasis"
    strong = "strong"
    strikethrough = "strikethrough"
    inline_code = "inlineCode"
    link = "link"
    image = "image"
    softbreak = "softbreak"
    hardbreak = "hardbreak"


class DocumentNode(BaseModel):
    """Immutable node of a parsed markdown tree."""
    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    attrs: dict[str, Any] = {}
    children: tuple["DocumentNode", ...] = ()
    value: str = ""                     # leaf text: text runs, code bodies, raw html

    def attr(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)


DocumentNode.model_rebuild()


class ChangeKind(str, Enum):
    equal = "equal"
    insert = "insert"
    delete = "delete"
    substitute = "substitute"


class ChangeRecord(BaseModel):
    """One unit of diff output. Equal/delete carry before_text, equal/insert carry after_text."""
    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    before_text: Optional[str] = None
    after_text: Optional[str] = None

    @model_validator(mode="after")
    def _check_sides(self) -> "ChangeRecord":
        needs_before = self.kind in (ChangeKind.equal, ChangeKind.delete, ChangeKind.substitute)
        needs_after = self.kind in (ChangeKind.equal, ChangeKind.insert, ChangeKind.substitute)
        if needs_before and self.before_text is None:
            raise ValueError(f"{self.kind.value} record requires before_text")
        if needs_after and self.after_text is None:
            raise ValueError(f"{self.kind.value} record requires after_text")
        return self

    @classmethod
    def equal(cls, text: str) -> "ChangeRecord":
        return cls(kind=ChangeKind.equal, before_text=text, after_text=text)

    @classmethod
    def insert(cls, text: str) -> "ChangeRecord":
        return cls(kind=ChangeKind.insert, after_text=text)

    @classmethod
    def delete(cls, text: str) -> "ChangeRecord":
        return cls(kind=ChangeKind.delete, before_text=text)

    @classmethod
    def substitute(cls, before: str, after: str) -> "ChangeRecord":
        return cls(kind=ChangeKind.substitute, before_text=before, after_text=after)


class DiffNodeType(str, Enum):
    insertion = "ins"
    deletion = "del"


class DiffNode(BaseModel):
    """One addressable insertion or deletion span of a rendered diff document."""
    model_config = ConfigDict(frozen=True)

    key: str
    type: DiffNodeType
    text: str
