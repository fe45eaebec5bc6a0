"""Read-only index of the diff nodes in a rendered document"""

from typing import Iterable

from mdreview.core.markup.document import DiffDocument
from mdreview.core.markup.preprocess import DEFAULT_BREAK_TOKEN
from mdreview.core.models import DiffNode, DiffNodeType
from mdreview.errors import DiffNodeNotFoundError


class DiffNodeRegistry:
    """Key -> DiffNode lookup in document order; rebuild it whenever the document changes."""

    def __init__(self, nodes: Iterable[DiffNode] = (), substitutions: Iterable[tuple[str, str]] = ()):
        self._nodes: dict[str, DiffNode] = {n.key: n for n in nodes}
        self._substitutions = list(substitutions)

    @classmethod
    def from_document(cls, document: DiffDocument) -> "DiffNodeRegistry":
        return cls(document.nodes(), document.substitution_pairs())

    @classmethod
    def from_markup(cls, markup: str, break_token: str = DEFAULT_BREAK_TOKEN) -> "DiffNodeRegistry":
        return cls.from_document(DiffDocument.parse(markup, break_token))

    def count(self, type: DiffNodeType | str | None = None) -> int:
        """Number of nodes, optionally only 'ins' or 'del' ones."""
        if type is None:
            return len(self._nodes)
        type = DiffNodeType(type)
        return sum(1 for n in self._nodes.values() if n.type == type)

    def change_count(self) -> int:
        """Logical changes: an adjacent deletion + insertion counts once, as a substitution."""
        return len(self._nodes) - len(self._substitutions)

    def get(self, key: str) -> str:
        return self.node(key).text

    def node(self, key: str) -> DiffNode:
        try:
            return self._nodes[key]
        except KeyError:
            raise DiffNodeNotFoundError(key) from None

    def type_of(self, key: str) -> DiffNodeType:
        return self.node(key).type

    def keys_in_order(self) -> list[str]:
        return list(self._nodes)

    def substitutions(self) -> list[tuple[str, str]]:
        return list(self._substitutions)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes
