"""Block tree model: nodes, documents and read-only traversal helpers.

A document is an ordered list of root nodes (a forest). Nodes form a strict
tree below each root: every node has at most one parent, and ids are unique
across the whole document.

Documents are treated as values. Nothing in this package mutates a node or a
node list after it has been handed out; mutations build new lists and share
the untouched subtrees.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from blockforge.errors import DocumentError


@dataclass(eq=False)
class Node:
    """A single block in the document.

    Attributes:
        id: Opaque identifier, unique across the entire document
        type: Block type tag (e.g. "heading", "container")
        settings: Type-specific properties; only ever shallow-merged
        children: Ordered child nodes, or None for a node that never had any
        locked: Advisory flag read by the UI, not enforced by mutations
        hidden: Advisory flag read by the UI
    """

    id: str
    type: str
    settings: dict[str, Any] = field(default_factory=dict)
    children: list[Node] | None = None
    locked: bool = False
    hidden: bool = False

    @property
    def child_list(self) -> list[Node]:
        """Children as a list, empty for leaf nodes."""
        return self.children if self.children is not None else []

    def __eq__(self, other: object) -> bool:
        # A node without children equals one with an empty children list.
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self.id == other.id
            and self.type == other.type
            and self.settings == other.settings
            and self.child_list == other.child_list
            and self.locked == other.locked
            and self.hidden == other.hidden
        )

    __hash__ = None  # type: ignore[assignment]

    def depth_first(self) -> Iterator[Node]:
        """Traverse the subtree pre-order, yielding self first."""
        yield self
        for child in self.child_list:
            yield from child.depth_first()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain mapping. Flags are written only when set."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "settings": copy.deepcopy(self.settings),
        }
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        if self.locked:
            data["locked"] = True
        if self.hidden:
            data["hidden"] = True
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """Deserialize from a plain mapping.

        Raises:
            DocumentError: If required fields are missing or mistyped.
        """
        if not isinstance(data, Mapping):
            raise DocumentError(f"Node must be a mapping, got {type(data).__name__}")
        node_id = data.get("id")
        node_type = data.get("type")
        if not isinstance(node_id, str) or not node_id:
            raise DocumentError(f"Node is missing a string 'id': {dict(data)!r}")
        if not isinstance(node_type, str) or not node_type:
            raise DocumentError(f"Node {node_id!r} is missing a string 'type'")

        settings = data.get("settings") or {}
        if not isinstance(settings, Mapping):
            raise DocumentError(f"Node {node_id!r} has non-mapping settings")

        raw_children = data.get("children")
        children: list[Node] | None = None
        if raw_children is not None:
            if not isinstance(raw_children, list):
                raise DocumentError(f"Node {node_id!r} has non-list children")
            children = [cls.from_dict(child) for child in raw_children]

        return cls(
            id=node_id,
            type=node_type,
            settings=copy.deepcopy(dict(settings)),
            children=children,
            locked=bool(data.get("locked", False)),
            hidden=bool(data.get("hidden", False)),
        )


# A document is the ordered list of root nodes.
Document = list[Node]


@dataclass(frozen=True, slots=True)
class Location:
    """Where a node sits: its parent (None at root level), index and depth."""

    parent_id: str | None
    index: int
    depth: int


def iter_nodes(nodes: Iterable[Node]) -> Iterator[Node]:
    """Yield every node of a forest in pre-order."""
    for node in nodes:
        yield from node.depth_first()


def iter_located(
    nodes: Sequence[Node],
    parent_id: str | None = None,
    depth: int = 0,
) -> Iterator[tuple[Node, Location]]:
    """Yield (node, location) pairs in pre-order."""
    for index, node in enumerate(nodes):
        yield node, Location(parent_id, index, depth)
        if node.children:
            yield from iter_located(node.children, node.id, depth + 1)


def find_node(nodes: Sequence[Node], node_id: str) -> Node | None:
    """Find a node anywhere in the forest (pre-order search)."""
    for node in iter_nodes(nodes):
        if node.id == node_id:
            return node
    return None


def locate(nodes: Sequence[Node], node_id: str) -> Location | None:
    """Find the parent id, sibling index and depth of a node."""
    for node, location in iter_located(nodes):
        if node.id == node_id:
            return location
    return None


def build_index(nodes: Sequence[Node]) -> dict[str, Location]:
    """Map every node id to its location.

    Useful when many lookups run against the same document; the index is
    only valid for the document it was built from.
    """
    return {node.id: location for node, location in iter_located(nodes)}


def collect_ids(nodes: Iterable[Node]) -> set[str]:
    """All node ids in a forest."""
    return {node.id for node in iter_nodes(nodes)}


def subtree_ids(nodes: Sequence[Node], node_id: str) -> set[str]:
    """Ids of a node and all its descendants; empty if the node is missing."""
    node = find_node(nodes, node_id)
    if node is None:
        return set()
    return {n.id for n in node.depth_first()}


def is_descendant(nodes: Sequence[Node], node_id: str, ancestor_id: str) -> bool:
    """Check if node_id is ancestor_id itself or lies inside its subtree."""
    if node_id == ancestor_id:
        return True
    ancestor = find_node(nodes, ancestor_id)
    if ancestor is None:
        return False
    return any(n.id == node_id for n in iter_nodes(ancestor.child_list))


def clone_nodes(nodes: Iterable[Node]) -> list[Node]:
    """Fully independent deep copy of a node list."""
    return [copy.deepcopy(node) for node in nodes]


def document_from_dicts(items: Iterable[Mapping[str, Any]]) -> list[Node]:
    """Build a document from serialized nodes.

    Raises:
        DocumentError: If any node is malformed or an id appears twice.
    """
    if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        raise DocumentError("Document content must be a list of nodes")
    nodes = [Node.from_dict(item) for item in items]
    ensure_unique_ids(nodes)
    return nodes


def document_to_dicts(nodes: Iterable[Node]) -> list[dict[str, Any]]:
    """Serialize a document to plain mappings."""
    return [node.to_dict() for node in nodes]


def ensure_unique_ids(nodes: Iterable[Node]) -> None:
    """Raise DocumentError if any id appears more than once."""
    seen: set[str] = set()
    for node in iter_nodes(nodes):
        if node.id in seen:
            raise DocumentError(f"Duplicate node id: {node.id!r}")
        seen.add(node.id)
