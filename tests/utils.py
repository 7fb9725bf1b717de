"""Shared test utilities for Blockforge tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from blockforge.document.model import Node
from blockforge.session.protocols import LoadedDocument


def make_node(
    node_id: str,
    node_type: str = "paragraph",
    children: list[Node] | None = None,
    **settings: Any,
) -> Node:
    """Create a Node with the given settings as keyword arguments."""
    return Node(id=node_id, type=node_type, settings=dict(settings), children=children)


def make_container(node_id: str, *children: Node, node_type: str = "container") -> Node:
    """Create a container node; with no children it still has an empty list."""
    return Node(id=node_id, type=node_type, children=list(children))


def shape(nodes: Sequence[Node]) -> list[Any]:
    """Compact id structure for assertions.

    Leaves become their id, containers become ``(id, [children...])``.
    """
    result: list[Any] = []
    for node in nodes:
        if node.children is None:
            result.append(node.id)
        else:
            result.append((node.id, shape(node.children)))
    return result


def sample_document() -> list[Node]:
    """A small page.

    Structure:
        page (section)
        ├── title (heading)
        ├── body (container)
        │   ├── p1
        │   └── p2
        └── empty (container, no children)
        footer
    """
    return [
        make_container(
            "page",
            make_node("title", "heading", text="Hello", level=2),
            make_container("body", make_node("p1", text="one"), make_node("p2", text="two")),
            make_container("empty"),
            node_type="section",
        ),
        make_node("footer", text="bye"),
    ]


class FakeStore:
    """In-memory DocumentStore with switchable failures."""

    def __init__(self, documents: dict[str, list[Node]] | None = None) -> None:
        self.documents = documents or {}
        self.saved: list[tuple[str, list[Node]]] = []
        self.fail_save: Exception | None = None
        self.fail_load: Exception | None = None
        self.during_save: Callable[[], None] | None = None

    async def load_document(self, document_id: str) -> LoadedDocument:
        if self.fail_load:
            raise self.fail_load
        return LoadedDocument(
            document_id=document_id,
            nodes=self.documents[document_id],
            metadata={"title": document_id.title()},
        )

    async def save_content(self, document_id: str, nodes: Sequence[Node]) -> None:
        if self.during_save:
            self.during_save()
        if self.fail_save:
            raise self.fail_save
        self.saved.append((document_id, list(nodes)))
        self.documents[document_id] = list(nodes)


class CountingRegistry:
    """BlockRegistry that records every create_default call."""

    def __init__(self, defaults: dict[str, Any]) -> None:
        self.defaults = defaults
        self.calls: list[str] = []

    def create_default(self, block_type: str) -> Any:
        self.calls.append(block_type)
        return self.defaults[block_type]
