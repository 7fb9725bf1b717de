"""Contracts between an editing session and its external collaborators.

- DocumentStore: loads documents and persists their content
- BlockRegistry: supplies default payloads for newly created blocks
- SessionListener: UI callbacks fired after the session state changes
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from blockforge.document.model import Node

if TYPE_CHECKING:
    from blockforge.session.controller import EditingSession


class Viewport(Enum):
    """Device width the canvas is previewed at."""

    DESKTOP = "desktop"
    TABLET = "tablet"
    MOBILE = "mobile"


class ChangeKind(Enum):
    """Why listeners are being notified."""

    LOADED = "loaded"
    COMMITTED = "committed"
    UNDONE = "undone"
    REDONE = "redone"
    SAVED = "saved"
    SELECTED = "selected"
    VIEWPORT = "viewport"


@dataclass
class LoadedDocument:
    """A document fetched from a store.

    Attributes:
        document_id: Store identifier
        nodes: Root nodes of the content
        metadata: Anything else the store returned (title, timestamps, ...)
    """

    document_id: str
    nodes: list[Node]
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class DocumentStore(Protocol):
    """Persistence boundary. Failures are raised, never returned."""

    async def load_document(self, document_id: str) -> LoadedDocument: ...

    async def save_content(self, document_id: str, nodes: Sequence[Node]) -> None: ...


@runtime_checkable
class BlockRegistry(Protocol):
    """Per-type default payloads: ``{"settings": {...}, "children": [...]?}``."""

    def create_default(self, block_type: str) -> Mapping[str, Any]: ...


SessionListener = Callable[["EditingSession", ChangeKind], None]
