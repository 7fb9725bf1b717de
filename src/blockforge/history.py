"""Bounded undo/redo history of document snapshots.

Each completed edit pushes exactly one Snapshot, so a single undo always
reverts one whole logical action. Pushing after an undo discards the redo
branch; it is never merged back.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from blockforge.config.schema import DEFAULT_HISTORY_LIMIT
from blockforge.document.model import Node, clone_nodes, document_to_dicts
from blockforge.logging import VERBOSE, get_logger

log = get_logger("history")


@dataclass(frozen=True)
class Snapshot:
    """Independent copy of a document's root list at one instant.

    Attributes:
        nodes: Deep-copied root nodes; never handed out directly
        label: Action that produced the snapshot (e.g. "insert", "move")
        snapshot_id: Unique identifier (8-char UUID prefix)
        created_at: Unix timestamp of capture
    """

    nodes: tuple[Node, ...]
    label: str = ""
    snapshot_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    created_at: float = field(default_factory=time.time)

    @classmethod
    def capture(cls, nodes: Iterable[Node], label: str = "") -> Snapshot:
        return cls(nodes=tuple(clone_nodes(nodes)), label=label)

    def restore(self) -> list[Node]:
        """A fresh copy of the captured document."""
        return clone_nodes(self.nodes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "snapshot_id": self.snapshot_id,
            "label": self.label,
            "created_at": self.created_at,
            "nodes": document_to_dicts(self.nodes),
        }

    def get_digest(self) -> dict[str, Any]:
        """Brief summary for history panels."""
        return {
            "snapshot_id": self.snapshot_id,
            "label": self.label,
            "created_at": self.created_at,
            "root_count": len(self.nodes),
        }


class HistoryManager:
    """Snapshot stack with a cursor.

    Whenever the stack is non-empty the cursor lies in ``[0, len - 1]`` and
    ``entries[cursor]`` is the snapshot of the live document.
    """

    def __init__(self, max_entries: int = DEFAULT_HISTORY_LIMIT) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: list[Snapshot] = []
        self._cursor = -1

    @property
    def cursor(self) -> int:
        """Index of the live snapshot, -1 when empty."""
        return self._cursor

    @property
    def current(self) -> Snapshot | None:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    @property
    def entries(self) -> list[Snapshot]:
        return list(self._entries)

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self._entries]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._entries) - 1

    def seed(self, nodes: Iterable[Node], label: str = "load") -> Snapshot:
        """Reset the stack to a single snapshot of a freshly loaded document."""
        snapshot = Snapshot.capture(nodes, label)
        self._entries = [snapshot]
        self._cursor = 0
        return snapshot

    def push(self, snapshot: Snapshot) -> None:
        """Record a completed edit.

        Drops every snapshot after the cursor, appends, evicts the oldest entry
        beyond ``max_entries`` and moves the cursor to the new last entry.
        """
        del self._entries[self._cursor + 1 :]
        self._entries.append(snapshot)
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            del self._entries[:overflow]
            log.log(VERBOSE, "History full, evicted %d oldest snapshot(s)", overflow)
        self._cursor = len(self._entries) - 1

    def record(self, nodes: Iterable[Node], label: str = "") -> Snapshot:
        """Capture ``nodes`` and push the snapshot."""
        snapshot = Snapshot.capture(nodes, label)
        self.push(snapshot)
        return snapshot

    def undo(self) -> list[Node] | None:
        """Step back one snapshot.

        Returns:
            A copy of the document to make live, or None at the start.
        """
        if not self.can_undo:
            return None
        undone = self._entries[self._cursor]
        self._cursor -= 1
        log.debug("Undo %r -> cursor %d", undone.label, self._cursor)
        return self._entries[self._cursor].restore()

    def redo(self) -> list[Node] | None:
        """Step forward one snapshot, or None at the end."""
        if not self.can_redo:
            return None
        self._cursor += 1
        redone = self._entries[self._cursor]
        log.debug("Redo %r -> cursor %d", redone.label, self._cursor)
        return redone.restore()

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._entries)
