"""Drop target resolution for drag gestures.

Maps a pointer position and a drag payload to an insertion target. The
resolver is stateless and only walks the rendered slot layout, so it is safe
to call on every pointer-move event.

Resolution:
1. Exclude hosts that would create a cycle for a relocate payload (the dragged
   node itself and every host inside its subtree) and the two slots around
   the dragged node's current position.
2. Among the remaining hosts whose bounds contain the pointer, prefer the
   most deeply nested one and pick its nearest slot.
3. If no host claims the pointer, fall back to the nearest root-level slot.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from blockforge.config.schema import Config
from blockforge.dragdrop.geometry import Point
from blockforge.dragdrop.slots import DropHost, Slot, SlotLayout
from blockforge.logging import TRACE, get_logger

log = get_logger("dragdrop")


class DropAction(Enum):
    """What committing a drop does."""

    CREATE = "create"  # payload is a block type from the palette
    RELOCATE = "relocate"  # payload is an existing node id


@dataclass(frozen=True, slots=True)
class DragPayload:
    """The thing being dragged."""

    action: DropAction
    value: str  # block type for CREATE, node id for RELOCATE

    @classmethod
    def palette(cls, block_type: str) -> DragPayload:
        return cls(DropAction.CREATE, block_type)

    @classmethod
    def existing(cls, node_id: str) -> DragPayload:
        return cls(DropAction.RELOCATE, node_id)

    @property
    def block_type(self) -> str | None:
        return self.value if self.action is DropAction.CREATE else None

    @property
    def node_id(self) -> str | None:
        return self.value if self.action is DropAction.RELOCATE else None


@dataclass(frozen=True, slots=True)
class DropTarget:
    """Resolved insertion point.

    ``index`` is a position in the host's full children list, unrendered
    siblings included, taken before a relocated node is removed from its old
    position.
    """

    parent_id: str | None
    index: int
    action: DropAction


class DropTargetResolver:
    """Resolves pointer positions to DropTargets.

    Args:
        snap_distance: Max distance between pointer and root slot for the
            fallback when no host contains the pointer. None snaps from any
            distance.
    """

    def __init__(self, snap_distance: float | None = None) -> None:
        self.snap_distance = snap_distance

    @classmethod
    def from_config(cls, config: Config) -> DropTargetResolver:
        return cls(snap_distance=config.dragdrop.snap_distance)

    def resolve(
        self,
        layout: SlotLayout,
        pointer: Point,
        payload: DragPayload,
    ) -> DropTarget | None:
        """Resolve the drop target under ``pointer``.

        Returns:
            The target, or None when no valid slot is available.
        """
        dragged = payload.node_id
        blocked = self._blocked_slots(layout, dragged) if dragged else set()

        claiming = [
            host
            for host in layout.hosts
            if host.bounds.contains(pointer) and not (dragged and host.encloses(dragged))
        ]
        # Deepest first; among equals the tighter box wins
        claiming.sort(key=lambda h: (-h.depth, h.bounds.area))

        for host in claiming:
            slot = self._nearest(host.slots, pointer, blocked)
            if slot is not None:
                return self._target(slot, payload)

        root = layout.root
        if root is None:
            return None
        slot = self._nearest(root.slots, pointer, blocked)
        if slot is None:
            return None
        if self.snap_distance is not None and slot.distance_to(pointer) > self.snap_distance:
            log.log(TRACE, "Pointer %s too far from any slot", pointer)
            return None
        return self._target(slot, payload)

    def cancel(self) -> None:
        """Explicit cancel gesture: there is never a target."""
        return None

    @staticmethod
    def _blocked_slots(layout: SlotLayout, node_id: str) -> set[tuple[str | None, int]]:
        """Slots that would leave the dragged node where it is."""
        host: DropHost | None = layout.host_holding(node_id)
        index = host.index_of(node_id) if host else None
        if host is None or index is None:
            return set()
        return {(host.host_id, index), (host.host_id, index + 1)}

    @staticmethod
    def _nearest(
        slots: Iterable[Slot],
        pointer: Point,
        blocked: set[tuple[str | None, int]],
    ) -> Slot | None:
        best: Slot | None = None
        best_distance = 0.0
        for slot in slots:
            if (slot.parent_id, slot.index) in blocked:
                continue
            distance = slot.distance_to(pointer)
            if best is None or distance < best_distance:
                best, best_distance = slot, distance
        return best

    @staticmethod
    def _target(slot: Slot, payload: DragPayload) -> DropTarget:
        target = DropTarget(slot.parent_id, slot.index, payload.action)
        log.log(TRACE, "Resolved %s -> %s", payload, target)
        return target
