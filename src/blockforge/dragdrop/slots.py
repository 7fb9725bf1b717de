"""Drop hosts and the insertion slots they expose.

The renderer publishes one DropHost per rendered container (plus one for the
implicit root container) whenever the canvas is laid out. Pointer-move
resolution then only looks at these hosts, never at the document itself.

Slot pattern per host:
- one slot before the first child and one after each child
- an empty host exposes a single "inside" slot instead
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property

from blockforge.document.model import Node
from blockforge.dragdrop.geometry import Point, Rect


class Axis(Enum):
    """Direction in which a host stacks its children."""

    VERTICAL = "vertical"  # column layout, slots are horizontal lines
    HORIZONTAL = "horizontal"  # row layout, slots are vertical lines


class SlotKind(Enum):
    BEFORE = "before"
    AFTER = "after"
    INSIDE = "inside"


@dataclass(frozen=True, slots=True)
class Slot:
    """An insertion point: parent (None for root level) plus index.

    Attributes:
        parent_id: Host node id, None for the root list
        index: Position in the host's children before any removal
        kind: BEFORE/AFTER a child, or INSIDE an empty host
        boundary: Line (or area, for INSIDE) the pointer is measured against
        depth: Nesting depth of the host
    """

    parent_id: str | None
    index: int
    kind: SlotKind
    boundary: Rect
    depth: int = 0

    def distance_to(self, point: Point) -> float:
        return self.boundary.distance_to(point)


@dataclass(frozen=True)
class DropHost:
    """A rendered container that accepts drops.

    Attributes:
        host_id: Container node id, None for the implicit root container
        bounds: Rendered bounds of the container
        children: (child id, document index, rendered bounds) for each rendered
            child, in document order. Unrendered siblings are absent, so the
            document index can skip values.
        depth: 0 for the root container, parent depth + 1 below it
        ancestor_ids: Ids of every container enclosing this one
        axis: Stacking direction of the children
    """

    host_id: str | None
    bounds: Rect
    children: tuple[tuple[str, int, Rect], ...] = ()
    depth: int = 0
    ancestor_ids: frozenset[str] = frozenset()
    axis: Axis = Axis.VERTICAL

    @property
    def is_root(self) -> bool:
        return self.host_id is None

    @property
    def child_ids(self) -> list[str]:
        return [child_id for child_id, _, _ in self.children]

    def index_of(self, node_id: str) -> int | None:
        """Document index of a rendered child."""
        for child_id, index, _ in self.children:
            if child_id == node_id:
                return index
        return None

    def encloses(self, node_id: str) -> bool:
        """True if this host is ``node_id`` or sits inside its subtree."""
        return self.host_id == node_id or node_id in self.ancestor_ids

    def _line(self, offset: float) -> Rect:
        if self.axis is Axis.VERTICAL:
            return Rect(self.bounds.x, offset, self.bounds.width, 0.0)
        return Rect(offset, self.bounds.y, 0.0, self.bounds.height)

    def _leading(self, rect: Rect) -> float:
        return rect.top if self.axis is Axis.VERTICAL else rect.left

    def _trailing(self, rect: Rect) -> float:
        return rect.bottom if self.axis is Axis.VERTICAL else rect.right

    @cached_property
    def slots(self) -> tuple[Slot, ...]:
        """Slots in index order, computed once per host.

        Slot indices are document indices: the slot before the first rendered
        child takes that child's index, the slot after a child its index + 1.
        """
        if not self.children:
            return (Slot(self.host_id, 0, SlotKind.INSIDE, self.bounds, self.depth),)

        _, first_index, first_rect = self.children[0]
        result = [
            Slot(self.host_id, first_index, SlotKind.BEFORE, self._line(self._leading(first_rect)), self.depth)
        ]
        for position, (_, index, rect) in enumerate(self.children):
            end = self._trailing(rect)
            if position + 1 < len(self.children):
                # Between two children the boundary sits mid-gap
                end = (end + self._leading(self.children[position + 1][2])) / 2
            result.append(Slot(self.host_id, index + 1, SlotKind.AFTER, self._line(end), self.depth))
        return tuple(result)


@dataclass
class SlotLayout:
    """Every drop host currently rendered on the canvas."""

    hosts: list[DropHost] = field(default_factory=list)

    def add(self, host: DropHost) -> DropHost:
        self.hosts.append(host)
        return host

    @property
    def root(self) -> DropHost | None:
        for host in self.hosts:
            if host.is_root:
                return host
        return None

    def get(self, host_id: str | None) -> DropHost | None:
        for host in self.hosts:
            if host.host_id == host_id:
                return host
        return None

    def host_holding(self, node_id: str) -> DropHost | None:
        """The host that lists ``node_id`` among its children."""
        for host in self.hosts:
            if host.index_of(node_id) is not None:
                return host
        return None

    def iter_slots(self) -> Iterator[Slot]:
        for host in self.hosts:
            yield from host.slots

    def __len__(self) -> int:
        return len(self.hosts)


def _is_container(node: Node) -> bool:
    return node.children is not None


def build_layout(
    nodes: Sequence[Node],
    root_bounds: Rect,
    bounds_of: Callable[[str], Rect | None],
    *,
    is_host: Callable[[Node], bool] = _is_container,
    axis_of: Callable[[Node], Axis] | None = None,
) -> SlotLayout:
    """Build a SlotLayout from a document and its rendered geometry.

    Run this when the canvas is laid out, not on pointer moves.

    Args:
        nodes: Root nodes of the document.
        root_bounds: Bounds of the canvas (the implicit root container).
        bounds_of: Rendered bounds of a node, or None if it is not rendered
            (hidden, collapsed or scrolled away); unrendered subtrees
            contribute no hosts or slots.
        is_host: Whether a node accepts drops. Defaults to nodes that have a
            children list.
        axis_of: Stacking direction of a host's children. Defaults to vertical.
    """
    layout = SlotLayout()

    def visit(
        host_id: str | None,
        bounds: Rect,
        children: Sequence[Node],
        depth: int,
        ancestors: frozenset[str],
        axis: Axis,
    ) -> None:
        rendered = [(child, index, bounds_of(child.id)) for index, child in enumerate(children)]
        rendered = [(child, index, rect) for child, index, rect in rendered if rect is not None]
        layout.add(
            DropHost(
                host_id=host_id,
                bounds=bounds,
                children=tuple((child.id, index, rect) for child, index, rect in rendered),
                depth=depth,
                ancestor_ids=ancestors,
                axis=axis,
            )
        )
        inner = ancestors | {host_id} if host_id is not None else ancestors
        for child, _, rect in rendered:
            if is_host(child):
                child_axis = axis_of(child) if axis_of else Axis.VERTICAL
                visit(child.id, rect, child.child_list, depth + 1, inner, child_axis)

    visit(None, root_bounds, nodes, 0, frozenset(), Axis.VERTICAL)
    return layout
