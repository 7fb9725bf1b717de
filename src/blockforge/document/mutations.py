"""Structural mutations over block documents.

Every function here is pure: the input document is never modified and a new
list is returned. Only the path from the root to the edited node is rebuilt;
untouched subtrees are shared between the old and new documents.

A lookup that misses (unknown node id, unknown parent, a move that would
create a cycle) is not an error. The function returns the input document
object itself, so callers detect a no-op with ``result is doc``.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import fields, replace
from typing import Any

from blockforge.document.ids import IdFactory
from blockforge.document.model import (
    Node,
    collect_ids,
    find_node,
    is_descendant,
    iter_nodes,
    locate,
    subtree_ids,
)

_UPDATABLE_FIELDS = frozenset(f.name for f in fields(Node)) - {"id"}

_default_ids = IdFactory()


def _rewrite(
    nodes: Sequence[Node],
    node_id: str,
    edit: Callable[[list[Node], int], list[Node]],
) -> list[Node]:
    """Apply ``edit`` to the sibling list holding ``node_id``.

    ``edit`` receives a fresh copy of the sibling list and the node's index
    and returns the replacement list. Returns ``nodes`` itself if the id is
    not found.
    """
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return edit(list(nodes), index)
        if node.children:
            children = _rewrite(node.children, node_id, edit)
            if children is not node.children:
                result = list(nodes)
                result[index] = replace(node, children=children)
                return result
    return nodes  # type: ignore[return-value]


def _clamp(position: int | None, length: int) -> int:
    if position is None:
        return length
    return max(0, min(position, length))


def _spliced(items: Sequence[Node], position: int | None, node: Node) -> list[Node]:
    result = list(items)
    result.insert(_clamp(position, len(result)), node)
    return result


def _insert(
    doc: Sequence[Node],
    node: Node,
    parent_id: str | None,
    position: int | None,
) -> list[Node]:
    if parent_id is None:
        return _spliced(doc, position, node)

    def into_parent(siblings: list[Node], index: int) -> list[Node]:
        parent = siblings[index]
        siblings[index] = replace(parent, children=_spliced(parent.child_list, position, node))
        return siblings

    return _rewrite(doc, parent_id, into_parent)


def insert(
    doc: Sequence[Node],
    node: Node,
    parent_id: str | None = None,
    position: int | None = None,
) -> list[Node]:
    """Insert ``node`` at root level or into the children of ``parent_id``.

    Args:
        doc: Current document.
        node: Node to insert; a private copy is stored.
        parent_id: Parent to insert into, or None for the root list.
            A parent without children gets a new children list.
        position: Index in the destination list, clamped to its bounds.
            None appends.

    Returns:
        The new document, or ``doc`` if the parent was not found or any id in
        ``node``'s subtree is already in the document.
    """
    taken = collect_ids(doc)
    if any(n.id in taken for n in node.depth_first()):
        return doc  # type: ignore[return-value]
    return _insert(doc, copy.deepcopy(node), parent_id, position)


def update(doc: Sequence[Node], node_id: str, partial: Mapping[str, Any]) -> list[Node]:
    """Shallow-merge ``partial`` into the node's fields.

    ``partial`` maps Node field names to new values; ``settings`` replaces the
    whole settings mapping (use set_settings() to merge into it). Children are
    untouched unless ``partial`` supplies them. An ``id`` key is ignored.

    Returns ``doc`` unchanged if supplied children would reuse an id found
    elsewhere in the document, or repeat an id among themselves.

    Raises:
        TypeError: If ``partial`` names a field Node does not have.
    """
    changes = {key: value for key, value in partial.items() if key != "id"}
    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"Unknown node fields: {sorted(unknown)}")
    if not changes:
        return doc  # type: ignore[return-value]
    if isinstance(changes.get("settings"), Mapping):
        changes["settings"] = dict(changes["settings"])
    if changes.get("children") is not None:
        children = copy.deepcopy(list(changes["children"]))
        # The node's current subtree is replaced, so only its own id stays taken
        taken = (collect_ids(doc) - subtree_ids(doc, node_id)) | {node_id}
        for child in iter_nodes(children):
            if child.id in taken:
                return doc  # type: ignore[return-value]
            taken.add(child.id)
        changes["children"] = children

    def merge(siblings: list[Node], index: int) -> list[Node]:
        siblings[index] = replace(siblings[index], **changes)
        return siblings

    return _rewrite(doc, node_id, merge)


def set_settings(doc: Sequence[Node], node_id: str, settings: Mapping[str, Any]) -> list[Node]:
    """Shallow-merge ``settings`` into the node's settings mapping."""

    def merge(siblings: list[Node], index: int) -> list[Node]:
        node = siblings[index]
        siblings[index] = replace(node, settings={**node.settings, **settings})
        return siblings

    return _rewrite(doc, node_id, merge)


def remove(doc: Sequence[Node], node_id: str) -> list[Node]:
    """Remove the node and its whole subtree, wherever it is."""

    def drop(siblings: list[Node], index: int) -> list[Node]:
        del siblings[index]
        return siblings

    return _rewrite(doc, node_id, drop)


def move(
    doc: Sequence[Node],
    node_id: str,
    target_parent_id: str | None = None,
    position: int | None = None,
) -> list[Node]:
    """Relocate a subtree.

    The subtree is deep-copied before removal, removed, then the copy is
    inserted at ``position`` in the destination list as it stands after the
    removal.

    Returns ``doc`` unchanged when the node is missing, when the target is the
    node itself or one of its descendants, when the target parent is missing,
    or when the move would leave the node where it already is.
    """
    source = find_node(doc, node_id)
    if source is None:
        return doc  # type: ignore[return-value]
    if target_parent_id is not None and is_descendant(doc, target_parent_id, node_id):
        return doc  # type: ignore[return-value]

    captured = copy.deepcopy(source)
    without = remove(doc, node_id)

    if target_parent_id is None:
        destination: Sequence[Node] = without
    else:
        parent = find_node(without, target_parent_id)
        if parent is None:
            return doc  # type: ignore[return-value]
        destination = parent.child_list

    current = locate(doc, node_id)
    if (
        current is not None
        and current.parent_id == target_parent_id
        and _clamp(position, len(destination)) == current.index
    ):
        return doc  # type: ignore[return-value]

    return _insert(without, captured, target_parent_id, position)


def _with_fresh_ids(node: Node, ids: IdFactory, taken: set[str]) -> Node:
    new_id = ids.new_id(node.type, taken)
    taken.add(new_id)
    children = None
    if node.children is not None:
        children = [_with_fresh_ids(child, ids, taken) for child in node.children]
    return replace(node, id=new_id, settings=copy.deepcopy(node.settings), children=children)


def duplicate_with_id(
    doc: Sequence[Node],
    node_id: str,
    ids: IdFactory | None = None,
) -> tuple[list[Node], str | None]:
    """Duplicate a subtree and report the clone's id.

    Returns:
        (new document, clone id), or (``doc``, None) if the node is missing.
    """
    source = find_node(doc, node_id)
    if source is None:
        return doc, None  # type: ignore[return-value]

    clone = _with_fresh_ids(source, ids or _default_ids, collect_ids(doc))

    def after(siblings: list[Node], index: int) -> list[Node]:
        siblings.insert(index + 1, clone)
        return siblings

    return _rewrite(doc, node_id, after), clone.id


def duplicate(doc: Sequence[Node], node_id: str, ids: IdFactory | None = None) -> list[Node]:
    """Clone a subtree with fresh ids and insert it right after the original.

    No id in the clone exists anywhere in ``doc``.
    """
    result, _ = duplicate_with_id(doc, node_id, ids)
    return result
