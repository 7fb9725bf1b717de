"""Block documents: the node model and pure structural mutations."""

from blockforge.document.ids import IdFactory
from blockforge.document.model import (
    Document,
    Location,
    Node,
    build_index,
    clone_nodes,
    collect_ids,
    document_from_dicts,
    document_to_dicts,
    ensure_unique_ids,
    find_node,
    is_descendant,
    iter_located,
    iter_nodes,
    locate,
    subtree_ids,
)
from blockforge.document.mutations import (
    duplicate,
    duplicate_with_id,
    insert,
    move,
    remove,
    set_settings,
    update,
)

__all__ = [
    "Document",
    "IdFactory",
    "Location",
    "Node",
    "build_index",
    "clone_nodes",
    "collect_ids",
    "document_from_dicts",
    "document_to_dicts",
    "ensure_unique_ids",
    "find_node",
    "is_descendant",
    "iter_located",
    "iter_nodes",
    "locate",
    "subtree_ids",
    "duplicate",
    "duplicate_with_id",
    "insert",
    "move",
    "remove",
    "set_settings",
    "update",
]
