"""Editing session: the unit UI code talks to.

An EditingSession owns one live document, its undo/redo history, the current
selection, the preview viewport and the dirty flag. Sessions are plain
objects; any number can coexist without sharing state.

Every successful edit:
1. commits the new document as live,
2. pushes exactly one history snapshot,
3. marks the session dirty.

Edits that turn out to be no-ops (unknown ids, rejected moves, values
equal to the current ones) change nothing, push nothing and return
False/None. Undo and redo restore a snapshot directly and also mark the
session dirty.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from blockforge.config import Config, get_config
from blockforge.document.ids import IdFactory
from blockforge.document.model import (
    Node,
    clone_nodes,
    collect_ids,
    ensure_unique_ids,
    find_node,
    locate,
)
from blockforge.document import mutations
from blockforge.dragdrop.resolver import DragPayload, DropAction, DropTarget, DropTargetResolver
from blockforge.errors import BlockforgeError, LoadError, RegistryError, SaveError
from blockforge.history import HistoryManager
from blockforge.logging import TRACE, get_logger
from blockforge.session.protocols import (
    BlockRegistry,
    ChangeKind,
    DocumentStore,
    SessionListener,
    Viewport,
)

log = get_logger("session")


class EditingSession:
    """Orchestrates mutations, history, selection and persistence.

    Args:
        store: Where documents are loaded from and saved to.
        registry: Source of default payloads for add_block().
        config: Settings for history size, id generation and drop snapping.
            Defaults to the global config.
        ids: Id generator; built from ``config.ids`` when omitted.
    """

    def __init__(
        self,
        *,
        store: DocumentStore | None = None,
        registry: BlockRegistry | None = None,
        config: Config | None = None,
        ids: IdFactory | None = None,
    ) -> None:
        config = config or get_config()
        self.store = store
        self.registry = registry
        self.ids = ids or IdFactory.from_config(config.ids)
        self.history = HistoryManager(config.history.max_entries)
        self.resolver = DropTargetResolver.from_config(config)

        self.document_id: str | None = None
        self.metadata: dict[str, Any] = {}
        self.viewport = Viewport.DESKTOP

        self._nodes: list[Node] = []
        self._selected_id: str | None = None
        self._dirty = False
        self._listeners: list[SessionListener] = []

        self.history.seed(self._nodes, label="new")

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> list[Node]:
        """The live document. Treat as read-only; edit through the session."""
        return self._nodes

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_node(self) -> Node | None:
        if self._selected_id is None:
            return None
        return find_node(self._nodes, self._selected_id)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def find(self, node_id: str) -> Node | None:
        return find_node(self._nodes, node_id)

    # -------------------------------------------------------------------------
    # Loading and saving
    # -------------------------------------------------------------------------

    def open(
        self,
        document_id: str | None,
        nodes: Sequence[Node],
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Start editing already-fetched content.

        Seeds history with a single snapshot, clears selection and dirty.

        Raises:
            DocumentError: If ids are not unique.
        """
        ensure_unique_ids(nodes)
        self.document_id = document_id
        self.metadata = dict(metadata or {})
        self._nodes = clone_nodes(nodes)
        self._selected_id = None
        self._dirty = False
        self.history.seed(self._nodes)
        log.info("Opened document %s (%d root nodes)", document_id, len(self._nodes))
        self._notify(ChangeKind.LOADED)

    async def load(self, document_id: str) -> None:
        """Fetch a document from the store and start editing it.

        Raises:
            LoadError: If the store fails.
            DocumentError: If the stored content is malformed.
        """
        store = self._require_store(document_id)
        try:
            loaded = await store.load_document(document_id)
        except BlockforgeError:
            raise
        except Exception as e:
            raise LoadError(document_id, str(e)) from e
        self.open(loaded.document_id, loaded.nodes, loaded.metadata)

    async def save(self) -> None:
        """Persist the live document.

        On success the dirty flag is cleared, unless the document was edited
        while the save was in flight. On failure nothing changes locally.

        Raises:
            SaveError: If there is nothing to save to or the store fails.
        """
        if self.store is None:
            raise SaveError(self.document_id, "no document store configured")
        if self.document_id is None:
            raise SaveError(None, "no document loaded")

        saving = self._nodes
        try:
            await self.store.save_content(self.document_id, clone_nodes(saving))
        except Exception as e:
            log.warning("Save of %s failed: %s", self.document_id, e)
            raise SaveError(self.document_id, str(e)) from e

        if self._nodes is saving:
            self._dirty = False
        else:
            log.debug("Document %s edited during save, staying dirty", self.document_id)
        log.info("Saved document %s", self.document_id)
        self._notify(ChangeKind.SAVED)

    def _require_store(self, document_id: str) -> DocumentStore:
        if self.store is None:
            raise LoadError(document_id, "no document store configured")
        return self.store

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def add_block(
        self,
        block_type: str,
        parent_id: str | None = None,
        position: int | None = None,
    ) -> str | None:
        """Create a block of ``block_type`` from registry defaults and insert it.

        The new block becomes the selection.

        Returns:
            The new node id, or None if ``parent_id`` does not exist.

        Raises:
            RegistryError: If no registry is set or its payload is malformed.
        """
        if parent_id is not None and find_node(self._nodes, parent_id) is None:
            log.log(TRACE, "add_block: parent %s not found", parent_id)
            return None
        if self.registry is None:
            raise RegistryError("No block registry configured")

        payload = self.registry.create_default(block_type)
        node = self._node_from_payload(block_type, payload, collect_ids(self._nodes))
        if not self._commit(mutations.insert(self._nodes, node, parent_id, position), "insert"):
            return None
        self._set_selection(node.id)
        return node.id

    def insert_node(
        self,
        node: Node,
        parent_id: str | None = None,
        position: int | None = None,
    ) -> bool:
        """Insert a prebuilt node (e.g. from a clipboard or template)."""
        return self._commit(mutations.insert(self._nodes, node, parent_id, position), "insert")

    def update_node(self, node_id: str, partial: Mapping[str, Any]) -> bool:
        """Shallow-merge node fields. See mutations.update()."""
        return self._commit(mutations.update(self._nodes, node_id, partial), "update")

    def update_settings(self, node_id: str, settings: Mapping[str, Any]) -> bool:
        """Shallow-merge into a node's settings (a field edit in the inspector)."""
        return self._commit(mutations.set_settings(self._nodes, node_id, settings), "update")

    def set_locked(self, node_id: str, locked: bool = True) -> bool:
        return self.update_node(node_id, {"locked": locked})

    def set_hidden(self, node_id: str, hidden: bool = True) -> bool:
        return self.update_node(node_id, {"hidden": hidden})

    def remove_node(self, node_id: str) -> bool:
        """Remove a subtree; clears the selection if it was inside it."""
        return self._commit(mutations.remove(self._nodes, node_id), "remove")

    def move_node(
        self,
        node_id: str,
        target_parent_id: str | None = None,
        position: int | None = None,
    ) -> bool:
        """Relocate a subtree. ``position`` counts after the node's removal."""
        return self._commit(
            mutations.move(self._nodes, node_id, target_parent_id, position), "move"
        )

    def duplicate_node(self, node_id: str) -> str | None:
        """Duplicate a subtree next to the original.

        Returns:
            The clone's id, or None if the node does not exist.
        """
        result, clone_id = mutations.duplicate_with_id(self._nodes, node_id, self.ids)
        if not self._commit(result, "duplicate"):
            return None
        return clone_id

    def replace_content(self, nodes: Sequence[Node]) -> bool:
        """Replace the whole document as one undoable edit.

        Raises:
            DocumentError: If ids are not unique.
        """
        ensure_unique_ids(nodes)
        return self._commit(clone_nodes(nodes), "replace")

    def commit_drop(self, target: DropTarget | None, payload: DragPayload) -> bool:
        """Apply a resolved drop.

        ``target.index`` counts the parent's children before the dragged node
        leaves its old place, and is converted here.
        """
        if target is None:
            log.log(TRACE, "Drop of %s had no target", payload)
            return False

        if payload.action is DropAction.CREATE:
            return self.add_block(payload.value, target.parent_id, target.index) is not None

        node_id = payload.value
        current = locate(self._nodes, node_id)
        if current is None:
            return False
        index = target.index
        if current.parent_id == target.parent_id and current.index < index:
            index -= 1
        return self.move_node(node_id, target.parent_id, index)

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def undo(self) -> bool:
        restored = self.history.undo()
        if restored is None:
            return False
        self._restore(restored, ChangeKind.UNDONE)
        return True

    def redo(self) -> bool:
        restored = self.history.redo()
        if restored is None:
            return False
        self._restore(restored, ChangeKind.REDONE)
        return True

    def _restore(self, nodes: list[Node], kind: ChangeKind) -> None:
        self._nodes = nodes
        # Landing on the last saved state still counts as dirty
        self._dirty = True
        self._reconcile_selection()
        self._notify(kind)

    # -------------------------------------------------------------------------
    # Selection and viewport
    # -------------------------------------------------------------------------

    def select(self, node_id: str | None) -> bool:
        """Select a node, or clear the selection with None.

        Returns False (and changes nothing) for unknown ids.
        """
        if node_id is not None and find_node(self._nodes, node_id) is None:
            return False
        self._set_selection(node_id)
        return True

    def set_viewport(self, viewport: Viewport | str) -> None:
        self.viewport = Viewport(viewport)
        self._notify(ChangeKind.VIEWPORT)

    def _set_selection(self, node_id: str | None) -> None:
        if node_id == self._selected_id:
            return
        self._selected_id = node_id
        self._notify(ChangeKind.SELECTED)

    def _reconcile_selection(self) -> None:
        if self._selected_id is not None and find_node(self._nodes, self._selected_id) is None:
            log.debug("Selected node %s no longer exists", self._selected_id)
            self._set_selection(None)

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A function that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: ChangeKind) -> None:
        for listener in list(self._listeners):
            try:
                listener(self, kind)
            except Exception as e:
                log.warning("Session listener error on %s: %s", kind.value, e)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, result: list[Node], label: str) -> bool:
        # Edits that write the values already there push nothing
        if result is self._nodes or result == self._nodes:
            log.log(TRACE, "%s was a no-op", label)
            return False
        self._nodes = result
        self.history.record(result, label)
        self._dirty = True
        log.debug("Committed %s (history %d/%d)", label, self.history.cursor + 1, len(self.history))
        self._reconcile_selection()
        self._notify(ChangeKind.COMMITTED)
        return True

    def _node_from_payload(
        self,
        block_type: str,
        payload: Mapping[str, Any],
        taken: set[str],
    ) -> Node:
        """Build a node with fresh ids from a registry payload.

        Child payloads carry ``type`` plus optional ``settings``/``children``.

        Raises:
            RegistryError: If the payload is malformed.
        """
        if not isinstance(payload, Mapping):
            raise RegistryError(f"Default for {block_type!r} is not a mapping")
        settings = payload.get("settings")
        if not isinstance(settings, Mapping):
            raise RegistryError(f"Default for {block_type!r} has no settings mapping")

        raw_children = payload.get("children")
        children: list[Node] | None = None
        if raw_children is not None:
            if not isinstance(raw_children, list):
                raise RegistryError(f"Default children for {block_type!r} must be a list")
            children = []
            for child in raw_children:
                child_type = child.get("type") if isinstance(child, Mapping) else None
                if not isinstance(child_type, str) or not child_type:
                    raise RegistryError(f"Default child of {block_type!r} has no type")
                child_payload = {**child, "settings": child.get("settings") or {}}
                children.append(self._node_from_payload(child_type, child_payload, taken))

        node_id = self.ids.new_id(block_type, taken)
        taken.add(node_id)
        return Node(id=node_id, type=block_type, settings=dict(settings), children=children)
