"""YAML file-backed document store.

Documents live in ``<root>/<document-id>.yaml``:

    id: home
    title: Home page
    created_at: 2026-01-17T10:30:00
    updated_at: 2026-01-17T11:02:41
    content:
      nodes:
        - id: block-3f9a0c1b2d4e
          type: heading
          settings: {text: Welcome}

Writes go to a temp file first and are renamed into place. Blocking file I/O
runs in a worker thread so the event loop driving the editor is never held.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from blockforge.config.schema import Config
from blockforge.document.model import Node, document_from_dicts, document_to_dicts
from blockforge.errors import LoadError
from blockforge.logging import get_logger
from blockforge.session.protocols import LoadedDocument

log = get_logger("storage")

_VALID_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class YamlDocumentStore:
    """DocumentStore persisting each document as one YAML file."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    @classmethod
    def from_config(cls, config: Config, project_root: str | Path = ".") -> YamlDocumentStore:
        return cls(Path(project_root) / config.storage.root)

    def path_for(self, document_id: str) -> Path:
        """Path of a document file.

        Raises:
            ValueError: If the id could escape the store directory.
        """
        if not _VALID_ID.match(document_id):
            raise ValueError(f"Invalid document id: {document_id!r}")
        return self.root / f"{document_id}.yaml"

    def exists(self, document_id: str) -> bool:
        return self.path_for(document_id).exists()

    def list_documents(self) -> list[str]:
        """Ids of stored documents, sorted."""
        if not self.root.exists():
            return []
        return sorted(
            path.stem for path in self.root.glob("*.yaml") if not path.name.endswith(".yaml.tmp")
        )

    async def load_document(self, document_id: str) -> LoadedDocument:
        """Read a document.

        Raises:
            LoadError: If the file is missing or not valid YAML.
            DocumentError: If the stored nodes are malformed.
        """
        data = await asyncio.to_thread(self._read, document_id)
        content = data.get("content") or {}
        nodes = document_from_dicts(content.get("nodes") or [])
        metadata = {k: v for k, v in data.items() if k not in ("id", "content")}
        log.debug("Loaded document %s (%d root nodes)", document_id, len(nodes))
        return LoadedDocument(document_id=document_id, nodes=nodes, metadata=metadata)

    async def save_content(self, document_id: str, nodes: Sequence[Node]) -> None:
        """Replace the stored content of a document, creating it if needed."""
        await asyncio.to_thread(self._write, document_id, document_to_dicts(nodes))

    def _read(self, document_id: str) -> dict[str, Any]:
        path = self.path_for(document_id)
        if not path.exists():
            raise LoadError(document_id, f"no such document at {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LoadError(document_id, f"invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise LoadError(document_id, "document file is not a mapping")
        return data

    def _write(self, document_id: str, nodes: list[dict[str, Any]]) -> Path:
        path = self.path_for(document_id)
        temp_path = path.with_name(f"{path.name}.tmp")
        self.root.mkdir(parents=True, exist_ok=True)

        now = datetime.now().isoformat()
        data: dict[str, Any] = {"id": document_id, "created_at": now}
        if path.exists():
            with open(path, encoding="utf-8") as f:
                existing = yaml.safe_load(f)
            if isinstance(existing, dict):
                data.update(existing)
        data["updated_at"] = now
        data["content"] = {"nodes": nodes}

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

        log.debug("Saved document %s to %s", document_id, path)
        return path
