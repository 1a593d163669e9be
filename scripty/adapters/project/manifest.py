"""
Manifest item tree — a YAML project manifest standing in for the host's item tree.

The manifest lists the files that belong to the project and their build
actions:

    name: demo
    solution: demo.sln
    items:
      - path: gen/Foo.g.cs
        item_type: Compile

Item paths are stored relative to the manifest's directory when they
live under it, absolute otherwise. Every mutation rewrites the manifest
atomically, so the file always reflects the applied ops.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from scripty.adapters.base import ProjectItem, ProjectItemTree
from scripty.core.config.loader import ConfigError
from scripty.core.models.evaluation import canonical_path
from scripty.core.persistence.atomic import atomic_write_text

logger = logging.getLogger(__name__)


class ManifestEntry(BaseModel):
    path: str
    item_type: str | None = None


class Manifest(BaseModel):
    """On-disk manifest schema. Unknown top-level keys are preserved."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    solution: str = ""
    items: list[ManifestEntry] = Field(default_factory=list)


class ManifestItemTree(ProjectItemTree):
    """Project item tree backed by a YAML manifest file.

    Args:
        path: Manifest file. Created on first mutation if missing.
        delete_files: Also unlink a pruned item's file from disk.
    """

    def __init__(self, path: Path, delete_files: bool = False):
        self._path = Path(canonical_path(path))
        self._root = self._path.parent
        self._delete_files = delete_files
        self._manifest = self._load()
        self._items = [
            ProjectItem(path=self._absolute(entry.path), item_type=entry.item_type)
            for entry in self._manifest.items
        ]

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._manifest.name or self._root.name

    @property
    def solution(self) -> str:
        return self._manifest.solution

    # ── Loading / saving ────────────────────────────────────────

    def _load(self) -> Manifest:
        if not self._path.is_file():
            logger.debug("No manifest at %s — starting empty", self._path)
            return Manifest()

        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read project manifest {self._path}: {e}") from e

        if data is None:
            return Manifest()
        if not isinstance(data, dict):
            raise ConfigError(
                f"Expected a YAML mapping in {self._path}, got {type(data).__name__}"
            )

        try:
            return Manifest.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid project manifest {self._path}: {e}") from e

    def _save(self) -> None:
        self._manifest.items = [
            ManifestEntry(path=self._relative(item.path), item_type=item.item_type)
            for item in self._items
        ]
        data: dict[str, Any] = self._manifest.model_dump(mode="json", exclude_defaults=True)
        data["items"] = [
            entry.model_dump(mode="json", exclude_none=True) for entry in self._manifest.items
        ]
        atomic_write_text(
            self._path,
            yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
            prefix=".scripty_manifest_",
        )

    def _absolute(self, path: str) -> str:
        p = Path(path)
        return canonical_path(p if p.is_absolute() else self._root / p)

    def _relative(self, path: str) -> str:
        try:
            return Path(path).relative_to(self._root).as_posix()
        except ValueError:
            return path

    # ── ProjectItemTree ─────────────────────────────────────────

    def items(self) -> Iterator[ProjectItem]:
        return iter(list(self._items))

    def add_item_from_file(self, path: str) -> ProjectItem:
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Cannot add missing file to project: {path}")
        item = ProjectItem(path=canonical_path(path))
        self._items.append(item)
        self._save()
        logger.debug("Added %s to %s", item.path, self._path.name)
        return item

    def set_item_build_action(self, item: ProjectItem, build_action: str) -> None:
        item.item_type = build_action
        self._save()

    def delete_item(self, path: str) -> bool:
        path = canonical_path(path)
        for index, item in enumerate(self._items):
            if item.path == path:
                del self._items[index]
                self._save()
                if self._delete_files:
                    Path(path).unlink(missing_ok=True)
                logger.debug("Removed %s from %s", path, self._path.name)
                return True
        return False
