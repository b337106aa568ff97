"""Workspace context: locate bricks.yaml manifests and their caches."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from brickctl.adapters.fs_brick_cache import INDEX_FILENAME, FSBrickCache
from brickctl.adapters.fs_registry import FSBrickRegistry
from brickctl.domain.brick import BrickDescriptor, load_brick_descriptor
from brickctl.domain.manifest import (
    MANIFEST_FILE,
    BricksManifest,
    ManifestNotFoundError,
    find_nearest_manifest,
    load_manifest,
)
from brickctl.settings import RuntimeSettings

PROJECT_STATE_DIR = ".brickctl"


class Scope(str, Enum):
    PROJECT = "project"
    USER = "user"


class WorkspaceContext:
    """Manifests and caches for a single command invocation.

    Everything is loaded lazily and at most once; the in-memory copies are not
    refreshed after a write.
    """

    def __init__(self, settings: RuntimeSettings, cwd: Path | None = None) -> None:
        self._settings = settings
        self._cwd = (cwd or Path(os.getcwd())).resolve()
        self._entry_point: Optional[Path] = None
        self._manifests: Dict[Scope, BricksManifest] = {}
        self._caches: Dict[Scope, FSBrickCache] = {}
        self._registry = FSBrickRegistry(settings.registry_dir)

    @property
    def cwd(self) -> Path:
        return self._cwd

    @property
    def settings(self) -> RuntimeSettings:
        return self._settings

    def entry_point(self) -> Path:
        """Return the directory containing the nearest project bricks.yaml."""

        if self._entry_point is not None:
            return self._entry_point
        nearest = find_nearest_manifest(self._cwd)
        if nearest is None or nearest.parent == self._settings.global_dir.resolve():
            raise ManifestNotFoundError()
        self._entry_point = nearest.parent
        return self._entry_point

    def has_project(self) -> bool:
        try:
            self.entry_point()
        except ManifestNotFoundError:
            return False
        return True

    def manifest_file(self, scope: Scope) -> Path:
        if scope is Scope.USER:
            return self._settings.global_dir / MANIFEST_FILE
        return self.entry_point() / MANIFEST_FILE

    def project_manifest(self) -> BricksManifest:
        return self.manifest(Scope.PROJECT)

    def user_manifest(self) -> BricksManifest:
        return self.manifest(Scope.USER)

    def manifest(self, scope: Scope) -> BricksManifest:
        if scope not in self._manifests:
            self._manifests[scope] = load_manifest(
                self.manifest_file(scope),
                missing_ok=scope is Scope.USER,
            )
        return self._manifests[scope]

    def cache(self, scope: Scope) -> FSBrickCache:
        if scope not in self._caches:
            if scope is Scope.USER:
                index_file = self._settings.global_dir / INDEX_FILENAME
            else:
                index_file = self.entry_point() / PROJECT_STATE_DIR / INDEX_FILENAME
            self._caches[scope] = FSBrickCache(index_file, self._settings.cache_dir, self._registry)
        return self._caches[scope]

    def registered_bricks(self, scope: Scope) -> List[BrickDescriptor]:
        """Load the descriptor of every brick in the scope's cache index.

        Any missing or malformed descriptor aborts the whole aggregation.
        """

        bricks: List[BrickDescriptor] = []
        seen: set[Path] = set()
        for directory in self.cache(scope).entries().values():
            descriptor = load_brick_descriptor(directory)
            if descriptor.source_path in seen:
                continue
            seen.add(descriptor.source_path)
            bricks.append(descriptor)
        return sorted(bricks, key=lambda item: (item.name, item.version))

    def all_registered_bricks(self) -> List[BrickDescriptor]:
        bricks: List[BrickDescriptor] = []
        if self.has_project():
            bricks.extend(self.registered_bricks(Scope.PROJECT))
        bricks.extend(self.registered_bricks(Scope.USER))
        return bricks
