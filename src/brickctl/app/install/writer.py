"""Merge installed bricks into a bricks.yaml manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping

from brickctl.domain.location import BrickLocation
from brickctl.domain.manifest import BricksManifest, write_manifest


class ManifestWriter:
    def __init__(self, manifest_file: Path, manifest: BricksManifest) -> None:
        self._manifest_file = manifest_file
        self._manifest = manifest

    @property
    def manifest_file(self) -> Path:
        return self._manifest_file

    def merge(
        self,
        name: str,
        location: BrickLocation,
        dependencies: Mapping[str, BrickLocation],
    ) -> BricksManifest:
        entries: Dict[str, BrickLocation] = dict(self._manifest.entries)
        entries.setdefault(name, location)
        for dep_name, dep_location in dependencies.items():
            entries.setdefault(dep_name, dep_location)
        return BricksManifest(entries=entries)

    def write(
        self,
        name: str,
        location: BrickLocation,
        dependencies: Mapping[str, BrickLocation],
    ) -> bool:
        """Persist the merged manifest; returns False when ``name`` is already registered."""

        if self._manifest.has(name):
            return False
        write_manifest(self._manifest_file, self.merge(name, location, dependencies))
        return True
