"""Filesystem-backed brick registry (``<root>/<name>/<version>/brick.yaml``)."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from packaging.version import InvalidVersion, Version

from brickctl.domain.brick import BRICK_DESCRIPTOR
from brickctl.domain.location import VersionLocation
from brickctl.ports.brick_cache import BrickResolutionError


class FSBrickRegistry:
    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def versions(self, name: str) -> List[Version]:
        brick_dir = self._root / name
        if not brick_dir.is_dir():
            return []
        versions: List[Version] = []
        for candidate in brick_dir.iterdir():
            if not (candidate / BRICK_DESCRIPTOR).is_file():
                continue
            try:
                versions.append(Version(candidate.name))
            except InvalidVersion:
                continue
        return sorted(versions)

    def resolve(self, name: str, location: VersionLocation) -> Tuple[str, Path]:
        available = self.versions(name)
        if not available:
            raise BrickResolutionError(f"Brick '{name}' not found in registry {self._root}")
        matching = list(location.specifier().filter(available))
        if not matching:
            raise BrickResolutionError(
                f"No version of '{name}' satisfies {location.constraint} "
                f"(available: {', '.join(str(v) for v in available)})"
            )
        best = max(matching)
        directory = self._directory_for(name, best)
        return str(best), directory

    def _directory_for(self, name: str, version: Version) -> Path:
        brick_dir = self._root / name
        for candidate in brick_dir.iterdir():
            try:
                if Version(candidate.name) == version:
                    return candidate
            except InvalidVersion:
                continue
        raise BrickResolutionError(f"Brick '{name}' {version} disappeared from {brick_dir}")
