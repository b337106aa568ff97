"""Application service behind ``brick add``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from brickctl.app.workspace import Scope, WorkspaceContext
from brickctl.domain.location import Brick, BrickLocation

from .installer import DependencyInstaller
from .progress import ProgressReporter
from .resolver import canonical_location
from .writer import ManifestWriter


@dataclass(frozen=True)
class AddResult:
    name: str
    version: str
    location: BrickLocation
    manifest_file: Path
    written: bool
    dependencies: Dict[str, BrickLocation] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "location": self.location.to_dict(),
            "manifest": str(self.manifest_file),
            "written": self.written,
            "dependencies": {name: loc.to_dict() for name, loc in self.dependencies.items()},
        }


class AddBrickService:
    def __init__(self, workspace: WorkspaceContext, *, progress: Optional[ProgressReporter] = None) -> None:
        self._workspace = workspace
        self._progress = progress

    def add(self, brick: Brick, scope: Scope) -> AddResult:
        name = brick.require_name()
        # Resolve and parse the target manifest before touching the cache.
        manifest_file = self._workspace.manifest_file(scope)
        manifest = self._workspace.manifest(scope)

        installer = DependencyInstaller(self._workspace.cache(scope), progress=self._progress)
        result = installer.install(brick, base_dir=self._workspace.cwd)

        manifest_dir = manifest_file.parent
        location = canonical_location(result.root, manifest_dir)
        dependencies = {
            dep_name: canonical_location(installed, manifest_dir)
            for dep_name, installed in result.dependencies.items()
        }
        written = ManifestWriter(manifest_file, manifest).write(name, location, dependencies)
        return AddResult(
            name=name,
            version=result.root.descriptor.version,
            location=location,
            manifest_file=manifest_file,
            written=written,
            dependencies=dependencies,
        )
