"""Recursive installation of a brick and its declared dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Set

from brickctl.domain.brick import BrickDescriptor, load_brick_descriptor
from brickctl.domain.location import Brick, BrickLocation, PathLocation, VersionLocation
from brickctl.ports.brick_cache import BrickCache, BrickFetchError

from .progress import ProgressReporter


@dataclass(frozen=True)
class InstalledBrick:
    name: str
    location: BrickLocation
    directory: Path
    descriptor: BrickDescriptor


@dataclass
class InstallResult:
    root: InstalledBrick
    dependencies: Dict[str, InstalledBrick] = field(default_factory=dict)


class DependencyInstaller:
    """Install a brick through a cache, then each dependency depth-first.

    Names already installed in the current tree are skipped, which keeps
    cyclic dependency graphs finite and installs every brick once.
    """

    def __init__(
        self,
        cache: BrickCache,
        *,
        loader: Callable[[Path], BrickDescriptor] = load_brick_descriptor,
        progress: Optional[ProgressReporter] = None,
    ) -> None:
        self._cache = cache
        self._loader = loader
        self._progress = progress or ProgressReporter()

    def install(self, brick: Brick, *, base_dir: Path) -> InstallResult:
        name = brick.require_name()
        visited: Set[str] = set()
        with self._progress.step(f"Adding {name}", done=f"Added {name}"):
            root = self._install_one(name, brick.location, base_dir, visited)
            dependencies: Dict[str, InstalledBrick] = {}
            self._install_dependencies(root, visited, dependencies)
        return InstallResult(root=root, dependencies=dependencies)

    def _install_one(self, name: str, location: BrickLocation, base_dir: Path, visited: Set[str]) -> InstalledBrick:
        if isinstance(location, PathLocation):
            location = location.absolute(base_dir)
        visited.add(name)
        directory = self._cache.install(Brick(name=name, location=location))
        descriptor = self._loader(directory)
        return InstalledBrick(name=name, location=location, directory=directory, descriptor=descriptor)

    def _install_dependencies(
        self,
        parent: InstalledBrick,
        visited: Set[str],
        installed: Dict[str, InstalledBrick],
    ) -> None:
        pending = {name: loc for name, loc in parent.descriptor.dependencies.items() if name not in visited}
        if not pending:
            return
        with self._progress.step(
            f"Adding brick dependencies of {parent.name}",
            done=f"Added brick dependencies of {parent.name}",
        ):
            for name, location in pending.items():
                if name in visited:
                    continue
                if isinstance(parent.location, VersionLocation) and _is_relative_path(location):
                    raise BrickFetchError(
                        f"Brick '{parent.name}' from the registry declares relative path dependency "
                        f"'{name}' ({location.path}); registry bricks may only depend on versions or git"
                    )
                child = self._install_one(name, location, parent.directory, visited)
                installed[name] = child
                self._install_dependencies(child, visited, installed)


def _is_relative_path(location: BrickLocation) -> bool:
    return isinstance(location, PathLocation) and not Path(location.path).expanduser().is_absolute()
