"""Filesystem-backed brick cache with a JSON index."""

from __future__ import annotations

import json
import shutil
import subprocess
from hashlib import sha256
from pathlib import Path
from typing import Dict, Tuple
from uuid import uuid4

from brickctl.adapters.fs_registry import FSBrickRegistry
from brickctl.domain.location import Brick, GitLocation, PathLocation, VersionLocation
from brickctl.ports.brick_cache import BrickCache, BrickFetchError

INDEX_FILENAME = "bricks.json"


def _digest(*parts: str | None) -> str:
    return sha256("\0".join(part or "" for part in parts).encode("utf-8")).hexdigest()[:16]


class FSBrickCache(BrickCache):
    """Index of installed bricks for one scope.

    Path bricks are indexed in place; git and registry bricks are copied into
    the shared store under ``store_dir``.
    """

    def __init__(self, index_file: Path, store_dir: Path, registry: FSBrickRegistry) -> None:
        self._index_file = index_file
        self._store_dir = store_dir
        self._registry = registry
        self._index: Dict[str, str] | None = None

    @property
    def index_file(self) -> Path:
        return self._index_file

    def entries(self) -> Dict[str, Path]:
        return {key: Path(value) for key, value in sorted(self._load_index().items())}

    def install(self, brick: Brick) -> Path:
        name = brick.require_name()
        location = brick.location
        if isinstance(location, PathLocation):
            key, directory = self._install_path(name, location)
        elif isinstance(location, GitLocation):
            key, directory = self._install_git(name, location)
        else:
            key, directory = self._install_hosted(name, location)
        self._register(key, directory)
        return directory

    def _cached(self, key: str) -> Path | None:
        value = self._load_index().get(key)
        if value and Path(value).is_dir():
            return Path(value)
        return None

    def _install_path(self, name: str, location: PathLocation) -> Tuple[str, Path]:
        source = Path(location.path).expanduser().resolve()
        key = f"{name}_{_digest(str(source))}"
        cached = self._cached(key)
        if cached is not None:
            return key, cached
        if not source.exists():
            raise BrickFetchError(f"Brick path {source} does not exist")
        if not source.is_dir():
            raise BrickFetchError(f"Brick path {source} must be a directory")
        return key, source

    def _install_git(self, name: str, location: GitLocation) -> Tuple[str, Path]:
        key = f"{name}_{_digest(location.url, location.ref, location.path)}"
        cached = self._cached(key)
        if cached is not None:
            return key, cached
        checkout = self._store_dir / "git" / _digest(location.url, location.ref)
        if not checkout.exists():
            staging = self._staging_dir(checkout)
            try:
                self._clone_git_repository(location, staging)
                staging.rename(checkout)
            except Exception:
                shutil.rmtree(staging, ignore_errors=True)
                raise
        directory = checkout / location.path if location.path else checkout
        if not directory.is_dir():
            raise BrickFetchError(f"Path '{location.path}' not found in {location.url}")
        return key, directory

    def _install_hosted(self, name: str, location: VersionLocation) -> Tuple[str, Path]:
        version, source = self._registry.resolve(name, location)
        key = f"{name}_{version}"
        cached = self._cached(key)
        if cached is not None:
            return key, cached
        target = self._store_dir / "hosted" / name / version
        if not target.exists():
            staging = self._staging_dir(target)
            try:
                shutil.copytree(source, staging, dirs_exist_ok=True)
                staging.rename(target)
            except OSError as exc:
                shutil.rmtree(staging, ignore_errors=True)
                raise BrickFetchError(f"Failed to copy brick '{name}' {version}: {exc}") from exc
        return key, target

    def _staging_dir(self, target: Path) -> Path:
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = target.parent / f".{target.name}.staging-{uuid4().hex}"
        staging.mkdir(parents=True, exist_ok=False)
        return staging

    def _clone_git_repository(self, location: GitLocation, staging: Path) -> None:
        commands = [["git", "clone", "--depth", "1", location.url, str(staging)]]
        if location.ref:
            commands = [
                ["git", "clone", location.url, str(staging)],
                ["git", "-C", str(staging), "checkout", location.ref],
            ]
        for command in commands:
            try:
                subprocess.run(command, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
            except FileNotFoundError as exc:
                raise BrickFetchError("git executable not found; install git to add git bricks") from exc
            except subprocess.CalledProcessError as exc:
                raise BrickFetchError(
                    f"Failed to clone brick from {location.url}: "
                    f"{exc.stderr.decode().strip() or exc.stdout.decode().strip()}"
                ) from exc
        git_dir = staging / ".git"
        if git_dir.exists():
            shutil.rmtree(git_dir, ignore_errors=True)

    def _load_index(self) -> Dict[str, str]:
        if self._index is not None:
            return self._index
        if not self._index_file.exists():
            self._index = {}
            return self._index
        try:
            data = json.loads(self._index_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise BrickFetchError(f"Cache index {self._index_file} is corrupted: {exc}") from exc
        if not isinstance(data, dict):
            raise BrickFetchError(f"Cache index {self._index_file} must be a JSON object")
        self._index = {str(key): str(value) for key, value in data.items()}
        return self._index

    def _register(self, key: str, directory: Path) -> None:
        index = self._load_index()
        if index.get(key) == str(directory):
            return
        index[key] = str(directory)
        self._index_file.parent.mkdir(parents=True, exist_ok=True)
        self._index_file.write_text(json.dumps(index, ensure_ascii=False, indent=2, sort_keys=True) + "\n", encoding="utf-8")
