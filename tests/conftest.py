from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "brickctl-home"
os.environ.setdefault("BRICKCTL_HOME", str(SANDBOX_HOME))
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from brickctl.settings import RuntimeSettings  # noqa: E402

BrickFactory = Callable[..., Path]


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    """Isolated home, cache, registry and log directories."""
    base = tmp_path / "runtime"
    home = base / "home"
    cache_dir = home / "cache"
    registry_dir = base / "registry"
    log_dir = home / "logs"
    for directory in (home, cache_dir, registry_dir, log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return RuntimeSettings(
        home_dir=home,
        cache_dir=cache_dir,
        registry_dir=registry_dir,
        log_dir=log_dir,
    )


def _write_brick(
    root: Path,
    name: str,
    version: str = "0.1.0",
    dependencies: Mapping[str, Mapping[str, Any]] | None = None,
    description: str | None = None,
) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    payload: dict[str, Any] = {"name": name, "version": version}
    if description:
        payload["description"] = description
    if dependencies:
        payload["dependencies"] = {key: dict(value) for key, value in dependencies.items()}
    (root / "brick.yaml").write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    (root / "__brick__").mkdir(exist_ok=True)
    return root


@pytest.fixture()
def brick_factory(tmp_path: Path) -> BrickFactory:
    """Create a brick directory under ``tmp_path/bricks/<name>`` (or ``root``)."""

    def factory(name: str, version: str = "0.1.0", *, root: Path | None = None, **kwargs: Any) -> Path:
        return _write_brick(root or tmp_path / "bricks" / name, name, version, **kwargs)

    return factory


@pytest.fixture()
def registry_factory(runtime_settings: RuntimeSettings) -> BrickFactory:
    """Publish a brick version into the filesystem registry."""

    def factory(name: str, version: str = "0.1.0", **kwargs: Any) -> Path:
        return _write_brick(runtime_settings.registry_dir / name / version, name, version, **kwargs)

    return factory


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    """Project directory with an empty bricks.yaml."""
    root = tmp_path / "project"
    root.mkdir(parents=True, exist_ok=True)
    (root / "bricks.yaml").write_text("bricks: {}\n", encoding="utf-8")
    return root
