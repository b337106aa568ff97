"""Runtime settings for the brick manager."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from brickctl import __version__

HOME_ENV = "BRICKCTL_HOME"
REGISTRY_ENV = "BRICKCTL_REGISTRY"


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    cache_dir: Path
    registry_dir: Path
    log_dir: Path
    cli_version: str = __version__

    @property
    def global_dir(self) -> Path:
        """User-scope root holding the global bricks.yaml and cache index."""

        return self.home_dir / "global"


def _default_home_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".brickctl"


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    registry = os.environ.get(REGISTRY_ENV)
    return RuntimeSettings(
        home_dir=base,
        cache_dir=base / "cache",
        registry_dir=Path(registry).expanduser().resolve() if registry else base / "registry",
        log_dir=base / "logs",
    )


SETTINGS = load_settings()
