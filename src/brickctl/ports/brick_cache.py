"""Port definitions for brick caches."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

from brickctl.domain.location import Brick


class BrickFetchError(RuntimeError):
    """Raised when a brick cannot be copied or cloned into the cache."""


class BrickResolutionError(RuntimeError):
    """Raised when no registry version satisfies a requested constraint."""


class BrickCache(ABC):
    @abstractmethod
    def install(self, brick: Brick) -> Path:
        """Materialize ``brick`` and return the directory holding its files.

        Must return immediately for a location that is already cached.
        Relative path locations are expected to be made absolute by the caller.
        """

    @abstractmethod
    def entries(self) -> Dict[str, Path]:
        """Return the cache index: brick identity to extracted directory."""
