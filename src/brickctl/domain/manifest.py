"""Domain model for bricks.yaml registry manifests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .location import BrickLocation, location_from_dict

MANIFEST_FILE = "bricks.yaml"


class ManifestNotFoundError(RuntimeError):
    """Raised when no bricks.yaml can be found for the current project."""

    def __init__(self) -> None:
        super().__init__(f"Cannot find {MANIFEST_FILE}.\nDid you forget to run brick init?")


class ManifestParseError(RuntimeError):
    """Raised when bricks.yaml is malformed."""


@dataclass(frozen=True)
class BricksManifest:
    """Mapping of registered brick names to their locations."""

    entries: Dict[str, BrickLocation] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return name in self.entries

    def to_dict(self) -> Dict[str, Any]:
        return {"bricks": {name: location.to_dict() for name, location in self.entries.items()}}

    @classmethod
    def from_dict(cls, data: Any) -> "BricksManifest":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("manifest root must be a mapping")
        # A bare name -> location mapping is accepted and rewritten under "bricks".
        raw_bricks = (data["bricks"] or {}) if "bricks" in data else data
        if not isinstance(raw_bricks, dict):
            raise ValueError("'bricks' must be a mapping of brick name to location")
        entries: Dict[str, BrickLocation] = {}
        for name, raw_location in raw_bricks.items():
            try:
                entries[str(name)] = location_from_dict(raw_location)
            except ValueError as exc:
                raise ValueError(f"brick '{name}': {exc}") from exc
        return cls(entries=entries)


def find_nearest_manifest(start: Path) -> Optional[Path]:
    """Walk upward from ``start`` and return the first bricks.yaml found."""

    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / MANIFEST_FILE
        if candidate.is_file():
            return candidate
    return None


def load_manifest(path: Path, *, missing_ok: bool = False) -> BricksManifest:
    if not path.exists():
        if missing_ok:
            return BricksManifest()
        raise ManifestNotFoundError()
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        return BricksManifest.from_dict(payload)
    except (yaml.YAMLError, ValueError) as exc:
        raise ManifestParseError(f"Malformed {MANIFEST_FILE} at {path}\n{exc}") from exc


def write_manifest(path: Path, manifest: BricksManifest) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(manifest.to_dict(), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )


__all__ = [
    "MANIFEST_FILE",
    "BricksManifest",
    "ManifestNotFoundError",
    "ManifestParseError",
    "find_nearest_manifest",
    "load_manifest",
    "write_manifest",
]
