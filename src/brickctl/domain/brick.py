"""Domain model for a brick's own descriptor (brick.yaml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from .location import BrickLocation, location_from_dict

BRICK_DESCRIPTOR = "brick.yaml"


class BrickNotFoundError(RuntimeError):
    """Raised when a cached brick directory has no readable descriptor."""

    def __init__(self, directory: Path) -> None:
        super().__init__(f"Could not find brick at {directory}")
        self.directory = directory


class BrickParseError(RuntimeError):
    """Raised when brick.yaml is malformed."""


@dataclass(frozen=True)
class BrickDescriptor:
    name: str
    version: str
    description: str = ""
    dependencies: Dict[str, BrickLocation] = field(default_factory=dict)
    source_path: Path | None = None

    @property
    def directory(self) -> Path | None:
        return self.source_path.parent if self.source_path else None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "version": self.version}
        if self.description:
            payload["description"] = self.description
        if self.dependencies:
            payload["dependencies"] = {name: loc.to_dict() for name, loc in self.dependencies.items()}
        return payload

    @classmethod
    def from_dict(cls, data: Any, *, source_path: Path | None = None) -> "BrickDescriptor":
        if not isinstance(data, dict):
            raise ValueError("brick descriptor must be a mapping")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("brick descriptor requires a non-empty 'name'")
        version = data.get("version")
        if version is None or not str(version).strip():
            raise ValueError("brick descriptor requires a 'version'")
        raw_dependencies = data.get("dependencies") or {}
        if not isinstance(raw_dependencies, dict):
            raise ValueError("'dependencies' must be a mapping of brick name to location")
        dependencies: Dict[str, BrickLocation] = {}
        for dep_name, raw_location in raw_dependencies.items():
            try:
                dependencies[str(dep_name)] = location_from_dict(raw_location)
            except ValueError as exc:
                raise ValueError(f"dependency '{dep_name}': {exc}") from exc
        return cls(
            name=name,
            version=str(version),
            description=str(data.get("description") or ""),
            dependencies=dependencies,
            source_path=source_path,
        )


def load_brick_descriptor(directory: Path) -> BrickDescriptor:
    descriptor_path = directory / BRICK_DESCRIPTOR
    if not descriptor_path.is_file():
        raise BrickNotFoundError(directory)
    try:
        payload = yaml.safe_load(descriptor_path.read_text(encoding="utf-8"))
        return BrickDescriptor.from_dict(payload, source_path=descriptor_path)
    except (yaml.YAMLError, ValueError) as exc:
        raise BrickParseError(f"Malformed {BRICK_DESCRIPTOR} at {descriptor_path}\n{exc}") from exc


__all__ = [
    "BRICK_DESCRIPTOR",
    "BrickDescriptor",
    "BrickNotFoundError",
    "BrickParseError",
    "load_brick_descriptor",
]
