"""Value objects describing where a brick is obtained from."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

ANY_VERSION = "any"
LOCATION_KEYS = ("version", "path", "git")

_CLAUSE_PATTERN = re.compile(r"(<=|>=|!=|==|<|>)?\s*([0-9][0-9A-Za-z.+\-]*)")


def parse_constraint(text: str) -> SpecifierSet:
    """Translate a semver-style constraint into a :class:`SpecifierSet`.

    Accepted forms: ``any``, ``^1.2.3``, ``~1.2.3``, an exact version and
    comparison clauses separated by spaces or commas (``>=1.0.0 <2.0.0``).
    """

    value = text.strip()
    if not value or value == ANY_VERSION:
        return SpecifierSet()
    try:
        if value[0] in "^~":
            base = Version(value[1:].strip())
            if value[0] == "^":
                upper = _caret_upper_bound(base)
            else:
                upper = f"{base.major}.{base.minor + 1}.0"
            # Range operators reject build metadata, so bounds use the public version.
            return SpecifierSet(f">={base.public},<{upper}")
        clauses = _CLAUSE_PATTERN.findall(value)
        if not clauses or _CLAUSE_PATTERN.sub("", value).strip(" ,"):
            raise ValueError(f"invalid version constraint '{text}'")
        return SpecifierSet(",".join(_clause(op or "==", Version(raw)) for op, raw in clauses))
    except (InvalidVersion, InvalidSpecifier) as exc:
        raise ValueError(f"invalid version constraint '{text}': {exc}") from exc


def _clause(op: str, version: Version) -> str:
    if op in ("==", "!="):
        return f"{op}{version}"
    return f"{op}{version.public}"


def _caret_upper_bound(base: Version) -> str:
    if base.major > 0:
        return f"{base.major + 1}.0.0"
    if base.minor > 0:
        return f"0.{base.minor + 1}.0"
    return f"0.0.{base.micro + 1}"


@dataclass(frozen=True)
class VersionLocation:
    """Registry lookup by name, constrained to a version range."""

    constraint: str = ANY_VERSION

    def __post_init__(self) -> None:
        if not self.constraint.strip():
            raise ValueError("version constraint must be a non-empty string")
        parse_constraint(self.constraint)

    def specifier(self) -> SpecifierSet:
        return parse_constraint(self.constraint)

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.constraint}


@dataclass(frozen=True)
class PathLocation:
    """Local directory, absolute or relative to the referencing manifest."""

    path: str

    def __post_init__(self) -> None:
        if not self.path.strip():
            raise ValueError("brick path must be a non-empty string")

    def absolute(self, base: Path) -> "PathLocation":
        candidate = Path(self.path).expanduser()
        if not candidate.is_absolute():
            candidate = base / candidate
        return PathLocation(str(candidate.resolve()))

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path}


@dataclass(frozen=True)
class GitLocation:
    """Remote git repository, optionally pinned to a ref and a subdirectory."""

    url: str
    ref: Optional[str] = None
    path: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise ValueError("git url must be a non-empty string")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"url": self.url}
        if self.ref:
            payload["ref"] = self.ref
        if self.path:
            payload["path"] = self.path
        return {"git": payload}


BrickLocation = Union[VersionLocation, PathLocation, GitLocation]


def location_from_dict(data: Any) -> BrickLocation:
    if not isinstance(data, dict):
        raise ValueError("brick location must be a mapping")
    present = [key for key in LOCATION_KEYS if data.get(key) is not None]
    if len(present) != 1:
        found = ", ".join(present) or "none"
        raise ValueError(f"brick location must define exactly one of version, path, git (found: {found})")
    kind = present[0]
    value = data[kind]
    if kind == "version":
        return VersionLocation(str(value))
    if kind == "path":
        return PathLocation(str(value))
    if isinstance(value, str):
        return GitLocation(url=value)
    if not isinstance(value, dict) or not value.get("url"):
        raise ValueError("git location requires a 'url'")
    ref = value.get("ref")
    subpath = value.get("path")
    return GitLocation(
        url=str(value["url"]),
        ref=str(ref) if ref is not None else None,
        path=str(subpath) if subpath is not None else None,
    )


def describe_location(location: BrickLocation) -> str:
    if isinstance(location, VersionLocation):
        return f"version {location.constraint}"
    if isinstance(location, PathLocation):
        return f"path {location.path}"
    suffix = f"@{location.ref}" if location.ref else ""
    subpath = f" ({location.path})" if location.path else ""
    return f"git {location.url}{suffix}{subpath}"


@dataclass(frozen=True)
class Brick:
    """A requested brick: a name plus where to get it from."""

    name: Optional[str]
    location: BrickLocation

    def require_name(self) -> str:
        if not self.name:
            raise ValueError("brick name is required")
        return self.name


__all__ = [
    "ANY_VERSION",
    "Brick",
    "BrickLocation",
    "GitLocation",
    "PathLocation",
    "VersionLocation",
    "describe_location",
    "location_from_dict",
    "parse_constraint",
]
