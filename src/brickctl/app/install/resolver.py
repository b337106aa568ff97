"""Canonical, persistable locations for installed bricks."""

from __future__ import annotations

import os
from pathlib import Path

from brickctl.domain.location import BrickLocation, PathLocation, VersionLocation

from .installer import InstalledBrick


def canonical_location(installed: InstalledBrick, manifest_dir: Path) -> BrickLocation:
    """Return the location to write into the manifest living in ``manifest_dir``.

    Version requests are pinned to a caret range of the installed version and
    path requests become relative to the manifest directory. Git locations are
    returned unchanged.
    """

    location = installed.location
    if isinstance(location, VersionLocation):
        return VersionLocation(f"^{installed.descriptor.version}")
    if isinstance(location, PathLocation):
        target = Path(location.path).expanduser().resolve()
        relative = os.path.relpath(target, manifest_dir.resolve())
        return PathLocation(Path(relative).as_posix())
    return location
