from .installer import DependencyInstaller, InstalledBrick, InstallResult
from .progress import ConsoleProgressReporter, ProgressReporter
from .resolver import canonical_location
from .service import AddBrickService, AddResult
from .writer import ManifestWriter

__all__ = [
    "AddBrickService",
    "AddResult",
    "ConsoleProgressReporter",
    "DependencyInstaller",
    "InstallResult",
    "InstalledBrick",
    "ManifestWriter",
    "ProgressReporter",
    "canonical_location",
]
