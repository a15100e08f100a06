"""Core data models for cockpit-repack."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Package manifest (package.json) contents
ManifestDescriptor = dict[str, Any]


@dataclass(frozen=True, order=True)
class VersionTriple:
    """A major.minor.patch version of the published package."""

    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise ValueError(f"Version components must be non-negative: {self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass
class PackageResult:
    """What the packager produced in the output directory."""

    output_dir: Path
    version: VersionTriple
    manifest: ManifestDescriptor
    compiled: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)  # compile shortfall

    @property
    def complete(self) -> bool:
        return not self.failed
