"""Next publishable version resolution."""

import re
from collections.abc import Iterable
from typing import Protocol

from .models import VersionTriple


class VersionSource(Protocol):
    """Anything that can list the published versions of a package."""

    def list_versions(self, package_name: str) -> list[str]: ...


def filter_versions(major: int, versions: Iterable[str]) -> list[VersionTriple]:
    """Keep only versions of the exact form ``major.<int>.<int>``.

    Anything else (other majors, extra components, prerelease tags,
    non-numeric parts) is dropped silently.
    """
    pattern = re.compile(rf"{major}\.([0-9]+)\.([0-9]+)")
    matched = []
    for version in versions:
        if not isinstance(version, str):
            continue
        m = pattern.fullmatch(version)
        if m:
            matched.append(VersionTriple(major, int(m.group(1)), int(m.group(2))))
    return matched


def next_version(major: int, versions: Iterable[str]) -> VersionTriple:
    """Compute the next version for ``major`` given the published versions.

    The patch is bumped within the highest existing minor; a new minor is
    never started here. With no releases for the major, ``major.0.1``.
    """
    existing = filter_versions(major, versions)
    if not existing:
        return VersionTriple(major, 0, 1)

    max_minor = max(v.minor for v in existing)
    max_patch = max(v.patch for v in existing if v.minor == max_minor)
    return VersionTriple(major, max_minor, max_patch + 1)


class VersionResolver:
    """Resolve the next version of a package against a registry."""

    def __init__(self, registry: VersionSource):
        self.registry = registry

    def resolve(self, major: int, package_name: str) -> VersionTriple:
        """Resolve the next version of ``package_name`` for ``major``.

        Args:
            major: Major version line (the upstream release number)
            package_name: Name of the published package

        Returns:
            The lowest unused version safe to publish next
        """
        return next_version(major, self.registry.list_versions(package_name))


def resolve_next_version(major: int, package_name: str, registry: VersionSource) -> VersionTriple:
    return VersionResolver(registry).resolve(major, package_name)
