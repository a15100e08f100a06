"""package.json synthesis for the repackaged module."""

import json
from pathlib import Path

from . import log
from .models import ManifestDescriptor, VersionTriple

ENTRY_FILE = "index.mjs"
MANIFEST_FILE = "package.json"


def base_manifest(package_name: str, version: VersionTriple) -> ManifestDescriptor:
    """Fields every generated manifest carries."""
    return {
        "name": package_name,
        "version": str(version),
        "main": ENTRY_FILE,
        "type": "module",
        "license": "MIT",
    }


def read_upstream_dependencies(path: Path) -> dict | None:
    """Read the ``dependencies`` mapping of an upstream package.json.

    Args:
        path: Path to the upstream package.json

    Returns:
        The dependencies mapping, or None when the file is absent, malformed
        or has no dependencies mapping
    """
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warn(f"Could not read upstream manifest {path}: {e}")
        return None

    dependencies = data.get("dependencies") if isinstance(data, dict) else None
    if not isinstance(dependencies, dict):
        log.warn(f"Upstream manifest {path} has no dependencies")
        return None
    return dependencies


def build_manifest(
    package_name: str,
    version: VersionTriple,
    upstream_manifest: Path | None = None,
) -> ManifestDescriptor:
    """Base fields plus upstream dependencies.

    Only ``dependencies`` is taken from the upstream manifest, so its name,
    version and other fields never replace the base fields.
    """
    manifest = base_manifest(package_name, version)
    if upstream_manifest is not None:
        dependencies = read_upstream_dependencies(upstream_manifest)
        if dependencies is not None:
            manifest["dependencies"] = dependencies
    return manifest


def write_manifest(manifest: ManifestDescriptor, out_dir: Path) -> Path:
    path = out_dir / MANIFEST_FILE
    path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return path
