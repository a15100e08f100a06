"""
package.py

Responsibility: turn the upstream build output into a publishable module.

Steps, in order:
1) Copy build/pkg/lib into out/lib
2) Compile .ts then .tsx files in out/lib to ES modules, deleting sources
3) Write package.json (base fields + upstream dependencies)
4) Append the runtime entry (dist/base1/cockpit.js) to index.mjs with a
   default export
"""

import shutil
from pathlib import Path
from typing import Protocol

from . import log
from .errors import PipelineError
from .manifest import ENTRY_FILE, MANIFEST_FILE, build_manifest, write_manifest
from .models import PackageResult, VersionTriple

LIB_SUBDIR = Path("pkg") / "lib"
RUNTIME_ENTRY = Path("dist") / "base1" / "cockpit.js"
RUNTIME_SYMBOL = "cockpit"

# (extension, markup mode); plain sources before markup sources
SOURCE_KINDS = ((".ts", False), (".tsx", True))


class Compiler(Protocol):
    def compile(self, source: Path, out_dir: Path, *, jsx: bool = False) -> bool: ...


def copy_lib_tree(build_dir: Path, out_dir: Path) -> Path:
    src = build_dir / LIB_SUBDIR
    if not src.is_dir():
        raise PipelineError(f"Library directory {src} not found")
    dst = out_dir / "lib"
    try:
        shutil.copytree(src, dst, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise PipelineError(f"Failed to copy lib files: {e}") from e
    return dst


def sources_of_kind(lib_dir: Path, extension: str) -> list[Path]:
    """Files directly in ``lib_dir`` with ``extension``, sorted by name."""
    return sorted(
        (p for p in lib_dir.iterdir() if p.is_file() and p.suffix == extension),
        key=lambda p: p.name,
    )


def transpile_sources(lib_dir: Path, compiler: Compiler) -> tuple[list[Path], list[Path]]:
    """Compile every TypeScript source in ``lib_dir`` in place.

    Returns:
        (compiled, failed) source paths. Every source is deleted either way.
    """
    compiled: list[Path] = []
    failed: list[Path] = []
    for extension, jsx in SOURCE_KINDS:
        for source in sources_of_kind(lib_dir, extension):
            if compiler.compile(source, lib_dir, jsx=jsx):
                compiled.append(source)
            else:
                kind = "TSX" if jsx else "TypeScript"
                log.warn(f"{kind} compilation failed for {source}")
                failed.append(source)
            source.unlink(missing_ok=True)
    return compiled, failed


def write_entry_module(build_dir: Path, out_dir: Path) -> Path:
    runtime = build_dir / RUNTIME_ENTRY
    if not runtime.is_file():
        raise PipelineError(f"Runtime entry {runtime} not found")
    entry = out_dir / ENTRY_FILE
    try:
        with entry.open("ab") as f:
            f.write(runtime.read_bytes())
            f.write(f"\n\nexport default {RUNTIME_SYMBOL};".encode())
    except OSError as e:
        raise PipelineError(f"Failed to create {ENTRY_FILE}: {e}") from e
    return entry


class Packager:
    """Builds the distributable package directory."""

    def __init__(self, package_name: str, compiler: Compiler):
        self.package_name = package_name
        self.compiler = compiler

    def package(
        self,
        build_dir: Path,
        version: VersionTriple | None,
        out_dir: Path,
    ) -> PackageResult:
        """Package ``build_dir`` as ``version`` into ``out_dir``.

        Raises:
            PipelineError: missing build directory, version, library tree
                or runtime entry
        """
        if not build_dir.is_dir():
            raise PipelineError(f"Build directory {build_dir} not found")
        if version is None:
            raise PipelineError("Next version not provided")

        log.log("Building base package")
        out_dir.mkdir(parents=True, exist_ok=True)
        lib_dir = copy_lib_tree(build_dir, out_dir)

        compiled, failed = transpile_sources(lib_dir, self.compiler)

        manifest = build_manifest(self.package_name, version, build_dir / MANIFEST_FILE)
        write_manifest(manifest, out_dir)

        write_entry_module(build_dir, out_dir)

        return PackageResult(
            output_dir=out_dir,
            version=version,
            manifest=manifest,
            compiled=compiled,
            failed=failed,
        )
