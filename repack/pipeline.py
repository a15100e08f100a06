"""
pipeline.py

Responsibility: the ordered release stages, each a method on Pipeline.

Stages either complete or raise PipelineError; nothing is retried or rolled
back. Collaborators (fetcher, npm, compiler, registry) are injected so tests
can swap them for fakes.
"""

import re
import shutil
from pathlib import Path

from . import log
from .config import BuildConfig
from .errors import PipelineError
from .fetch import ArchiveFetcher
from .manifest import MANIFEST_FILE
from .models import PackageResult, VersionTriple
from .package import Packager
from .registry import NpmRegistry
from .resolve_version import VersionResolver
from .tools import NpmTool, TypeScriptCompiler, is_installed

BUILD_SCRIPT = "build.js"
ESM_PATTERN = b'outdir: "./dist",'
ESM_REPLACEMENT = b'outdir: "./dist", format: "esm",'
STYLE_OVERRIDES = Path("lib") / "patternfly" / "patternfly-5-overrides.scss"
README = "README.md"


def parse_major(value: str) -> int:
    try:
        major = int(value)
    except (TypeError, ValueError):
        raise PipelineError(f"Invalid major version: {value!r}") from None
    if major < 0:
        raise PipelineError(f"Invalid major version: {value!r}")
    return major


def parse_version(value: str | None) -> VersionTriple | None:
    """Parse a ``major.minor.patch`` argument; None passes through."""
    if not value:
        return None
    m = re.fullmatch(r"([0-9]+)\.([0-9]+)\.([0-9]+)", value)
    if not m:
        raise PipelineError(f"Invalid version: {value!r} (expected major.minor.patch)")
    return VersionTriple(*(int(p) for p in m.groups()))


class Pipeline:
    """Runs the release stages against a BuildConfig."""

    def __init__(
        self,
        config: BuildConfig,
        *,
        fetcher: ArchiveFetcher | None = None,
        npm: NpmTool | None = None,
        compiler: TypeScriptCompiler | None = None,
        registry: NpmRegistry | None = None,
    ):
        self.config = config
        self.fetcher = fetcher or ArchiveFetcher(timeout=config.timeout)
        self.npm = npm or NpmTool()
        self.compiler = compiler or TypeScriptCompiler()
        self.registry = registry or NpmRegistry(config.registry_url, timeout=config.timeout)

    def _require_build_dir(self) -> Path:
        build_dir = self.config.build_path
        if not build_dir.is_dir():
            raise PipelineError(f"Build directory {build_dir} not found")
        return build_dir

    def download(self, version: str | None = None) -> Path:
        version = version or self.config.version
        log.log(f"Downloading cockpit tarball for version {version}")
        return self.fetcher.download(
            self.config.tarball_url(version),
            self.config.tarball_path(version),
        )

    def extract(self, version: str | None = None) -> None:
        version = version or self.config.version
        log.log(f"Extracting tarball for version {version}")
        self.fetcher.extract(self.config.tarball_path(version), self.config.build_path)

    def configure_build(self) -> None:
        log.log(f"Patching {BUILD_SCRIPT}")
        build_file = self.config.build_path / BUILD_SCRIPT
        if not build_file.is_file():
            raise PipelineError(f"Build file {build_file} not found")

        # patched as bytes so line endings and encoding are left untouched
        content = build_file.read_bytes()
        if ESM_REPLACEMENT in content:
            log.warn(f"{build_file} already emits ES modules, skipping")
            return
        if ESM_PATTERN not in content:
            raise PipelineError(f"Failed to patch {build_file}: {ESM_PATTERN.decode()!r} not found")
        build_file.write_bytes(content.replace(ESM_PATTERN, ESM_REPLACEMENT))

    def install_deps(self) -> None:
        log.log("Installing npm dependencies")
        build_dir = self._require_build_dir()
        if (build_dir / "node_modules").is_dir():
            log.warn("npm dependencies already installed, skipping")
            return
        try:
            self.npm.ci(build_dir)
        except PipelineError as e:
            raise PipelineError(f"Failed to install npm dependencies: {e}") from e

    def install_ts(self) -> None:
        log.log("Installing TypeScript globally")
        if is_installed("tsc"):
            log.warn("TypeScript already installed, skipping")
            return
        try:
            self.npm.install_global("typescript")
        except PipelineError as e:
            raise PipelineError(f"Failed to install TypeScript: {e}") from e

    def build(self) -> None:
        log.log("Building cockpit")
        build_dir = self._require_build_dir()
        try:
            self.npm.run_node(BUILD_SCRIPT, build_dir)
        except PipelineError as e:
            raise PipelineError(f"Failed to build cockpit: {e}") from e

    def version(self, major: str | None = None, package_name: str | None = None) -> VersionTriple:
        resolver = VersionResolver(self.registry)
        return resolver.resolve(
            parse_major(major or self.config.version),
            package_name or self.config.package_name,
        )

    def package(self, next_version: VersionTriple | None) -> PackageResult:
        packager = Packager(self.config.package_name, self.compiler)
        result = packager.package(self.config.build_path, next_version, self.config.output_path)
        if result.failed:
            log.warn(f"{len(result.failed)} source file(s) failed to compile")
        return result

    def patch(self) -> None:
        log.log("Patching")
        overrides = self.config.output_path / STYLE_OVERRIDES
        if overrides.is_file():
            log.log(f"Emptying {overrides.name} file")
            try:
                overrides.write_text("")
            except OSError as e:
                log.warn(f"Failed to empty {overrides.name}: {e}")

    def copy(self) -> None:
        log.log("Copying additional files")
        readme = self.config.workdir / README
        if not readme.is_file():
            log.warn(f"{README} not found")
            return
        self.config.output_path.mkdir(parents=True, exist_ok=True)
        shutil.copy2(readme, self.config.output_path / README)

    def publish(self, *, dry_run: bool = False) -> None:
        log.log("Publishing package to npm")
        out_dir = self.config.output_path
        if not out_dir.is_dir():
            raise PipelineError(f"Output directory {out_dir} not found")
        if not (out_dir / MANIFEST_FILE).is_file():
            raise PipelineError(f"{MANIFEST_FILE} not found in {out_dir}")
        self.registry.publish(out_dir, dry_run=dry_run)

    def cleanup(self) -> None:
        log.log("Cleaning up build artifacts")
        for tarball in self.config.workdir.glob("*.tar.xz"):
            tarball.unlink()
        shutil.rmtree(self.config.build_path, ignore_errors=True)
        shutil.rmtree(self.config.output_path, ignore_errors=True)

    def full(self, version: str | None = None, publish: bool = False) -> PackageResult:
        version = version or self.config.version
        log.log(f"Starting full build for version {version}")

        self.download(version)
        self.extract(version)
        self.configure_build()
        self.install_deps()
        self.install_ts()
        self.build()

        next_version = self.version(version)
        log.log(f"Next version: {next_version}")

        result = self.package(next_version)
        self.patch()
        self.copy()

        if publish:
            self.publish()

        log.log(f"Build completed successfully for version {version}")
        return result
