"""Build configuration, resolved once from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_VERSION = "323"
DEFAULT_PACKAGE_NAME = "cockpit-base1"
DEFAULT_BUILD_DIR = "build"
DEFAULT_OUTPUT_DIR = "cockpit"
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_DOWNLOAD_URL = "https://github.com/cockpit-project/cockpit/releases/download/{version}/{tarball}"


@dataclass(frozen=True)
class BuildConfig:
    """Settings shared by every pipeline stage.

    Paths for the build and output directories are relative to ``workdir``
    unless given as absolute paths.
    """

    version: str = DEFAULT_VERSION
    package_name: str = DEFAULT_PACKAGE_NAME
    build_dir: Path = Path(DEFAULT_BUILD_DIR)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    workdir: Path = field(default_factory=Path.cwd)
    registry_url: str = DEFAULT_REGISTRY_URL
    download_url: str = DEFAULT_DOWNLOAD_URL
    timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "BuildConfig":
        """Build a config from environment variables.

        Recognised variables: VERSION, PACKAGE_NAME, BUILD_DIR, OUTPUT_DIR
        and NPM_REGISTRY. Empty values fall back to the defaults. Keyword
        overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values = {
            "version": env.get("VERSION") or DEFAULT_VERSION,
            "package_name": env.get("PACKAGE_NAME") or DEFAULT_PACKAGE_NAME,
            "build_dir": Path(env.get("BUILD_DIR") or DEFAULT_BUILD_DIR),
            "output_dir": Path(env.get("OUTPUT_DIR") or DEFAULT_OUTPUT_DIR),
            "registry_url": env.get("NPM_REGISTRY") or DEFAULT_REGISTRY_URL,
        }
        values.update(overrides)
        return cls(**values)

    @property
    def build_path(self) -> Path:
        return self.workdir / self.build_dir

    @property
    def output_path(self) -> Path:
        return self.workdir / self.output_dir

    def tarball_name(self, version: str | None = None) -> str:
        return f"cockpit-{version or self.version}.tar.xz"

    def tarball_path(self, version: str | None = None) -> Path:
        return self.workdir / self.tarball_name(version)

    def tarball_url(self, version: str | None = None) -> str:
        version = version or self.version
        return self.download_url.format(version=version, tarball=self.tarball_name(version))
