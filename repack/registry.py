"""npm registry access: published versions and publishing."""

from pathlib import Path
from urllib.parse import quote

import httpx

from . import log
from .errors import PipelineError
from .tools import run


class NpmRegistry:
    """Client for the npm registry."""

    def __init__(
        self,
        registry_url: str = "https://registry.npmjs.org",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        npm: str = "npm",
    ):
        """Initialize registry client.

        Args:
            registry_url: Base URL of the registry
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            npm: npm executable used for publishing
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.npm = npm

    def _package_url(self, package_name: str) -> str:
        # Scoped names keep the "@" but encode the slash: @scope%2Fname
        return f"{self.registry_url}/{quote(package_name, safe='@')}"

    def _fetch_packument(self, package_name: str) -> dict | None:
        """Fetch the package document, or None if never published."""
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.get(
                self._package_url(package_name),
                headers={"Accept": "application/json"},
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

    def list_versions(self, package_name: str) -> list[str]:
        """Return every published version string of a package.

        Never raises: an unpublished package and an unreachable or
        misbehaving registry both yield an empty list. The latter is logged.
        """
        try:
            packument = self._fetch_packument(package_name)
        except (httpx.HTTPError, ValueError) as e:
            log.warn(f"Could not query registry for {package_name}: {e}")
            return []

        if packument is None:
            return []

        versions = packument.get("versions") if isinstance(packument, dict) else None
        if not isinstance(versions, dict):
            log.warn(f"Registry response for {package_name} has no versions")
            return []
        return list(versions.keys())

    def publish(self, package_dir: Path, *, dry_run: bool = False) -> None:
        """Publish ``package_dir`` with ``npm publish --access public``."""
        cmd = [self.npm, "publish", "--access", "public"]
        if dry_run:
            cmd.append("--dry-run")
        cmd += ["--registry", self.registry_url]
        try:
            run(cmd, cwd=package_dir)
        except PipelineError as e:
            raise PipelineError(f"Failed to publish package: {e}") from e
