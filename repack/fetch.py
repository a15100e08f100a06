"""Release tarball download and extraction."""

import tarfile
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import httpx

from . import log
from .errors import PipelineError


def _strip_first_component(name: str) -> str:
    parts = PurePosixPath(name).parts[1:]
    return str(PurePosixPath(*parts)) if parts else ""


class ArchiveFetcher:
    """Downloads release tarballs and unpacks them."""

    def __init__(self, timeout: float = 30.0, transport: httpx.BaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    def download(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination`` unless it already exists.

        The body is streamed to a ``.part`` file that is renamed only once
        the transfer completes.
        """
        if destination.exists():
            log.warn(f"Tarball {destination.name} already exists, skipping download")
            return destination

        partial = destination.with_name(destination.name + ".part")
        try:
            with httpx.Client(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                with client.stream("GET", url) as response:
                    response.raise_for_status()
                    with partial.open("wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            partial.unlink(missing_ok=True)
            raise PipelineError(f"Failed to download tarball from {url}: {e}") from e

        partial.replace(destination)
        return destination

    @staticmethod
    def _stripped_members(archive: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
        for member in archive.getmembers():
            name = _strip_first_component(member.name)
            if not name:
                continue
            member.name = name
            if member.islnk():
                member.linkname = _strip_first_component(member.linkname)
            yield member

    def extract(self, archive_path: Path, destination: Path) -> None:
        """Unpack ``archive_path`` into ``destination``, dropping the top directory."""
        if not archive_path.is_file():
            raise PipelineError(f"Tarball {archive_path.name} not found")

        destination.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive_path, "r:*") as archive:
                archive.extractall(
                    destination,
                    members=self._stripped_members(archive),
                    filter="data",
                )
        except (tarfile.TarError, OSError) as e:
            raise PipelineError(f"Failed to extract tarball: {e}") from e
