"""Zip archive sources: download, extract, and content-address a package.

Every extracted file is hashed with SHA-256 while it is written. The package
checksum is the SHA-256 of the sorted per-file digests concatenated, so it
does not depend on the order of entries inside the archive.
"""

import hashlib
import zipfile
import zlib
from pathlib import Path
from typing import Any

import httpx

from app.exceptions import ContentValidationError, FilesystemError, TransportError
from app.logging.logger import Log
from app.source.base import BaseSource
from app.source.filesystem import FileSystem, Writer


class _DigestTee:
    """Writer feeding each chunk to a digest and a destination file."""

    def __init__(self, digest: Any, target: Writer) -> None:
        self._digest = digest
        self._target = target

    def write(self, data: bytes, /) -> int:
        self._digest.update(data)
        return self._target.write(data)


def combined_checksum(checksums: list[str]) -> str:
    """Hash the lexicographically sorted per-file checksums into one digest."""
    return hashlib.sha256("".join(sorted(checksums)).encode("utf-8")).hexdigest()


def download_file(
    url: str,
    destination: Path,
    client: httpx.Client,
    filesystem: FileSystem,
) -> None:
    """Stream ``url`` into ``destination``.

    Raises:
        TransportError: on a transport failure or non-success response.
        FilesystemError: if the destination cannot be written.
    """
    try:
        with client.stream("GET", url) as response:
            if not response.is_success:
                raise TransportError(f"Download of {url} failed: HTTP {response.status_code}")
            try:
                with filesystem.open_file(destination) as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
            except OSError as exc:
                raise FilesystemError(f"Could not write {destination}: {exc}") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"Download of {url} failed: {exc}") from exc


def unzip(
    source: Path,
    destination: Path,
    filesystem: FileSystem | None = None,
) -> tuple[list[str], list[str]]:
    """Extract ``source`` into ``destination``.

    Returns:
        Extracted file paths and their SHA-256 checksums, positionally aligned.

    Raises:
        ContentValidationError: if the archive is malformed or an entry would
            land outside ``destination``.
        FilesystemError: if any directory or file cannot be written. Files
            extracted before the failure may remain on disk.
    """
    fs = filesystem or FileSystem()
    try:
        archive = zipfile.ZipFile(source)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ContentValidationError(f"Could not open archive {source}: {exc}") from exc

    root = destination.resolve()
    filenames: list[str] = []
    checksums: list[str] = []
    with archive:
        for info in archive.infolist():
            target = destination / info.filename
            if not target.resolve().is_relative_to(root):
                raise ContentValidationError(
                    f"Archive entry '{info.filename}' escapes {destination}"
                )
            try:
                if info.is_dir():
                    fs.make_dirs(target)
                    continue
                fs.make_dirs(target.parent)
                digest = hashlib.sha256()
                with archive.open(info) as src, fs.open_file(target) as dst:
                    fs.copy(_DigestTee(digest, dst), src)
            # zlib.error and EOFError: corrupt or truncated stream. RuntimeError
            # (NotImplementedError included): encrypted or unsupported compression.
            except (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError) as exc:
                raise ContentValidationError(
                    f"Corrupt archive entry '{info.filename}': {exc}"
                ) from exc
            except OSError as exc:
                raise FilesystemError(f"Could not extract '{info.filename}': {exc}") from exc
            filenames.append(str(target))
            checksums.append(digest.hexdigest())
    return filenames, checksums


class ZipSource(BaseSource):
    """A package distributed as a zip archive at a URL."""

    def __init__(
        self,
        url: str,
        *,
        client: httpx.Client | None = None,
        filesystem: FileSystem | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        self._url = url
        self._client = client
        self._fs = filesystem or FileSystem()
        self._timeout_seconds = timeout_seconds
        self._files: list[str] = []
        self._checksums: list[str] = []
        self._checksum = ""

    @property
    def url(self) -> str:
        return self._url

    def prepare_files(self, destination: Path) -> None:
        """Download the archive, extract it into ``destination``, record checksums."""
        archive_path = destination.parent / f"{destination.name}.zip"
        try:
            self._fs.make_dirs(destination)
        except OSError as exc:
            raise FilesystemError(f"Could not create {destination}: {exc}") from exc

        self._download(archive_path)
        try:
            files, checksums = unzip(archive_path, destination, self._fs)
        finally:
            archive_path.unlink(missing_ok=True)
        if not files:
            raise ContentValidationError(f"Archive at {self._url} contains no files")

        self._files = files
        self._checksums = checksums
        self._checksum = combined_checksum(checksums)
        Log.info(
            f"Prepared {len(files)} files",
            url=self._url,
            checksum=self._checksum,
        )

    def get_checksum(self) -> str:
        return self._checksum

    def get_files(self) -> list[str]:
        return list(self._files)

    def get_checksums(self) -> list[str]:
        return list(self._checksums)

    def _download(self, archive_path: Path) -> None:
        if self._client is not None:
            download_file(self._url, archive_path, self._client, self._fs)
            return
        with httpx.Client(timeout=self._timeout_seconds, follow_redirects=True) as client:
            download_file(self._url, archive_path, client, self._fs)
