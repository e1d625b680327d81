from pathlib import Path
from typing import BinaryIO, Protocol

_CHUNK_SIZE = 64 * 1024


class Writer(Protocol):
    def write(self, data: bytes, /) -> int: ...


class FileSystem:
    """Local disk operations used while materializing sources.

    Injected into sources so tests can substitute failing operations.
    """

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def open_file(self, path: Path) -> BinaryIO:
        return path.open("wb")

    def copy(self, dst: Writer, src: BinaryIO) -> int:
        """Copy ``src`` into ``dst`` in chunks and return the bytes written."""
        written = 0
        while chunk := src.read(_CHUNK_SIZE):
            dst.write(chunk)
            written += len(chunk)
        return written
