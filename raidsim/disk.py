"""A virtual disk of fixed-size blocks kept in an ordinary file."""

from __future__ import annotations

import os
import sys
from typing import TextIO

BLOCK_SIZE = 1024


class DiskError(Exception):
    """Raised when a virtual disk cannot be opened, read or written."""


class Disk:
    """A file-backed disk holding ``nblocks`` blocks of ``BLOCK_SIZE`` bytes.

    Opening a disk creates the file if needed and zeroes its contents.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        nblocks: int,
        verbose: bool = False,
        out: TextIO | None = None,
    ) -> None:
        self.path = os.fspath(path)
        self.nblocks = nblocks
        self.block_size = BLOCK_SIZE
        self.verbose = verbose
        self.out = out
        self.nreads = 0
        self.nwrites = 0
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o777)
        except OSError as exc:
            raise DiskError(f"cannot open disk {self.path}: {exc.strerror}") from exc
        self._file = os.fdopen(fd, "r+b", buffering=0)
        try:
            self._file.truncate(0)
            self._file.truncate(nblocks * self.block_size)
        except OSError as exc:
            self._file.close()
            raise DiskError(f"cannot size disk {self.path}: {exc.strerror}") from exc

    @property
    def _stream(self) -> TextIO:
        return self.out if self.out is not None else sys.stdout

    @property
    def closed(self) -> bool:
        return self._file.closed

    def _check_block(self, op: str, block: int) -> None:
        if block < 0 or block >= self.nblocks:
            raise DiskError(f"disk_{op}: invalid block #{block}")
        if self._file.closed:
            raise DiskError(f"disk_{op}: disk {self.path} is closed")

    def read(self, block: int) -> bytes:
        """Return the ``BLOCK_SIZE`` bytes stored in ``block``."""
        self._check_block("read", block)
        try:
            self._file.seek(block * self.block_size)
            data = self._file.read(self.block_size)
        except OSError as exc:
            raise DiskError(f"disk_read: failed to read block #{block}: {exc.strerror}") from exc
        if data is None or len(data) != self.block_size:
            raise DiskError(f"disk_read: failed to read block #{block}: short read")
        self.nreads += 1
        return data

    def write(self, block: int, data: bytes) -> None:
        """Store exactly ``BLOCK_SIZE`` bytes of ``data`` in ``block``."""
        self._check_block("write", block)
        if len(data) != self.block_size:
            raise DiskError(
                f"disk_write: block #{block} needs {self.block_size} bytes, got {len(data)}"
            )
        try:
            self._file.seek(block * self.block_size)
            written = self._file.write(bytes(data))
        except OSError as exc:
            raise DiskError(f"disk_write: failed to write block #{block}: {exc.strerror}") from exc
        if written != self.block_size:
            raise DiskError(f"disk_write: failed to write block #{block}: short write")
        self.nwrites += 1

    def stats(self) -> tuple[int, int]:
        """Return ``(reads, writes)`` performed on this disk."""
        return self.nreads, self.nwrites

    def print_stats(self) -> None:
        """Print the number of reads and writes."""
        self._stream.write(f"\t READS: {self.nreads}\n\tWRITES: {self.nwrites}\n")

    def close(self) -> None:
        """Close the disk; prints its statistics first when verbose."""
        if self._file.closed:
            return
        if self.verbose:
            self.print_stats()
        self._file.close()

    def __enter__(self) -> Disk:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()