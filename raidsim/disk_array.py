"""An array of virtual disks that can fail and be recovered one by one."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from raidsim.disk import Disk, DiskError

MAX_DISKS = 100
MAX_BLOCKS = 1000000


class DiskArrayError(Exception):
    """Raised when an array operation is refused or fails."""


class DiskArray:
    """``ndisks`` disks of ``nblocks`` blocks, stored in ``<filename>-<i>``."""

    def __init__(
        self,
        filename: str | os.PathLike[str],
        ndisks: int,
        nblocks: int,
        verbose: bool = False,
        out: TextIO | None = None,
    ) -> None:
        if ndisks < 1 or ndisks > MAX_DISKS:
            raise DiskArrayError(f"Disk_array_create: wrong number of disks {ndisks}")
        if nblocks < 1 or nblocks > MAX_BLOCKS:
            raise DiskArrayError(f"Disk_array_create: wrong number of blocks {nblocks}")
        self.filename = os.fspath(filename)
        self.ndisks = ndisks
        self.nblocks = nblocks
        self.verbose = verbose
        self.out = out
        self._disks: list[Disk | None] = [None] * ndisks
        try:
            for index in range(ndisks):
                self._disks[index] = self._open(index)
        except DiskError as exc:
            self.close()
            raise DiskArrayError(str(exc)) from exc

    @property
    def _stream(self) -> TextIO:
        return self.out if self.out is not None else sys.stdout

    def _open(self, index: int) -> Disk:
        return Disk(
            f"{self.filename}-{index}", self.nblocks, verbose=self.verbose, out=self.out
        )

    def _log(self, message: str) -> None:
        if self.verbose:
            self._stream.write(message + "\n")

    def _live(self, disk: int) -> Disk:
        if 0 <= disk < self.ndisks:
            found = self._disks[disk]
            if found is not None:
                return found
        raise DiskArrayError(f"disk {disk} is not available")

    def read(self, disk: int, block: int) -> bytes:
        """Read one block from a working disk."""
        self._log(f"DISK ARRAY: READ DISK {disk} BLOCK {block}")
        return self._live(disk).read(block)

    def write(self, disk: int, block: int, data: bytes) -> None:
        """Write one block to a working disk."""
        self._log(f"DISK ARRAY: WRITE DISK {disk} BLOCK {block}")
        self._live(disk).write(block, data)

    def fail_disk(self, disk: int) -> None:
        """Mark a working disk as failed; its reads and writes then fail."""
        target = self._live(disk)
        self._log(f"DISK ARRAY: FAIL DISK {disk}")
        target.close()
        self._disks[disk] = None

    def recover_disk(self, disk: int) -> None:
        """Bring a failed disk back, with its contents zeroed."""
        if not 0 <= disk < self.ndisks or self._disks[disk] is not None:
            raise DiskArrayError(f"disk {disk} cannot be recovered")
        try:
            self._disks[disk] = self._open(disk)
        except DiskError as exc:
            self._log(f"DISK ARRAY: RECOVER DISK {disk}")
            raise DiskArrayError(str(exc)) from exc
        self._log(f"DISK ARRAY: RECOVER DISK {disk}")

    def is_failed(self, disk: int) -> bool:
        """Return whether ``disk`` is currently failed."""
        if not 0 <= disk < self.ndisks:
            raise DiskArrayError(f"no disk {disk} in the array")
        return self._disks[disk] is None

    def print_stats(self) -> None:
        """Print reads and writes of every working disk, then release it.

        The array has no working disks afterwards.
        """
        for index, disk in enumerate(self._disks):
            if disk is None:
                continue
            self._stream.write(f"STATS FOR DISK {index}\n")
            disk.print_stats()
            disk.verbose = False
            disk.close()
            self._disks[index] = None

    def close(self) -> None:
        """Close every working disk."""
        for index, disk in enumerate(self._disks):
            if disk is not None:
                disk.close()
                self._disks[index] = None

    def __enter__(self) -> DiskArray:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()