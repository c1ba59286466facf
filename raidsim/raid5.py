"""RAID level 5 striping, degraded reads and writes, and disk rebuild."""

from __future__ import annotations

from contextlib import suppress

from raidsim.disk import BLOCK_SIZE
from raidsim.disk_array import DiskArray, DiskArrayError

_ZERO = bytes(BLOCK_SIZE)


def stripe_address(ndisks: int, lba: int, strip: int) -> tuple[int, int]:
    """Map a logical block address to ``(disk, block)`` with rotating parity."""
    width = (ndisks - 1) * strip
    disk = lba % width // strip
    block = lba // width * strip + lba % strip
    if (block // strip) % ndisks <= disk:
        disk += 1
    return disk, block


def _xor(left: bytes, right: bytes) -> bytes:
    value = int.from_bytes(left, "big") ^ int.from_bytes(right, "big")
    return value.to_bytes(len(left), "big")


def _token(buffer: bytes) -> str:
    head = buffer[:4]
    if head[0] == 0:
        return "0"
    return head.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class Raid5:
    """RAID 5 over a :class:`DiskArray`, with ``strip`` blocks per strip.

    ``failed`` holds the disks marked as failed and ``failures`` counts
    failures as the trace reports them.
    """

    def __init__(self, array: DiskArray, strip: int) -> None:
        self.array = array
        self.strip = strip
        self.failed: set[int] = set()
        self.failures = 0

    def _check_layout(self) -> None:
        if self.array.ndisks < 2:
            raise ValueError("RAID 5 needs at least 2 disks")
        if self.strip < 1:
            raise ValueError(f"invalid strip size {self.strip}")

    def _read(self, disk: int, block: int, fallback: bytes) -> bytes:
        try:
            return self.array.read(disk, block)
        except DiskArrayError:
            return fallback

    def _write(self, disk: int, block: int, data: bytes) -> None:
        with suppress(DiskArrayError):
            self.array.write(disk, block, data)

    def _rebuild_block(self, block: int) -> bytes:
        """XOR the given block across every disk not marked failed."""
        result = _ZERO
        for disk in range(self.array.ndisks):
            if disk not in self.failed:
                result = _xor(result, self._read(disk, block, _ZERO))
        return result

    def read(self, lba: int, size: int) -> list[str]:
        """Return the first four bytes of ``size`` blocks from ``lba`` as text.

        A block holding zeros reads as ``"0"``; a block on a failed disk that
        cannot be rebuilt reads as ``"ERROR"``.
        """
        self._check_layout()
        results: list[str] = []
        buffer = _ZERO
        for address in range(lba, lba + size):
            disk, block = stripe_address(self.array.ndisks, address, self.strip)
            if disk in self.failed:
                if self.failures > 1:
                    results.append("ERROR")
                else:
                    buffer = self._rebuild_block(block)
            else:
                buffer = self._read(disk, block, buffer)
            if disk not in self.failed or self.failures < 2:
                results.append(_token(buffer))
        return results

    def _load_parity(self, parity_disk: int, start: int) -> list[bytes]:
        return [self._read(parity_disk, start + j, _ZERO) for j in range(self.strip)]

    def _load_lost(self, start: int, previous: list[bytes]) -> list[bytes]:
        if self.failures != 1:
            return previous
        return [self._rebuild_block(start + j) for j in range(self.strip)]

    def write(self, lba: int, size: int, data: bytes) -> bool:
        """Write the block ``data`` to ``size`` blocks from ``lba``, keeping parity.

        Returns True when a block landed on a failed disk while more than one
        disk was failed.
        """
        self._check_layout()
        if len(data) != BLOCK_SIZE:
            raise ValueError(f"a block holds {BLOCK_SIZE} bytes, got {len(data)}")
        ndisks, strip = self.array.ndisks, self.strip
        width = (ndisks - 1) * strip
        start = lba // width * strip
        parity_disk = (lba // width) % ndisks
        parity = self._load_parity(parity_disk, start)
        lost = self._load_lost(start, [_ZERO] * strip)
        error = False

        for i in range(size):
            disk, block = stripe_address(ndisks, lba, strip)
            slot = block % strip
            old = self._read(disk, block, _ZERO)
            if disk in self.failed:
                old = _xor(lost[slot], data)
                if self.failures > 1:
                    error = True
            else:
                old = _xor(old, data)
                self._write(disk, block, data)
            parity[slot] = _xor(parity[slot], old)
            lba += 1

            if lba % width == 0 or i + 1 == size:
                if parity_disk not in self.failed:
                    for j, chunk in enumerate(parity):
                        self._write(parity_disk, start + j, chunk)
                start = lba // width * strip
                parity_disk = (lba // width) % ndisks
                # Past the last stripe there is nothing left to preload.
                if start + strip <= self.array.nblocks:
                    parity = self._load_parity(parity_disk, start)
                    lost = self._load_lost(start, lost)
        return error

    def fail(self, disk: int) -> None:
        """Mark ``disk`` as failed; failing it again changes nothing."""
        if not 0 <= disk < self.array.ndisks:
            raise DiskArrayError(f"no disk {disk} in the array")
        if disk in self.failed:
            return
        self.failed.add(disk)
        with suppress(DiskArrayError):
            self.array.fail_disk(disk)
        self.failures += 1

    def recover(self, disk: int) -> None:
        """Bring a failed disk back, rebuilding it when it was the only failure."""
        if disk not in self.failed:
            return
        with suppress(DiskArrayError):
            self.array.recover_disk(disk)
        if self.failures < 2:
            for block in range(self.array.nblocks):
                rebuilt = _ZERO
                for other in range(self.array.ndisks):
                    if other == disk:
                        continue
                    rebuilt = _xor(rebuilt, self._read(other, block, _ZERO))
                    self._write(disk, block, rebuilt)
        self.failures -= 1
        self.failed.discard(disk)