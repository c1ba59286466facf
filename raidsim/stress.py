"""Random read/write/fail/recover exercise for a disk array."""

from __future__ import annotations

import random
import re
import sys
from typing import Protocol, Sequence, TextIO

from raidsim.disk import BLOCK_SIZE
from raidsim.disk_array import DiskArray, DiskArrayError

PROB_FAIL = 10
PROB_RECOVER = 10
NUM_OPS = 2
OP_READ = 0
OP_WRITE = 1


class _Rng(Protocol):
    def randrange(self, stop: int) -> int: ...


def _fill_byte(disk: int, block: int) -> int:
    return ((disk + 1) * (block + 1)) & 0xFF


def _signed(value: int) -> int:
    return value - 256 if value > 127 else value


def run_stress(
    array: DiskArray,
    niter: int,
    rng: _Rng | None = None,
    out: TextIO | None = None,
) -> int:
    """Run ``niter`` random steps on ``array``; return the number of mismatches.

    Each block written holds the byte ``(disk+1)*(block+1)``; a read must find
    that pattern or zeros.
    """
    rng = rng if rng is not None else random.Random()
    stream = out if out is not None else sys.stdout
    failed: int | None = None
    zero = bytes(BLOCK_SIZE)
    mismatches = 0

    for _ in range(niter):
        if failed is not None:
            if rng.randrange(PROB_RECOVER) == 0:
                array.recover_disk(failed)
                failed = None
                continue
        elif rng.randrange(PROB_FAIL) == 0:
            failed = rng.randrange(array.ndisks)
            array.fail_disk(failed)
            continue

        disk = rng.randrange(array.ndisks)
        block = rng.randrange(array.nblocks)
        expected = _fill_byte(disk, block)
        op = rng.randrange(NUM_OPS)
        if op == OP_READ:
            try:
                data = array.read(disk, block)
            except DiskArrayError:
                continue
            if data != bytes([expected]) * BLOCK_SIZE and data != zero:
                mismatches += 1
                stream.write(
                    f"Error: mismatch disk {disk} block {block} value "
                    f"{_signed(data[0])} should be {_signed(expected)} or zero\n"
                )
        else:
            try:
                array.write(disk, block, bytes([expected]) * BLOCK_SIZE)
            except DiskArrayError:
                pass
            stream.write(f"Wrote disk {disk} block {block} value {_signed(expected)}\n")

    return mismatches


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point: ``<ndisks> <nblocks> <niter>``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 3:
        print("use: raidsim-stress <ndisks> <nblocks> <niter>")
        return 1
    ndisks, nblocks, niter = (_atoi(arg) for arg in args)
    try:
        array = DiskArray("myvirtualdisk", ndisks, nblocks, verbose=True)
    except DiskArrayError as exc:
        print(f"couldn't create virtual disk: {exc}", file=sys.stderr)
        return 1
    with array:
        run_stress(array, niter)
    return 0


if __name__ == "__main__":
    sys.exit(main())