"""Command line RAID simulator driven by a trace file."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Iterable, Sequence, TextIO

from raidsim.disk import BLOCK_SIZE, DiskError
from raidsim.disk_array import DiskArray, DiskArrayError
from raidsim.raid5 import Raid5

USAGE = (
    "usage: ./raidsim -level LEVEL -strip NSTRIPS -disks NDISKS -size SIZE "
    "-trace TRACE -verbose(OPTIONAL)"
)


class UsageError(Exception):
    """Raised when the command line is incomplete or malformed."""


@dataclass
class Options:
    """Settings taken from the command line."""

    level: int
    strip: int
    ndisks: int
    nblocks: int
    trace: str
    verbose: bool = False


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


_NUMERIC = {"-level": "level", "-strip": "strip", "-disks": "ndisks", "-size": "nblocks"}


def parse_args(argv: Sequence[str]) -> Options:
    """Parse simulator arguments; raises UsageError with the usage text."""
    values = {"level": -1, "strip": -1, "ndisks": -1, "nblocks": -1}
    trace: str | None = None
    verbose = False
    args = iter(argv)
    for arg in args:
        if arg == "-verbose":
            verbose = True
            continue
        if arg not in _NUMERIC and arg != "-trace":
            raise UsageError(USAGE)
        value = next(args, None)
        if value is None:
            raise UsageError(USAGE)
        if arg == "-trace":
            trace = value
        else:
            values[_NUMERIC[arg]] = _atoi(value)
    if trace is None or -1 in values.values():
        raise UsageError(USAGE)
    return Options(trace=trace, verbose=verbose, **values)


def _field(tokens: list[str], index: int, line: str) -> str:
    if index >= len(tokens):
        raise ValueError(f"malformed trace line: {line!r}")
    return tokens[index]


def _block_pattern(word: str) -> bytes:
    head = word.encode("utf-8")[:4].ljust(4, b"\0")
    return head * (BLOCK_SIZE // 4)


def run_trace(
    lines: Iterable[str],
    options: Options,
    array: DiskArray,
    out: TextIO | None = None,
) -> bool:
    """Replay trace commands against ``array``; return True if END was reached."""
    stream = out if out is not None else sys.stdout
    raid = Raid5(array, options.strip)
    for raw in lines:
        line = re.split(r"[\r\n]", raw, maxsplit=1)[0]
        if not line:
            continue
        stream.write(line + "\n")
        tokens = [token for token in line.split(" ") if token]
        if not tokens:
            continue
        command = tokens[0]

        if command == "READ":
            if options.level == 5:
                lba = _atoi(_field(tokens, 1, line))
                size = _atoi(_field(tokens, 2, line))
                for token in raid.read(lba, size):
                    stream.write(token + " ")
        elif command == "WRITE":
            lba = _atoi(_field(tokens, 1, line))
            size = _atoi(_field(tokens, 2, line))
            data = _block_pattern(_field(tokens, 3, line))
            if options.level == 5 and raid.write(lba, size, data):
                stream.write("ERROR ")
        elif command == "FAIL":
            raid.fail(_atoi(_field(tokens, 1, line)))
        elif command == "RECOVER":
            disk = _atoi(_field(tokens, 1, line))
            if options.level == 0:
                try:
                    array.recover_disk(disk)
                except DiskArrayError:
                    pass
                raid.failures -= 1
                raid.failed.discard(disk)
            elif options.level in (4, 5):
                raid.recover(disk)
        elif command == "END":
            array.print_stats()
            array.close()
            return True
    return False


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator on a trace file; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        options = parse_args(args)
    except UsageError as exc:
        print(exc)
        return 1

    if options.level == 5 and options.ndisks < 2:
        print("ERROR: Must have at least 2 disks for RAID 5")
        return 1

    try:
        array = DiskArray(
            "myvirtualdisk", options.ndisks, options.nblocks, verbose=options.verbose
        )
    except DiskArrayError as exc:
        print(f"couldn't create virtual disk: {exc}", file=sys.stderr)
        return 1

    with array:
        try:
            trace = open(options.trace, encoding="utf-8", errors="replace", newline="")
        except OSError:
            sys.stderr.write("An error has occurred\n")
            return 1
        with trace:
            try:
                run_trace(trace, options, array)
            except (DiskError, DiskArrayError, ValueError) as exc:
                sys.stdout.flush()
                print(exc, file=sys.stderr)
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())