# raidsim

A RAID 5 simulator. It stores data on an array of virtual disks, one ordinary
file per disk. Logical blocks are striped across the disks and the parity
rotates from disk to disk. A disk can be failed and later brought back. When
it was the only failed disk, it is rebuilt from the others.

Each block is 1024 bytes. An array holds from 1 to 100 disks. Each disk holds
from 1 to 1,000,000 blocks.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install ".[test]"
```

## Running a trace

```
raidsim -level LEVEL -strip STRIP -disks NDISKS -size SIZE -trace TRACE [-verbose]
```

| Option | Meaning |
| --- | --- |
| `-level` | The RAID level. Reads and writes are carried out only at level 5. |
| `-strip` | The number of blocks in each strip. |
| `-disks` | The number of disks. Level 5 needs at least 2. |
| `-size` | The number of blocks on each disk. |
| `-trace` | The trace file to replay. |
| `-verbose` | Print every disk-level read, write, failure and recovery, and each disk's counts when it is closed. |

Every option except `-verbose` is required. A missing option, or an unknown
one, prints the usage line and exits with status 1.

The disk files are created, zeroed, in the current directory. They are named
`myvirtualdisk-0`, `myvirtualdisk-1` and so on.

### Trace files

A trace file holds one command per line. Blank lines are skipped, and each
command is echoed before it runs.

```
WRITE 0 8 abcd
READ 0 8
FAIL 1
READ 0 8
RECOVER 1
READ 0 8
END
```

`WRITE LBA SIZE DATA`
: Fills `SIZE` blocks, starting at logical block `LBA`, with the first four
  bytes of `DATA` repeated. The parity is updated as the blocks are written.
  If a block falls on a failed disk while more than one disk has failed, the
  command prints `ERROR`.

`READ LBA SIZE`
: Prints the first four bytes of each block, separated by spaces. A block
  that starts with a zero byte prints as `0`.
  - With one failed disk, its blocks are rebuilt from the other disks.
  - With more than one failed disk, each block on a failed disk prints
    `ERROR`.

`FAIL DISK`
: Marks a disk as failed. Failing a disk that has already failed changes
  nothing.

`RECOVER DISK`
: Brings a failed disk back. If it was the only failed disk, its contents are
  rebuilt from the others. Otherwise it comes back zeroed.

`END`
: Prints `STATS FOR DISK n` with the read and write counts of every working
  disk, and stops the run.

A line that lacks a field its command needs stops the run with an error
message and exit status 1. So does a disk number outside the array. A trace
file that cannot be opened prints `An error has occurred` and exits with
status 1.

## Stress test for the disk array

```
raidsim-stress NDISKS NBLOCKS NITER
```

This runs `NITER` random steps against a raw array of disks, without parity,
in the current directory. Each step is one of:

- a read;
- a write;
- now and then, the failure of a disk;
- later, that disk's recovery.

Every disk-level operation is printed, along with `Wrote disk D block B value
V` for each write. Each block written holds the byte `(disk+1)*(block+1)`. A
read that finds neither that pattern nor zeros prints an `Error: mismatch`
line.

## Using it as a library

```python
from raidsim.disk_array import DiskArray
from raidsim.raid5 import Raid5

with DiskArray("myvirtualdisk", 4, 64) as array:
    raid = Raid5(array, strip=4)
    raid.write(0, 8, b"abcd" * 256)
    raid.fail(2)
    print(raid.read(0, 8))   # ['abcd', 'abcd', ...]
    raid.recover(2)
```

### `raidsim.disk`

`Disk(path, nblocks)` is one file-backed disk. It has the following methods:

- `read(block)` returns the bytes of one block.
- `write(block, data)` stores one block.
- `stats()` returns `(reads, writes)`.
- `print_stats()` prints the read and write counts.
- `close()` closes the disk.

A block number out of range, or data that is not exactly 1024 bytes, raises
`DiskError`.

### `raidsim.disk_array`

`DiskArray(filename, ndisks, nblocks)` opens the disks `<filename>-0` and so
on. It has the following methods:

- `read(disk, block)` and `write(disk, block, data)` work on one disk.
- `fail_disk(disk)` and `recover_disk(disk)` fail a disk and bring it back
  zeroed.
- `is_failed(disk)` tells whether a disk has failed.
- `print_stats()` prints the counts of every working disk and then releases
  all of them.
- `close()` closes the array.

A bad disk count or block count, or access to a failed or unknown disk,
raises `DiskArrayError`.

### `raidsim.raid5`

`Raid5(array, strip)` has the following methods:

- `read(lba, size)` returns a list of strings, as the `READ` command prints
  them.
- `write(lba, size, data)` writes one 1024-byte block pattern to `size`
  blocks. It returns `True` when a block fell on a failed disk while more
  than one disk had failed.
- `fail(disk)` and `recover(disk)` fail a disk and bring it back, rebuilding
  it when it was the only failure.

`stripe_address(ndisks, lba, strip)` returns the `(disk, block)` where a
logical block is stored.

### `raidsim.cli` and `raidsim.stress`

- `parse_args(argv)` returns an `Options`, or raises `UsageError`.
- `run_trace(lines, options, array)` replays trace lines against an array.
  It returns `True` when `END` was reached.
- `run_stress(array, niter, rng, out)` returns the number of mismatches found.

## What it does not do

Only RAID level 5 is simulated. At any other level, `READ` and `WRITE`
commands are echoed and then ignored. `FAIL` and `RECOVER` still mark disks,
but nothing is striped, mirrored or rebuilt.