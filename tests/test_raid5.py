import io

import pytest

from raidsim.disk import BLOCK_SIZE
from raidsim.disk_array import DiskArray
from raidsim.raid5 import Raid5, stripe_address

NDISKS = 3
NBLOCKS = 8
STRIP = 2
TOTAL = (NDISKS - 1) * NBLOCKS


def _pattern(text: str) -> bytes:
    return text.encode().ljust(4, b"\0")[:4] * (BLOCK_SIZE // 4)


def _word(i: int) -> str:
    return f"w{i:03d}"


@pytest.fixture
def array(tmp_path):
    arr = DiskArray(tmp_path / "vd", NDISKS, NBLOCKS, out=io.StringIO())
    yield arr
    arr.close()


@pytest.fixture
def raid(array):
    return Raid5(array, STRIP)


def _fill(raid):
    for lba in range(TOTAL):
        raid.write(lba, 1, _pattern(_word(lba)))


def _parity_zero(array):
    for block in range(NBLOCKS):
        acc = 0
        for disk in range(NDISKS):
            acc ^= int.from_bytes(array.read(disk, block), "big")
        if acc != 0:
            return False
    return True


def test_stripe_address_pinned():
    assert stripe_address(3, 0, 1) == (1, 0)
    assert stripe_address(3, 2, 1) == (0, 1)


@pytest.mark.parametrize("ndisks,strip", [(2, 1), (3, 2), (4, 3), (5, 1)])
def test_stripe_address_is_injective_and_avoids_parity(ndisks, strip):
    seen = set()
    for lba in range((ndisks - 1) * strip * ndisks * 2):
        disk, block = stripe_address(ndisks, lba, strip)
        assert 0 <= disk < ndisks
        assert disk != (block // strip) % ndisks
        seen.add((disk, block))
    assert len(seen) == (ndisks - 1) * strip * ndisks * 2


def test_unwritten_blocks_read_as_zero(raid):
    assert raid.read(0, 3) == ["0", "0", "0"]


def test_write_then_read_round_trip(raid):
    assert raid.write(0, 4, _pattern("abcd")) is False
    assert raid.read(0, 4) == ["abcd"] * 4


def test_short_pattern_reads_back_shortened(raid):
    raid.write(5, 1, _pattern("ab"))
    assert raid.read(5, 1) == ["ab"]


def test_parity_invariant_after_writes(raid, array):
    _fill(raid)
    raid.write(3, 7, _pattern("zzzz"))
    assert _parity_zero(array)
    assert raid.read(0, TOTAL) == [
        "zzzz" if 3 <= lba < 10 else _word(lba) for lba in range(TOTAL)
    ]


def test_single_failure_read_is_rebuilt(raid):
    _fill(raid)
    disk, _ = stripe_address(NDISKS, 0, STRIP)
    raid.fail(disk)
    assert raid.read(0, TOTAL) == [_word(lba) for lba in range(TOTAL)]


def test_degraded_write_is_readable(raid):
    _fill(raid)
    disk, _ = stripe_address(NDISKS, 1, STRIP)
    raid.fail(disk)
    assert raid.write(1, 1, _pattern("new!")) is False
    assert raid.read(1, 1) == ["new!"]
    assert raid.read(0, 1) == [_word(0)]


def test_recover_rebuilds_disk_contents(raid, array):
    _fill(raid)
    target = 2
    before = [array.read(target, block) for block in range(NBLOCKS)]
    raid.fail(target)
    assert array.is_failed(target)
    raid.recover(target)
    assert not array.is_failed(target)
    assert [array.read(target, block) for block in range(NBLOCKS)] == before
    assert _parity_zero(array)


def test_recover_after_degraded_write(raid, array):
    _fill(raid)
    disk, _ = stripe_address(NDISKS, 2, STRIP)
    raid.fail(disk)
    raid.write(2, 1, _pattern("qqqq"))
    raid.recover(disk)
    assert raid.read(2, 1) == ["qqqq"]
    assert _parity_zero(array)


def test_double_failure_reports_error(raid):
    _fill(raid)
    disk, _ = stripe_address(NDISKS, 0, STRIP)
    other = (disk + 1) % NDISKS
    raid.fail(disk)
    raid.fail(other)
    assert raid.read(0, 1) == ["ERROR"]
    assert raid.write(0, 1, _pattern("xxxx")) is True


def test_fail_counts_once_and_recover_resets(raid):
    raid.fail(1)
    raid.fail(1)
    assert raid.failures == 1
    assert raid.failed == {1}
    raid.recover(1)
    assert raid.failures == 0
    assert raid.failed == set()


def test_recover_with_two_failures_gives_blank_disk(raid, array):
    _fill(raid)
    raid.fail(0)
    raid.fail(1)
    raid.recover(0)
    assert array.read(0, 0) == bytes(BLOCK_SIZE)
    assert raid.failures == 1


def test_write_rejects_wrong_block_size(raid):
    with pytest.raises(ValueError):
        raid.write(0, 1, b"abcd")


def test_single_disk_array_is_rejected(tmp_path):
    with DiskArray(tmp_path / "one", 1, 4, out=io.StringIO()) as arr:
        with pytest.raises(ValueError):
            Raid5(arr, 1).read(0, 1)