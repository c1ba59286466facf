import io
import os

import pytest

from raidsim.disk import BLOCK_SIZE, Disk, DiskError


def test_blocks_are_1024_bytes(tmp_path):
    path = tmp_path / "d"
    with Disk(path, 1) as disk:
        assert len(disk.read(0)) == 1024
    assert os.path.getsize(path) == 1024
    assert BLOCK_SIZE == 1024


def test_new_disk_is_zeroed_and_sized(tmp_path):
    path = tmp_path / "d0"
    with Disk(path, 4) as disk:
        assert disk.read(3) == bytes(BLOCK_SIZE)
    assert os.path.getsize(path) == 4 * BLOCK_SIZE


def test_write_then_read_round_trip(tmp_path):
    data = bytes(range(256)) * 4
    with Disk(tmp_path / "d", 3) as disk:
        disk.write(1, data)
        assert disk.read(1) == data
        assert disk.read(0) == bytes(BLOCK_SIZE)


def test_reopen_zeroes_existing_contents(tmp_path):
    path = tmp_path / "d"
    with Disk(path, 2) as disk:
        disk.write(0, b"x" * BLOCK_SIZE)
    with Disk(path, 2) as disk:
        assert disk.read(0) == bytes(BLOCK_SIZE)


@pytest.mark.parametrize("block", [-1, 2, 100])
def test_invalid_block_read(tmp_path, block):
    with Disk(tmp_path / "d", 2) as disk:
        with pytest.raises(DiskError, match="invalid block"):
            disk.read(block)


@pytest.mark.parametrize("block", [-1, 2])
def test_invalid_block_write(tmp_path, block):
    with Disk(tmp_path / "d", 2) as disk:
        with pytest.raises(DiskError, match="invalid block"):
            disk.write(block, bytes(BLOCK_SIZE))


def test_write_wrong_length(tmp_path):
    with Disk(tmp_path / "d", 2) as disk:
        with pytest.raises(DiskError):
            disk.write(0, b"short")


def test_stats_count_operations(tmp_path):
    with Disk(tmp_path / "d", 2) as disk:
        disk.write(0, bytes(BLOCK_SIZE))
        disk.write(1, bytes(BLOCK_SIZE))
        disk.read(0)
        assert disk.stats() == (1, 2)


def test_print_stats_format(tmp_path):
    out = io.StringIO()
    with Disk(tmp_path / "d", 2, out=out) as disk:
        disk.read(0)
        disk.write(0, bytes(BLOCK_SIZE))
        disk.write(1, bytes(BLOCK_SIZE))
        disk.print_stats()
    assert out.getvalue() == "\t READS: 1\n\tWRITES: 2\n"


def test_verbose_close_prints_stats_once(tmp_path):
    out = io.StringIO()
    disk = Disk(tmp_path / "d", 1, verbose=True, out=out)
    disk.read(0)
    disk.close()
    disk.close()
    assert out.getvalue() == "\t READS: 1\n\tWRITES: 0\n"
    assert disk.closed


def test_quiet_close_prints_nothing(tmp_path):
    out = io.StringIO()
    disk = Disk(tmp_path / "d", 1, out=out)
    disk.close()
    assert out.getvalue() == ""


def test_read_after_close_fails(tmp_path):
    disk = Disk(tmp_path / "d", 1)
    disk.close()
    with pytest.raises(DiskError):
        disk.read(0)


def test_open_in_missing_directory_fails(tmp_path):
    with pytest.raises(DiskError):
        Disk(tmp_path / "missing" / "d", 1)