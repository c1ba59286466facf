"""RAID 5 simulation over file-backed virtual disks, with trace and stress commands."""

__version__ = "0.1.0"
__all__ = ["disk", "disk_array", "stress", "raid5", "cli"]