"""Disk space utilities."""

from pathlib import Path

import psutil

from dirserve.schemas.files import DiskUsage

UNIT = 1024
PREFIXES = "KMGTPE"


def human_readable_bytes(num_bytes: int) -> str:
    """Format a byte count with binary units: 512 B, 1.5 KB, 2.0 MB, ..."""
    if num_bytes < UNIT:
        return f"{num_bytes} B"
    div, exp = UNIT, 0
    n = num_bytes // UNIT
    while n >= UNIT and exp < len(PREFIXES) - 1:
        div *= UNIT
        exp += 1
        n //= UNIT
    return f"{num_bytes / div:.1f} {PREFIXES[exp]}B"


def get_disk_usage(path: str | Path) -> DiskUsage:
    """Get usage of the filesystem holding ``path``.

    Raises OSError when the filesystem cannot be queried.
    """
    usage = psutil.disk_usage(str(path))
    return DiskUsage(
        total_bytes=usage.total,
        used_bytes=usage.used,
        total=human_readable_bytes(usage.total),
        used=human_readable_bytes(usage.used),
    )
