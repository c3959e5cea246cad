import logging
import sys
from functools import partial
from typing import Dict, Iterable, List, Optional

import psutil

from admintools.errors import MetricQueryError
from admintools.models.collection import CollectionResult
from admintools.models.host import DiskStatus
from admintools.models.size import SizeUnit
from admintools.services.byte_size import format_byte_length
from admintools.services.cim import query_instances
from admintools.services.collection import collect, resolve_targets
from admintools.services.probe import is_local, is_reachable

logger = logging.getLogger(__name__)

# Win32_LogicalDisk.DriveType for local fixed disks
_FIXED_DRIVE_TYPE = 3


def _local_disks() -> List[Dict]:
    disks = []
    for partition in psutil.disk_partitions(all=False):
        if sys.platform == "win32" and "fixed" not in partition.opts:
            continue
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as exc:
            # Card readers, optical drives without media, bind mounts we may not stat
            logger.debug("Skipping %s: %s", partition.mountpoint, exc)
            continue
        disks.append(
            {
                "drive": partition.mountpoint,
                "volume_name": None,
                "size_bytes": int(usage.total),
                "free_bytes": int(usage.free),
            }
        )
    return disks


def _query_disks(host: str) -> List[Dict]:
    """Return one dict (drive, volume_name, size_bytes, free_bytes) per fixed drive."""
    if is_local(host):
        return _local_disks()

    rows = query_instances(
        host,
        "Win32_LogicalDisk",
        ["DeviceID", "VolumeName", "Size", "FreeSpace"],
        where=f"DriveType={_FIXED_DRIVE_TYPE}",
    )
    disks = []
    for row in rows:
        try:
            disks.append(
                {
                    "drive": row["DeviceID"],
                    "volume_name": row.get("VolumeName") or None,
                    "size_bytes": int(row.get("Size") or 0),
                    "free_bytes": int(row.get("FreeSpace") or 0),
                }
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MetricQueryError(host, f"Unexpected disk values: {row!r}") from exc
    return disks


def _build_disk_statuses(
    host: str,
    disks: List[Dict],
    unit: Optional[SizeUnit] = None,
) -> List[DiskStatus]:
    statuses = []
    for disk in disks:
        size, free = disk["size_bytes"], disk["free_bytes"]
        statuses.append(
            DiskStatus(
                host=host,
                drive=disk["drive"],
                volume_name=disk["volume_name"],
                size_bytes=size,
                free_bytes=free,
                size=format_byte_length(size, unit),
                free=format_byte_length(free, unit),
                free_percent=round(free / size * 100, 2) if size else 0.0,
            )
        )
    return statuses


def get_disk_status(
    targets: Optional[Iterable[str]] = None,
    unit: Optional[SizeUnit] = None,
) -> CollectionResult:
    """
    Collect capacity and free space of every fixed drive on every reachable
    target. The result holds one record per drive, grouped by target.
    """
    result = collect(
        resolve_targets(targets),
        is_reachable,
        _query_disks,
        partial(_build_disk_statuses, unit=unit),
    )
    result.records = [disk for per_host in result.records for disk in per_host]
    return result
