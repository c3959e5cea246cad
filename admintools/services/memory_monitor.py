from functools import partial
from typing import Iterable, Optional, Tuple

import psutil

from admintools.errors import MetricQueryError
from admintools.models.collection import CollectionResult
from admintools.models.host import MemoryStatus
from admintools.models.size import SizeUnit
from admintools.services.byte_size import format_byte_length
from admintools.services.cim import query_instances
from admintools.services.collection import collect, resolve_targets
from admintools.services.probe import is_local, is_reachable


def _query_memory(host: str) -> Tuple[int, int]:
    """Return (total_bytes, free_bytes) for host."""
    if is_local(host):
        memory = psutil.virtual_memory()
        return int(memory.total), int(memory.available)

    rows = query_instances(
        host,
        "Win32_OperatingSystem",
        ["TotalVisibleMemorySize", "FreePhysicalMemory"],
    )
    if not rows:
        raise MetricQueryError(host, "Win32_OperatingSystem returned no instance")
    # Both values are reported in KB
    try:
        total = int(rows[0]["TotalVisibleMemorySize"]) * 1024
        free = int(rows[0]["FreePhysicalMemory"]) * 1024
    except (KeyError, TypeError, ValueError) as exc:
        raise MetricQueryError(host, f"Unexpected memory values: {rows[0]!r}") from exc
    return total, free


def _build_memory_status(
    host: str,
    metric: Tuple[int, int],
    unit: Optional[SizeUnit] = None,
) -> MemoryStatus:
    total, free = metric
    used_percent = round((total - free) / total * 100, 2) if total else 0.0

    return MemoryStatus(
        host=host,
        total_bytes=total,
        free_bytes=free,
        total=format_byte_length(total, unit),
        free=format_byte_length(free, unit),
        free_memory_gb=format_byte_length(free, SizeUnit.GB).magnitude,
        used_memory_percent=used_percent,
    )


def get_memory_status(
    targets: Optional[Iterable[str]] = None,
    unit: Optional[SizeUnit] = None,
) -> CollectionResult:
    """
    Collect free/total physical memory for every reachable target.

    Targets default to Settings.targets, then to the local machine.
    """
    return collect(
        resolve_targets(targets),
        is_reachable,
        _query_memory,
        partial(_build_memory_status, unit=unit),
    )
