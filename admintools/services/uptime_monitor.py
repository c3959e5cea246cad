import re
import time
from datetime import datetime, timezone
from typing import Iterable, Optional

import psutil

from admintools.errors import MetricQueryError
from admintools.models.collection import CollectionResult
from admintools.models.host import UptimeStatus
from admintools.services.cim import query_instances
from admintools.services.collection import collect, resolve_targets
from admintools.services.probe import is_local, is_reachable

_MS_DATE_PATTERN = re.compile(r"/Date\((-?\d+)\)/")

# PowerShell 7 prints 1-7 fractional digits; fromisoformat before 3.11 wants 3 or 6
_FRACTION_PATTERN = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_cim_datetime(value) -> datetime:
    """
    Parse LastBootUpTime as serialised by ConvertTo-Json.

    Windows PowerShell gives "/Date(<ms since epoch>)/" (sometimes wrapped in
    an object with a "value" key), PowerShell 7 an ISO 8601 string.
    """
    if isinstance(value, dict):
        value = value.get("value", value.get("DateTime"))
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value {value!r}")

    match = _MS_DATE_PATTERN.search(value)
    if match:
        return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)

    text = value.strip().replace("Z", "+00:00")
    text = _FRACTION_PATTERN.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def format_uptime(seconds: int) -> str:
    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    return f"{days}d {hours}h {minutes}m"


def _query_boot_time(host: str) -> datetime:
    if is_local(host):
        return datetime.fromtimestamp(psutil.boot_time(), tz=timezone.utc)

    rows = query_instances(host, "Win32_OperatingSystem", ["LastBootUpTime"])
    if not rows:
        raise MetricQueryError(host, "Win32_OperatingSystem returned no instance")
    try:
        return parse_cim_datetime(rows[0].get("LastBootUpTime"))
    except ValueError as exc:
        raise MetricQueryError(host, f"Could not parse LastBootUpTime: {exc}") from exc


def _build_uptime_status(host: str, last_boot: datetime) -> UptimeStatus:
    # Clock skew between hosts can put the boot time slightly in the future
    uptime_seconds = max(0, int(time.time() - last_boot.timestamp()))
    return UptimeStatus(
        host=host,
        last_boot=last_boot,
        uptime_seconds=uptime_seconds,
        uptime=format_uptime(uptime_seconds),
    )


def get_uptime(targets: Optional[Iterable[str]] = None) -> CollectionResult:
    """Collect last boot time and uptime per reachable target."""
    return collect(resolve_targets(targets), is_reachable, _query_boot_time, _build_uptime_status)
