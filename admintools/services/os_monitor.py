import platform
from typing import Dict, Iterable, Optional

from admintools.errors import MetricQueryError
from admintools.models.collection import CollectionResult
from admintools.models.host import OperatingSystemInfo
from admintools.services.cim import query_instances
from admintools.services.collection import collect, resolve_targets
from admintools.services.probe import is_local, is_reachable


def _local_os() -> Dict[str, Optional[str]]:
    system = platform.system()
    version = platform.version()
    build = None
    if system == "Windows":
        # platform.version() is e.g. 10.0.22631
        build = version.rsplit(".", 1)[-1]
        edition = platform.win32_edition() or ""
        name = f"Microsoft Windows {platform.release()} {edition}".strip()
    else:
        name = f"{system} {platform.release()}"
    return {
        "name": name,
        "version": version,
        "build_number": build,
        "architecture": platform.machine() or None,
    }


def _query_os(host: str) -> Dict[str, Optional[str]]:
    if is_local(host):
        return _local_os()

    rows = query_instances(
        host,
        "Win32_OperatingSystem",
        ["Caption", "Version", "BuildNumber", "OSArchitecture"],
    )
    if not rows:
        raise MetricQueryError(host, "Win32_OperatingSystem returned no instance")
    row = rows[0]
    return {
        "name": (row.get("Caption") or "").strip(),
        "version": row.get("Version") or "",
        "build_number": row.get("BuildNumber"),
        "architecture": row.get("OSArchitecture"),
    }


def _build_os_info(host: str, values: Dict[str, Optional[str]]) -> OperatingSystemInfo:
    return OperatingSystemInfo(host=host, **values)


def get_os_info(targets: Optional[Iterable[str]] = None) -> CollectionResult:
    """Collect OS caption, version and build number per reachable target."""
    return collect(resolve_targets(targets), is_reachable, _query_os, _build_os_info)
