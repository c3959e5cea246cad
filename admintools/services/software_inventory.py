"""
Installed software from the registry uninstall keys.

Both the native and the 32-bit (WOW6432Node) uninstall trees of
HKEY_LOCAL_MACHINE are read. Remote hosts are reached through the Remote
Registry service via winreg.ConnectRegistry.
"""
import fnmatch
import logging
import re
from functools import partial
from typing import Dict, Iterable, List, Optional

from admintools.errors import MetricQueryError
from admintools.models.collection import CollectionResult
from admintools.models.host import InstalledSoftware
from admintools.services.collection import collect, resolve_targets
from admintools.services.probe import is_local, is_reachable

logger = logging.getLogger(__name__)

UNINSTALL_KEYS = (
    r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall",
    r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall",
)

_VALUE_NAMES = (
    "DisplayName",
    "DisplayVersion",
    "Publisher",
    "InstallDate",
    "UninstallString",
    "SystemComponent",
    "ParentKeyName",
    "ReleaseType",
)

_UPDATE_RELEASE_TYPES = {"update", "hotfix", "security update", "service pack"}
_KB_PATTERN = re.compile(r"\bKB\d{6,7}\b", re.IGNORECASE)


def _read_values(winreg, key) -> Dict[str, object]:
    values = {}
    for name in _VALUE_NAMES:
        try:
            values[name], _ = winreg.QueryValueEx(key, name)
        except OSError:
            continue
    return values


def _read_uninstall_entries(host: str) -> List[Dict[str, object]]:
    """
    Return the raw values of every uninstall subkey on host.

    Subkeys that cannot be opened (access denied, removed mid-enumeration)
    are skipped. Raises MetricQueryError if the registry itself is
    unavailable.
    """
    try:
        import winreg
    except ImportError as exc:
        raise MetricQueryError(host, "registry access requires Windows") from exc

    computer = None if is_local(host) else rf"\\{host}"
    try:
        hive = winreg.ConnectRegistry(computer, winreg.HKEY_LOCAL_MACHINE)
    except OSError as exc:
        raise MetricQueryError(host, f"Could not connect to registry: {exc}") from exc

    entries = []
    with hive:
        for root_path in UNINSTALL_KEYS:
            try:
                root = winreg.OpenKey(hive, root_path)
            except OSError:
                logger.debug("%s: %s not present", host, root_path)
                continue
            with root:
                subkey_count = winreg.QueryInfoKey(root)[0]
                for index in range(subkey_count):
                    try:
                        name = winreg.EnumKey(root, index)
                        with winreg.OpenKey(root, name) as subkey:
                            values = _read_values(winreg, subkey)
                    except OSError as exc:
                        logger.debug("%s: skipping %s subkey %d: %s", host, root_path, index, exc)
                        continue
                    values["_path"] = f"{root_path}\\{name}"
                    entries.append(values)
    return entries


def _is_update(values: Dict[str, object]) -> bool:
    if values.get("ParentKeyName"):
        return True
    if str(values.get("ReleaseType") or "").strip().lower() in _UPDATE_RELEASE_TYPES:
        return True
    return bool(_KB_PATTERN.search(str(values.get("DisplayName") or "")))


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _build_software_list(
    host: str,
    entries: List[Dict[str, object]],
    include_updates: bool = False,
    name_filter: Optional[str] = None,
) -> List[InstalledSoftware]:
    software = []
    for values in entries:
        name = _optional_str(values.get("DisplayName"))
        if not name:
            continue
        if values.get("SystemComponent") == 1:
            continue
        is_update = _is_update(values)
        if is_update and not include_updates:
            continue
        if name_filter and not fnmatch.fnmatch(name.lower(), name_filter.lower()):
            continue
        software.append(
            InstalledSoftware(
                host=host,
                name=name,
                version=_optional_str(values.get("DisplayVersion")),
                publisher=_optional_str(values.get("Publisher")),
                install_date=_optional_str(values.get("InstallDate")),
                uninstall_string=_optional_str(values.get("UninstallString")),
                is_update=is_update,
                registry_path=str(values["_path"]),
            )
        )
    return sorted(software, key=lambda item: (item.name.lower(), item.version or ""))


def get_installed_software(
    targets: Optional[Iterable[str]] = None,
    include_updates: bool = False,
    name_filter: Optional[str] = None,
) -> CollectionResult:
    """
    List installed programs per reachable target, sorted by name.

    Update packages and hotfixes are left out unless include_updates is set.
    name_filter is a case-insensitive wildcard such as '*office*'.
    """
    result = collect(
        resolve_targets(targets),
        is_reachable,
        _read_uninstall_entries,
        partial(_build_software_list, include_updates=include_updates, name_filter=name_filter),
    )
    result.records = [item for per_host in result.records for item in per_host]
    return result
