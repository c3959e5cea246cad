"""
CIM (WMI) queries against remote Windows hosts through PowerShell.

Get-CimInstance does the remoting; results come back as JSON and are turned
into plain dicts, one per instance.
"""
import json
import logging
import re
import subprocess
import sys
from typing import Any, Dict, List, Optional, Sequence

from admintools.config import get_settings
from admintools.errors import MetricQueryError

logger = logging.getLogger(__name__)

_HOST_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:-]*$")
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_WHERE_PATTERN = re.compile(r"^[A-Za-z0-9_ =<>'\"!]*$")


def _powershell_executable() -> str:
    return "powershell" if sys.platform == "win32" else "pwsh"


def build_command(
    host: str,
    class_name: str,
    properties: Sequence[str],
    where: Optional[str] = None,
) -> str:
    """Compose the Get-CimInstance pipeline for one host."""
    if not _HOST_PATTERN.match(host):
        raise ValueError(f"Invalid host name {host!r}")
    for name in [class_name, *properties]:
        if not _IDENTIFIER_PATTERN.match(name):
            raise ValueError(f"Invalid CIM identifier {name!r}")
    if where is not None and not _WHERE_PATTERN.match(where):
        raise ValueError(f"Invalid CIM filter {where!r}")

    command = f"Get-CimInstance -ClassName {class_name} -ComputerName '{host}' -ErrorAction Stop"
    if where:
        escaped = where.replace('"', '`"')
        command += f' -Filter "{escaped}"'
    command += f" | Select-Object {','.join(properties)}"
    # Windows PowerShell renders DateTime as "/Date(ms)/", PowerShell 7 as ISO 8601
    command += " | ConvertTo-Json -Compress -Depth 2"
    return command


def query_instances(
    host: str,
    class_name: str,
    properties: Sequence[str],
    where: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Run a CIM query on ``host`` and return the selected properties.

    Raises MetricQueryError when PowerShell is missing, times out, exits with
    an error or prints something that is not JSON.
    """
    settings = get_settings()
    command = build_command(host, class_name, properties, where)
    logger.debug("CIM query on %s: %s", host, command)

    try:
        result = subprocess.run(
            [_powershell_executable(), "-NoProfile", "-NonInteractive", "-Command", command],
            check=False,
            capture_output=True,
            text=True,
            timeout=settings.query_timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise MetricQueryError(host, "PowerShell binary not found on this system") from exc
    except subprocess.TimeoutExpired as exc:
        raise MetricQueryError(
            host, f"{class_name} query timed out after {settings.query_timeout_seconds}s"
        ) from exc

    if result.returncode != 0:
        message = (result.stderr or "").strip().splitlines()
        raise MetricQueryError(
            host,
            f"{class_name} query failed with return code {result.returncode}"
            + (f": {message[0]}" if message else ""),
        )

    output = result.stdout.strip()
    if not output:
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise MetricQueryError(host, f"Could not parse {class_name} output as JSON") from exc

    # A single instance is serialised as an object, several as a list
    if isinstance(data, dict):
        return [data]
    return list(data)
