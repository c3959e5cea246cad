import logging
import re
import socket
import subprocess
import sys
from typing import List, Optional

from admintools.config import get_settings
from admintools.models.probe import ProbeResult

logger = logging.getLogger(__name__)

_LOCAL_ALIASES = {"localhost", "127.0.0.1", "::1", "."}

# Linux/macOS: "time=2.34 ms"; Windows: "time=2ms" or "time<1ms" (also "Zeit=")
_LATENCY_PATTERN = re.compile(r"(?:time|zeit)[=<]\s*([\d.,]+)\s*ms", re.IGNORECASE)


def is_local(host: str) -> bool:
    """True if host names the machine we are running on."""
    name = host.strip().lower()
    if name in _LOCAL_ALIASES:
        return True
    own = socket.gethostname().lower()
    return name == own or name == own.split(".", 1)[0]


def _ping_command(host: str, count: int, timeout_seconds: int) -> List[str]:
    if sys.platform == "win32":
        # -w expects milliseconds on Windows
        return ["ping", "-n", str(count), "-w", str(timeout_seconds * 1000), host]
    return ["ping", "-c", str(count), "-W", str(timeout_seconds), host]


def ping_host(host: str, count: int = 1, timeout_seconds: int = 1) -> ProbeResult:
    """
    Ping a single host and return a ProbeResult.

    In case of failure, is_up is False and latency_ms is None. A missing ping
    binary is reported through the error field instead of raising.
    """
    try:
        result = subprocess.run(
            _ping_command(host, count, timeout_seconds),
            check=False,
            capture_output=True,
            text=True,
            timeout=count * timeout_seconds + 5,
        )
    except FileNotFoundError:
        return ProbeResult(
            host=host,
            is_up=False,
            latency_ms=None,
            error="ping binary not found on host system",
        )
    except subprocess.TimeoutExpired:
        return ProbeResult(
            host=host,
            is_up=False,
            latency_ms=None,
            error="ping did not finish in time",
        )
    except OSError as exc:
        return ProbeResult(
            host=host,
            is_up=False,
            latency_ms=None,
            error=f"ping could not be started: {exc}",
        )

    # Windows ping returns 0 for "Destination host unreachable", so check TTL too
    if result.returncode != 0 or (sys.platform == "win32" and "TTL=" not in result.stdout.upper()):
        return ProbeResult(
            host=host,
            is_up=False,
            latency_ms=None,
            error=f"ping failed with return code {result.returncode}",
        )

    latency_ms: Optional[float] = None
    match = _LATENCY_PATTERN.search(result.stdout)
    if match:
        try:
            latency_ms = float(match.group(1).replace(",", "."))
        except ValueError:
            latency_ms = None

    return ProbeResult(
        host=host,
        is_up=True,
        latency_ms=latency_ms,
        error=None,
    )


def is_reachable(host: str) -> bool:
    """Connectivity pre-check used before querying a target."""
    if is_local(host):
        return True
    settings = get_settings()
    if settings.skip_probe:
        return True
    status = ping_host(host, timeout_seconds=settings.ping_timeout_seconds)
    if not status.is_up:
        logger.debug("%s is not reachable: %s", host, status.error)
    return status.is_up
