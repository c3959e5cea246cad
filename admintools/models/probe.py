from typing import Optional

from pydantic import BaseModel, Field


class ProbeResult(BaseModel):
    """Reachability of a single target (ping probe)."""

    host: str = Field(
        ...,
        description="Hostname or IP of the target, e.g. srv01 or 192.168.178.10",
    )
    is_up: bool = Field(
        ...,
        description="True if the host responded to a ping probe.",
    )
    latency_ms: Optional[float] = Field(
        None,
        ge=0.0,
        description="Roundtrip time in milliseconds, if measurable.",
    )
    error: Optional[str] = Field(
        None,
        description="Optional error message if the host is not reachable or the probe failed.",
    )
