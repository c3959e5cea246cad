from typing import List, Optional
from pydantic import BaseModel, Field
import os
from functools import lru_cache

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _split_list(raw: str) -> Optional[List[str]]:
    return [item.strip() for item in raw.split(",") if item.strip()] or None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


class Settings(BaseModel):
    # Hosts used when a command is called without an explicit target list
    targets: Optional[List[str]] = Field(
        default=None,
        description="Default list of hostnames or IPs to query",
    )

    # Probe + metric queries
    ping_timeout_seconds: int = Field(
        default=1,
        ge=1,
        description="Timeout for the reachability ping in seconds",
    )
    query_timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="Timeout for a single PowerShell/CIM query in seconds",
    )
    skip_probe: bool = Field(
        default=False,
        description="Query hosts without pinging them first (ICMP blocked networks)",
    )

    # Password generation
    password_length: int = Field(
        default=12,
        ge=1,
        description="Default length for generated passwords",
    )
    max_generation_attempts: int = Field(
        default=10000,
        ge=1,
        description="Number of whole-string redraws before generation gives up",
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level for the admintools logger",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            targets=_split_list(os.getenv("ADMIN_TARGETS", "")),
            ping_timeout_seconds=_int_env("ADMIN_PING_TIMEOUT", 1),
            query_timeout_seconds=_int_env("ADMIN_QUERY_TIMEOUT", 30),
            skip_probe=os.getenv("ADMIN_SKIP_PROBE", "").strip().lower() in _TRUE_VALUES,
            password_length=_int_env("ADMIN_PASSWORD_LENGTH", 12),
            max_generation_attempts=_int_env("ADMIN_MAX_ATTEMPTS", 10000),
            log_level=os.getenv("ADMIN_LOG_LEVEL", "WARNING"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
