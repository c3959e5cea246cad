from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from admintools.models.size import SizeValue


class MemoryStatus(BaseModel):
    """Physical memory snapshot of one host."""

    host: str = Field(..., description="Target the values were read from")
    total_bytes: int = Field(..., ge=0, description="Installed physical memory")
    free_bytes: int = Field(..., ge=0, description="Available physical memory")
    total: SizeValue = Field(..., description="Installed memory, formatted")
    free: SizeValue = Field(..., description="Available memory, formatted")
    free_memory_gb: float = Field(
        ...,
        ge=0,
        description="Available memory in GB, rounded to 2 places",
    )
    used_memory_percent: float = Field(
        ...,
        ge=0,
        le=100,
        description="Share of physical memory in use",
    )


class DiskStatus(BaseModel):
    """Capacity of a single fixed drive on one host."""

    host: str = Field(..., description="Target the values were read from")
    drive: str = Field(..., description="Drive letter or mount point, e.g. C: or /")
    volume_name: Optional[str] = Field(None, description="Volume label, if any")
    size_bytes: int = Field(..., ge=0)
    free_bytes: int = Field(..., ge=0)
    size: SizeValue
    free: SizeValue
    free_percent: float = Field(
        ...,
        ge=0,
        le=100,
        description="Free space in percent of the drive size",
    )


class OperatingSystemInfo(BaseModel):
    host: str
    name: str = Field(..., description="OS caption, e.g. Microsoft Windows 11 Pro")
    version: str = Field(..., description="Kernel / OS version string")
    build_number: Optional[str] = Field(None, description="OS build number")
    architecture: Optional[str] = Field(None, description="e.g. 64-bit, x86_64")


class UptimeStatus(BaseModel):
    host: str
    last_boot: datetime = Field(..., description="Time of the last boot")
    uptime_seconds: int = Field(
        ...,
        ge=0,
        description="Number of seconds since the system was booted",
    )
    uptime: str = Field(..., description="Uptime as '<d>d <h>h <m>m'")


class InstalledSoftware(BaseModel):
    """One entry of the registry uninstall keys."""

    host: str
    name: str = Field(..., description="DisplayName value")
    version: Optional[str] = None
    publisher: Optional[str] = None
    install_date: Optional[str] = Field(
        None,
        description="InstallDate as stored, usually YYYYMMDD",
    )
    uninstall_string: Optional[str] = None
    is_update: bool = Field(
        False,
        description="True for hotfixes and update packages",
    )
    registry_path: str = Field(..., description="Uninstall subkey the entry came from")
