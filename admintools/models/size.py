from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SizeUnit(str, Enum):
    """Binary (1024-based) size units, smallest first."""

    KB = "KB"
    MB = "MB"
    GB = "GB"
    TB = "TB"

    @property
    def divisor(self) -> int:
        return 1024 ** (list(SizeUnit).index(self) + 1)


class SizeValue(BaseModel):
    """A byte count expressed as a rounded magnitude of one unit."""

    model_config = ConfigDict(frozen=True)

    raw_bytes: int = Field(
        ...,
        ge=0,
        description="Original byte count",
    )
    magnitude: float = Field(
        ...,
        ge=0,
        description="raw_bytes divided by the unit divisor, rounded to 2 places",
    )
    unit: SizeUnit = Field(
        ...,
        description="Unit the magnitude is expressed in",
    )

    def __str__(self) -> str:
        return f"{self.magnitude:.2f} {self.unit.value}"
