from typing import Any, List

from pydantic import BaseModel, Field


class CollectionResult(BaseModel):
    """Outcome of one sweep over a target list."""

    records: List[Any] = Field(
        default_factory=list,
        description="Records of reachable targets, in target order",
    )
    unreachable: List[str] = Field(
        default_factory=list,
        description="Targets skipped because the probe failed",
    )
    failed: List[str] = Field(
        default_factory=list,
        description="Targets skipped because the metric query raised",
    )

    @property
    def skipped_count(self) -> int:
        return len(self.unreachable) + len(self.failed)
