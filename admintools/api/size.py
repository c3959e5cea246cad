from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from admintools.models.size import SizeValue
from admintools.services import byte_size

router = APIRouter()


@router.get("/format", response_model=SizeValue, summary="Format a byte count")
async def format_size(
    raw_bytes: int = Query(..., ge=0, alias="bytes", description="Raw byte count"),
    unit: Optional[str] = Query(None, description="KB, MB, GB or TB; picked automatically if omitted"),
) -> SizeValue:
    """
    Convert a byte count into a rounded magnitude and unit.
    """
    try:
        return byte_size.format_byte_length(raw_bytes, unit)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
