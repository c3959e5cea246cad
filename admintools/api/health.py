from typing import Dict

from fastapi import APIRouter

router = APIRouter()


@router.get("/", summary="Liveness check")
async def health() -> Dict[str, str]:
    return {"status": "ok"}
