from typing import Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from admintools.config import get_settings
from admintools.errors import GenerationError
from admintools.services import password as password_service

router = APIRouter()


@router.get("/generate", summary="Generate a password")
async def generate_password(
    length: Optional[int] = Query(None, ge=1, le=1024),
    classes: str = Query(
        "lower,upper,digit,special",
        description="Comma separated character classes that must all appear",
    ),
    no_adjacent_repeat: bool = Query(False),
) -> Dict[str, str]:
    """
    Return a random password containing at least one character of every
    requested class.

    Invalid parameters give HTTP 422; a generator that runs out of attempts
    gives HTTP 500.
    """
    settings = get_settings()
    requested = [item for item in classes.split(",") if item.strip()]
    try:
        value = password_service.generate_password(
            length or settings.password_length,
            requested,
            no_adjacent_repeat=no_adjacent_repeat,
            max_attempts=settings.max_generation_attempts,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except GenerationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"password": value}


@router.get("/pin", summary="Generate a numeric PIN")
async def generate_pin(length: int = Query(4, ge=1, le=64)) -> Dict[str, str]:
    return {"pin": password_service.generate_pin(length)}
