from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from admintools.errors import MetricQueryError
from admintools.models.collection import CollectionResult
from admintools.models.size import SizeUnit
from admintools.services import byte_size, disk_monitor, memory_monitor, os_monitor, uptime_monitor

router = APIRouter()


def split_targets(targets: Optional[str]) -> Optional[List[str]]:
    if not targets:
        return None
    return [t.strip() for t in targets.split(",") if t.strip()] or None


def parse_unit(unit: Optional[str]) -> Optional[SizeUnit]:
    """Case-insensitive unit name, the same rules as /size/format."""
    if unit is None:
        return None
    try:
        return byte_size.parse_size_unit(unit)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def run_collection(func, *args, **kwargs) -> CollectionResult:
    # Per-host failures are already absorbed by the collection loop; anything
    # reaching this point means the provider itself is unusable
    try:
        return func(*args, **kwargs)
    except MetricQueryError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


# Plain def handlers: ping and PowerShell block, so FastAPI runs them in its threadpool
@router.get("/memory", response_model=CollectionResult, summary="Memory per host")
def memory(
    targets: Optional[str] = Query(None, description="Comma separated hosts"),
    unit: Optional[str] = Query(None, description="KB, MB, GB or TB, any case"),
) -> CollectionResult:
    """
    Return total/free memory for every reachable host.

    Hosts default to Settings.targets (env var ADMIN_TARGETS).
    """
    return run_collection(memory_monitor.get_memory_status, split_targets(targets), parse_unit(unit))


@router.get("/disk", response_model=CollectionResult, summary="Fixed drives per host")
def disk(
    targets: Optional[str] = Query(None, description="Comma separated hosts"),
    unit: Optional[str] = Query(None, description="KB, MB, GB or TB, any case"),
) -> CollectionResult:
    return run_collection(disk_monitor.get_disk_status, split_targets(targets), parse_unit(unit))


@router.get("/os", response_model=CollectionResult, summary="OS version per host")
def operating_system(
    targets: Optional[str] = Query(None, description="Comma separated hosts"),
) -> CollectionResult:
    return run_collection(os_monitor.get_os_info, split_targets(targets))


@router.get("/uptime", response_model=CollectionResult, summary="Uptime per host")
def uptime(
    targets: Optional[str] = Query(None, description="Comma separated hosts"),
) -> CollectionResult:
    return run_collection(uptime_monitor.get_uptime, split_targets(targets))
