from typing import Optional

from fastapi import APIRouter, Query

from admintools.api.hosts import run_collection, split_targets
from admintools.models.collection import CollectionResult
from admintools.services import software_inventory

router = APIRouter()


@router.get("/", response_model=CollectionResult, summary="Installed software")
def installed_software(
    targets: Optional[str] = Query(None, description="Comma separated hosts"),
    include_updates: bool = Query(False, description="Also list hotfixes and update packages"),
    name: Optional[str] = Query(None, description="Wildcard filter on the display name"),
) -> CollectionResult:
    """
    Return the uninstall-key entries of every reachable host, sorted by name.
    """
    return run_collection(
        software_inventory.get_installed_software,
        split_targets(targets),
        include_updates=include_updates,
        name_filter=name,
    )
