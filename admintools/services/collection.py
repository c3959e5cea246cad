import logging
from typing import Callable, Iterable, Optional, TypeVar

from admintools.config import get_settings
from admintools.models.collection import CollectionResult

logger = logging.getLogger(__name__)

M = TypeVar("M")
R = TypeVar("R")


def collect(
    targets: Iterable[str],
    probe: Callable[[str], bool],
    query: Callable[[str], M],
    build: Callable[[str, M], R],
) -> CollectionResult:
    """
    Probe, query and build one record per target, sequentially.

    Output order follows target order. Targets whose probe returns False or
    raises are listed in ``unreachable``; targets whose query or build raises
    are listed in ``failed``. Both are logged at DEBUG level and neither
    aborts the sweep.
    """
    result = CollectionResult()

    for raw_target in targets:
        target = raw_target.strip()
        if not target:
            continue

        try:
            reachable = probe(target)
        except Exception as exc:
            logger.debug("Skipping %s: reachability check raised %s: %s", target, type(exc).__name__, exc)
            reachable = False

        if not reachable:
            logger.debug("Skipping %s: probe failed", target)
            result.unreachable.append(target)
            continue

        try:
            metric = query(target)
            record = build(target, metric)
        except Exception as exc:
            logger.debug("Skipping %s: %s: %s", target, type(exc).__name__, exc)
            result.failed.append(target)
            continue

        result.records.append(record)

    logger.info(
        "Collected %d record(s), %d unreachable, %d failed",
        len(result.records),
        len(result.unreachable),
        len(result.failed),
    )
    return result


def resolve_targets(targets: Optional[Iterable[str]] = None) -> list:
    """
    Explicit targets win; otherwise Settings.targets; otherwise the local host.
    """
    if targets:
        return [t.strip() for t in targets if t and t.strip()]
    settings = get_settings()
    return list(settings.targets or ["localhost"])
