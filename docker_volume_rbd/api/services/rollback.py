"""
Best-effort rollback of partially completed operations.

Cleanup failures never replace the error that triggered the rollback; they
are logged and returned as CleanupResult records so callers can report them.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from docker_volume_rbd.exceptions import VolumePluginError

logger = logging.getLogger(__name__)

CleanupStep = Tuple[str, Callable[[], None]]


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of one rollback step."""

    step: str
    ok: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def run_cleanup(steps: Sequence[CleanupStep]) -> List[CleanupResult]:
    """
    Run every cleanup step in order, continuing past failures.

    Args:
        steps: (step name, callable) pairs, already in reverse acquisition order

    Returns:
        One CleanupResult per step
    """
    results: List[CleanupResult] = []
    for step, action in steps:
        try:
            action()
        except Exception as e:
            logger.warning("Cleanup step %s failed: %s", step, e)
            results.append(CleanupResult(step=step, ok=False, error=str(e)))
        else:
            logger.debug("Cleanup step %s succeeded", step)
            results.append(CleanupResult(step=step, ok=True))
    return results


def rollback(exc: BaseException, steps: Sequence[CleanupStep]) -> List[CleanupResult]:
    """Run cleanup for ``exc`` and attach the outcomes to it when possible."""
    results = run_cleanup(steps)
    if isinstance(exc, VolumePluginError):
        exc.cleanup = results
    return results
