"""
Best-effort side actions.

Used where a recovery step (e.g. telling the operator chat that a
verification failed) must never turn into a second failure: the outcome is
captured in a BestEffortResult and logged, not raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BestEffortResult:
    succeeded: bool
    value: Any = None
    error: Optional[BaseException] = None


async def run_best_effort(
    action: Callable[[], Awaitable[Any]],
    description: str,
) -> BestEffortResult:
    """Await ``action()``; on failure log it and return the captured error."""
    try:
        value = await action()
    except Exception as exc:
        logger.error(f"Best-effort action failed ({description}): {exc}")
        return BestEffortResult(succeeded=False, error=exc)
    return BestEffortResult(succeeded=True, value=value)
