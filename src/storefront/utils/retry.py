"""Bounded retry for transactions that lose an optimistic-locking race.

Product stock and Order payment state are guarded by aggregate version
checks. When two writers race, the loser's unit of work is rolled back
with ``ExpectedVersionError``; re-running the whole operation re-reads
fresh state, so business rules (stock, already-paid) are re-evaluated.
"""

from collections.abc import Callable
from typing import TypeVar

import structlog
from protean.exceptions import ExpectedVersionError

from storefront import config
from storefront.errors import Conflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def run_with_conflict_retry(operation: Callable[[], T], *, description: str, max_retries: int | None = None) -> T:
    """Run ``operation``, re-running it on version conflicts.

    Raises ``Conflict`` once ``max_retries`` re-runs have also conflicted.
    """
    retries = config.max_conflict_retries() if max_retries is None else max_retries
    attempts = retries + 1

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except ExpectedVersionError as exc:
            logger.warning(
                "Version conflict",
                operation=description,
                attempt=attempt,
                max_attempts=attempts,
                error=str(exc),
            )

    raise Conflict({"transaction": [f"{description} kept conflicting with concurrent updates; retry the request"]})
