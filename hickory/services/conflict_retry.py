# hickory/services/conflict_retry.py

from typing import Callable, TypeVar

import structlog

from hickory.core.exceptions import VersionConflictError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def retry_on_version_conflict(
    fetch_version: Callable[[], bytes],
    mutate: Callable[[bytes], T],
    *,
    attempts: int = 3,
) -> T:
    """Run ``mutate`` with a freshly fetched row version, retrying on conflict.

    Each attempt calls ``fetch_version`` first, so a resubmission never reuses
    the version that just lost. Other errors propagate on the first attempt.
    When every attempt conflicts the last VersionConflictError is re-raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        version = fetch_version()
        try:
            return mutate(version)
        except VersionConflictError:
            if attempt == attempts:
                raise
            logger.info("version_conflict_retry", attempt=attempt, attempts=attempts)
