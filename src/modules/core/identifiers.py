"""Human-legible unique identifiers (tracking and manifest numbers).

Format: ``{PREFIX}-YYYYMMDD-XXXXXXXX`` where the suffix is 4 random bytes
in upper-case hex.  Collisions are checked against the persistence layer
and retried a bounded number of times.
"""

from __future__ import annotations

import secrets
from typing import Callable

import structlog
from django.utils import timezone

logger = structlog.get_logger(__name__)

NUMBER_MAX_RETRIES = 5


def generate_number(prefix: str) -> str:
    now = timezone.now()
    suffix = secrets.token_hex(4).upper()
    return f"{prefix}-{now:%Y%m%d}-{suffix}"


def generate_unique_number(
    prefix: str,
    exists: Callable[[str], bool],
    max_retries: int = NUMBER_MAX_RETRIES,
) -> str:
    """Return a number for *prefix* that ``exists`` reports as unused.

    Raises:
        RuntimeError: every candidate collided.
    """
    for attempt in range(max_retries):
        candidate = generate_number(prefix)
        if not exists(candidate):
            return candidate
        logger.warning(
            "identifier.collision", prefix=prefix, candidate=candidate, attempt=attempt
        )
    raise RuntimeError(
        f"Failed to generate unique {prefix} number after {max_retries} attempts"
    )
