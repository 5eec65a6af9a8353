"""
Reservation Identifier Generator

Reservation numbers look like ``RES-1718035200123-42``: the creation time
in Unix milliseconds and a random number from 0 to 999. The format is
visible to users and stored, so it cannot change; uniqueness is enforced
by the store and collisions are retried here.
"""

import logging
import re
import secrets
import time
from typing import Callable, Optional, TypeVar

from apps.bookings.domain.exceptions import DuplicateReferenceError, ReferenceCollisionError

logger = logging.getLogger(__name__)

T = TypeVar('T')

REFERENCE_PREFIX = 'RES'
REFERENCE_RE = re.compile(r'^RES-(?P<timestamp>\d+)-(?P<suffix>\d{1,3})$')
DEFAULT_MAX_ATTEMPTS = 5


class ReservationReferenceGenerator:
    """Mints ``RES-<ms>-<0..999>`` strings; clock and randomness are injectable"""

    def __init__(
        self,
        clock_ms: Optional[Callable[[], int]] = None,
        random_suffix: Optional[Callable[[], int]] = None,
    ):
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._random_suffix = random_suffix or (lambda: secrets.randbelow(1000))

    def generate(self) -> str:
        return f"{REFERENCE_PREFIX}-{self._clock_ms()}-{self._random_suffix()}"


def is_valid_reference(value: str) -> bool:
    return bool(REFERENCE_RE.match(value or ''))


def issue_unique_reference(
    generator: ReservationReferenceGenerator,
    persist: Callable[[str], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> T:
    """
    Persist with a fresh reference, retrying on collision

    ``persist`` receives a candidate reference and must raise
    DuplicateReferenceError when the store already holds it (and leave no
    partial write behind). Its result is returned on the first success.

    Raises:
        ReferenceCollisionError: every attempt collided
    """
    for attempt in range(1, max_attempts + 1):
        reference = generator.generate()
        try:
            return persist(reference)
        except DuplicateReferenceError:
            logger.warning(
                "Reservation number %s already taken (attempt %d/%d)",
                reference, attempt, max_attempts,
            )

    raise ReferenceCollisionError(
        f"Could not issue a unique reservation number after {max_attempts} attempts."
    )
