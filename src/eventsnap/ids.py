"""Public event identifiers: ``evt_<base36 millis>_<5 base36 chars>``."""

import logging
import random
import secrets
import string
from collections.abc import Callable
from datetime import UTC, datetime

from eventsnap.errors import GenerationExhausted

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
RANDOM_PART_LENGTH = 5
MAX_ID_ATTEMPTS = 5


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_event_id(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Build a new identifier. Performs no I/O; callers check uniqueness."""
    now = now or datetime.now(UTC)
    millis = int(now.timestamp() * 1000)
    randint = (rng or secrets.SystemRandom()).randrange(36**RANDOM_PART_LENGTH)
    suffix = to_base36(randint).rjust(RANDOM_PART_LENGTH, "0")
    return f"evt_{to_base36(millis)}_{suffix}"


def allocate_event_id(exists: Callable[[str], bool], attempts: int = MAX_ID_ATTEMPTS) -> str:
    """Generate identifiers until ``exists`` reports a free one.

    Raises:
        GenerationExhausted: every attempt collided with an existing id.
    """
    for attempt in range(1, attempts + 1):
        candidate = generate_event_id()
        if not exists(candidate):
            return candidate
        logger.warning("Event id %s already taken (attempt %d/%d)", candidate, attempt, attempts)
    raise GenerationExhausted(attempts)
