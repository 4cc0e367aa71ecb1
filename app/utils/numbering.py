"""
Reference number allocation shared by certificate requests and incidents
"""
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def allocate_unique_number(
    generate: Callable[[], str],
    exists: Callable[[str], bool],
    max_attempts: int,
    label: str = "reference number",
) -> str:
    """
    Draw candidates from ``generate`` until one is not taken.

    Gives up after ``max_attempts`` and returns the last candidate; two
    writers racing on the same number can still both store it.
    """
    candidate = generate()
    for _ in range(max_attempts):
        if not exists(candidate):
            return candidate
        candidate = generate()
    logger.warning("%s collisions exhausted retries; accepting %s", label.capitalize(), candidate)
    return candidate
