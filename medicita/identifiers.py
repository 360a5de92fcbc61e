"""Identifier generation for clinic records."""

from __future__ import annotations

import random
import time
from typing import Callable

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_RANDOM_LENGTH = 6
_TIME_LENGTH = 4


def _fraction_to_base36(fraction: float, length: int) -> str:
    """Expand the fractional part of *fraction* into base-36 digits."""

    digits = []
    remainder = fraction - int(fraction)
    while remainder > 0 and len(digits) < length:
        remainder *= 36
        digit = int(remainder)
        digits.append(_BASE36_DIGITS[digit])
        remainder -= digit
    return "".join(digits)


def generate_id(
    prefix: str,
    *,
    rng: Callable[[], float] = random.random,
    clock: Callable[[], float] = time.time,
) -> str:
    """Return ``prefix_<random><time>`` such as ``doc_k3f9a21234``.

    The random part is up to six base-36 digits of a random fraction and the
    time part is the last four digits of the epoch in milliseconds. Ids are
    unlikely to collide inside one store but carry no global guarantee.
    """

    if not prefix:
        raise ValueError("prefix must be a non-empty string")
    random_part = _fraction_to_base36(rng(), _RANDOM_LENGTH)
    millis = str(int(clock() * 1000))
    return f"{prefix}_{random_part}{millis[-_TIME_LENGTH:]}"
