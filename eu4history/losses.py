"""
Decoding of the 21 entry war losses vector.

Losses are written as signed 32 bit integers. Values that overflowed past
LOSSES_MAX wrap into the negative range and are unwrapped here.
"""

from collections.abc import Iterable

from .config import LOSSES_CATEGORIES, LOSSES_MAX

LOSSES_MIN = -LOSSES_MAX


def decode_loss(x: int) -> int:
    """decode(x) == x for x >= 0, x + 2 * LOSSES_MAX in [-LOSSES_MAX, -1], abs(x) below."""
    if x >= 0:
        return x
    if x >= LOSSES_MIN:
        return x + 2 * LOSSES_MAX
    return abs(x)


def create_losses(data: Iterable[int]) -> list[int]:
    """Decode a raw losses vector into a fixed-width list of non-negative counts."""
    values = [0] * len(LOSSES_CATEGORIES)
    for i, x in enumerate(data):
        if i >= len(values):
            break
        values[i] = decode_loss(x)
    return values


def add_losses(total: list[int], losses: Iterable[int]) -> None:
    for i, x in enumerate(losses):
        total[i] += x

