"""Run-length coding of 16-bit sample sequences."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import groupby

MAX_RUN = 0xFFFF


def encode(data: Iterable[int]) -> list[tuple[int, int]]:
    """Encode values as (value, count) pairs with counts capped at 65535."""
    encoded: list[tuple[int, int]] = []
    for value, group in groupby(int(v) for v in data):
        run = sum(1 for _ in group)
        while run > MAX_RUN:
            encoded.append((value, MAX_RUN))
            run -= MAX_RUN
        encoded.append((value, run))
    return encoded


def decode(encoded: Iterable[tuple[int, int]]) -> list[int]:
    """Expand (value, count) pairs back into the value sequence."""
    decoded: list[int] = []
    for value, count in encoded:
        decoded.extend([value] * count)
    return decoded