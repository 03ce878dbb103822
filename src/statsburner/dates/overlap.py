"""Pairwise overlap counting over resolved date tokens."""

from __future__ import annotations

from typing import Sequence

SINGLE_DATE_LENGTH = 10


def is_range(token: str) -> bool:
    return len(token) > SINGLE_DATE_LENGTH


def detect_overlaps(tokens: Sequence[str]) -> int:
    """Count overlaps between every ordered pair of distinct tokens.

    A range token owns the open interval between its endpoints; any endpoint
    or single date of another token strictly inside it is one overlap. A
    single date token only matches another token by substring.
    """

    detected = 0
    for i, current in enumerate(tokens):
        for j, other in enumerate(tokens):
            if i == j:
                continue

            if is_range(current):
                start, finish = current.split(",", 1)
                candidates = other.split(",") if is_range(other) else [other]
                detected += sum(1 for value in candidates if start < value < finish)
            elif other in current:
                detected += 1

    return detected
