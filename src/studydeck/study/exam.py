"""Exam question sampling."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

from studydeck.errors import ValidationError

T = TypeVar("T")


def sample_questions(pool: Sequence[T], count: int, seed: int | None = None) -> list[T]:
    """Draw up to *count* distinct questions uniformly at random.

    ``random.Random.shuffle`` is a Fisher–Yates shuffle, so every ordering of
    the pool is equally likely. Pass *seed* for a reproducible exam.
    """
    if count < 0:
        raise ValidationError(f"count must be >= 0, got {count}")
    shuffled = list(pool)
    random.Random(seed).shuffle(shuffled)
    return shuffled[:count]
