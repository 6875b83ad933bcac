"""Option shuffling for answer presentation."""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


def shuffle_options(options: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a uniformly random permutation of ``options`` (Fisher-Yates).

    The input is never modified. The shuffler keeps no state: callers that
    need a stable presentation must cache the result per question.
    """
    rng = rng or random
    shuffled = list(options)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
