"""Character-bigram string similarity (Dice coefficient)."""

from __future__ import annotations

import math
from collections import Counter
from typing import Final

TITLE_MATCH_THRESHOLD: Final[float] = 0.85
AUTHOR_VARIANT_THRESHOLD: Final[float] = 0.6
TAG_VARIANT_THRESHOLD: Final[float] = 0.7


def _bigrams(value: str) -> Counter[str]:
    return Counter(value[index : index + 2] for index in range(len(value) - 1))


def similarity(a: str, b: str) -> float:
    """Return the case-insensitive Dice coefficient of ``a`` and ``b`` in ``[0, 1]``.

    Equal strings (after case folding) score ``1.0``. Otherwise a string shorter
    than two characters has no bigram and scores ``0.0``.
    """

    left = a.casefold()
    right = b.casefold()
    if left == right:
        return 1.0
    if len(left) < 2 or len(right) < 2:
        return 0.0

    left_bigrams = _bigrams(left)
    right_bigrams = _bigrams(right)
    shared = sum((left_bigrams & right_bigrams).values())
    total = sum(left_bigrams.values()) + sum(right_bigrams.values())
    score = 2 * shared / total
    if score >= 1.0:
        # distinct strings with identical bigram multisets, e.g. rotations
        return math.nextafter(1.0, 0.0)
    return score
