from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

BULK_RETELL_STRIDE = 5
FULL_RATIO = 100


def effective_ratio(country_ratio: Optional[int], global_ratio: Optional[int]) -> int:
    """Country ratio when configured, otherwise the global one, clamped to 0..100."""
    value = country_ratio if country_ratio is not None else global_ratio
    if value is None:
        return 0
    return max(0, min(FULL_RATIO, int(value)))


def bernoulli_pick(ratio: int, rng: Optional[random.Random] = None) -> bool:
    generator = rng or random
    return generator.random() * 100 < ratio


def stride_pick(position: int, stride: int = BULK_RETELL_STRIDE) -> bool:
    """True for every ``stride``-th item, ``position`` counted from 1."""
    return stride > 0 and position > 0 and position % stride == 0


def apply_cap(items: Sequence[T], cap: int) -> Tuple[List[T], int]:
    kept = list(items[: max(0, cap)])
    return kept, len(items) - len(kept)


__all__ = [
    "BULK_RETELL_STRIDE",
    "FULL_RATIO",
    "apply_cap",
    "bernoulli_pick",
    "effective_ratio",
    "stride_pick",
]
