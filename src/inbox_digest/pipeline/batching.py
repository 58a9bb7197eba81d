from __future__ import annotations

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def partition(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into contiguous, order-preserving chunks of at most `size`."""
    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    seq = list(items)
    return [seq[i : i + size] for i in range(0, len(seq), size)]
