from __future__ import annotations

import math

import pytest

from inbox_digest.pipeline.batching import partition


@pytest.mark.parametrize("n", [0, 1, 4, 5, 6, 23])
@pytest.mark.parametrize("size", [1, 2, 5, 50])
def test_partition_preserves_order_and_bounds(n: int, size: int) -> None:
    items = list(range(n))
    batches = partition(items, size)

    assert [x for b in batches for x in b] == items
    assert all(1 <= len(b) <= size for b in batches)
    assert len(batches) == math.ceil(n / size)


def test_partition_last_batch_may_be_shorter() -> None:
    assert partition("abcde", 2) == [["a", "b"], ["c", "d"], ["e"]]


@pytest.mark.parametrize("size", [0, -3])
def test_partition_rejects_non_positive_size(size: int) -> None:
    with pytest.raises(ValueError):
        partition([1, 2], size)
