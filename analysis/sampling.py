"""Uniform-stride downsampling for fixed-width charts.

Picks existing values at evenly spaced indices instead of averaging bins,
so every output value was actually observed in the input.
"""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")

# Bars drawn for the sentence-length chart
DEFAULT_MAX_BARS = 20

# Shortest bar height, in percent, so tiny sentences stay visible
MIN_BAR_PERCENT = 8.0


def downsample(values: Sequence[T], max_count: int) -> list[T]:
    """Reduce a sequence to at most ``max_count`` elements.

    Args:
        values: Ordered values
        max_count: Maximum output length (must be positive)

    Returns:
        The values unchanged if short enough, else ``values[floor(i * step)]``
        for i in range(max_count) with ``step = len(values) / max_count``

    Raises:
        ValueError: If max_count is not positive
    """
    if max_count <= 0:
        raise ValueError(f"max_count must be positive, got {max_count}")
    if len(values) <= max_count:
        return list(values)
    step = len(values) / max_count
    return [values[math.floor(i * step)] for i in range(max_count)]


def bar_heights(lengths: Sequence[int], max_bars: int = DEFAULT_MAX_BARS) -> list[float]:
    """Sentence-length chart bars as percentages of the tallest sampled bar."""
    sampled = downsample(lengths, max_bars)
    if not sampled:
        return []
    tallest = max(sampled)
    heights = []
    for length in sampled:
        percent = (length / tallest) * 100 if tallest > 0 else 0.0
        heights.append(max(percent, MIN_BAR_PERCENT))
    return heights
