"""
Ramp Profile
============
Trapezoidal blend ratio used to fade parameter adjustments in and out.

    ratio
    1.0 |        ___________
        |       /           \\
        |      /             \\
    0.0 |_____/               \\_____
          start max_start max_end end
"""
from __future__ import annotations

from typing import Iterator


def frame_range(start: float, end: float) -> Iterator[float]:
    """Frames ``start, start + 1, ...`` up to and including ``end``."""
    f = float(start)
    while f <= end:
        yield f
        f += 1.0


def ramp_ratio(f: float, start: float, max_start: float, max_end: float, end: float) -> float:
    """
    Blend ratio in [0, 1] at frame ``f``.

    Args:
        f: Frame to evaluate.
        start: First frame of the rise (ratio 0).
        max_start: First frame of the plateau (ratio 1).
        max_end: Last frame of the plateau (ratio 1).
        end: Last frame of the fall (ratio 0).

    Returns:
        Linear rise on (start, max_start), 1.0 on [max_start, max_end],
        linear fall on (max_end, end) and 0.0 anywhere else. A zero-length
        rise or fall collapses into an instantaneous step.
    """
    if start < f < max_start and max_start > start:
        return (f - start) / (max_start - start)
    if max_end < f < end and end > max_end:
        return (end - f) / (end - max_end)
    if max_start <= f <= max_end:
        return 1.0
    return 0.0


def is_ramping(f: float, start: float, max_start: float, max_end: float, end: float) -> bool:
    """True when ``f`` lies strictly inside the rise or the fall."""
    return start < f < max_start or max_end < f < end
