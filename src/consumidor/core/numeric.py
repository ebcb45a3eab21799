"""Small numeric helpers shared by the scoring engines.

Every ratio in reputation and ranking code goes through ``safe_ratio`` so a
zero denominator yields 0.0 instead of ZeroDivisionError, NaN or inf.
Rounding uses half-up semantics (2.5 -> 3) rather than Python's banker's
rounding, so published scores do not flip between neighbours on .5 ties.
"""

from __future__ import annotations

import math


def safe_ratio(numerator: float, denominator: float) -> float:
    """Return numerator / denominator, or 0.0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties going towards +inf."""
    return int(math.floor(value + 0.5))


__all__ = ["safe_ratio", "round_half_up"]
