from __future__ import annotations

from typing import Sequence

import numpy as np

from .color import HSL, rgb_to_hsl
from .pipeline import render


def loss(
    values: Sequence[float],
    target: Sequence[float],
    target_hsl: HSL | None = None,
) -> float:
    """|Δr|+|Δg|+|Δb| + |Δh|+|Δs|+|Δl| between the filtered black and target.

    RGB deltas are on 0–255, HSL deltas on 0–100, summed unweighted.
    ``max_loss`` thresholds are expressed on this same scale.
    """
    if target_hsl is None:
        target_hsl = rgb_to_hsl(target)
    result = render(values)
    result_hsl = rgb_to_hsl(result)
    rgb_delta = np.abs(result - np.asarray(target, dtype=np.float64)).sum()
    hsl_delta = np.abs(np.subtract(result_hsl, target_hsl)).sum()
    return float(rgb_delta + hsl_delta)


__all__ = ["loss"]
