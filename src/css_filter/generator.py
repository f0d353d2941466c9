"""Public entry points: colour in, CSS ``filter`` declaration out.

``generate_filter`` runs one full solve (parse → SPSA → format).
``generate_filter_with_retry`` repeats independent solves until the loss
drops to ``max_loss`` or the attempt budget runs out, keeping the best.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from .color import RGB, ColorInput, parse_color
from .pipeline import HUE_UNITS_TO_DEG, FilterParams, Param
from .spsa import RandomSource, solve

log = logging.getLogger(__name__)

FORCE_BLACK_PREFIX = "brightness(0) saturate(100%) "

DEFAULT_MAX_LOSS = 5.0
DEFAULT_MAX_ATTEMPTS = 10


@dataclass(frozen=True)
class FilterOptions:
    # prepend FORCE_BLACK_PREFIX so non-black sources are flattened to black first
    force_black: bool = False
    max_loss: float = DEFAULT_MAX_LOSS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if not math.isfinite(self.max_attempts):
            raise ValueError(f"max_attempts must be finite, got {self.max_attempts}")


@dataclass(frozen=True)
class FilterResult:
    filter: str
    filter_raw: str
    loss: float
    rgb: RGB
    values: FilterParams


@dataclass(frozen=True)
class FilterResultWithRetry(FilterResult):
    attempts: int


def _round(x: float) -> int:
    # half rounds towards +inf, unlike Python's banker's rounding
    return math.floor(x + 0.5)


def format_filter(values: Sequence[float]) -> str:
    def fmt(p: Param, multiplier: float = 1.0) -> int:
        return _round(values[p] * multiplier)

    return (
        f"invert({fmt(Param.INVERT)}%) "
        f"sepia({fmt(Param.SEPIA)}%) "
        f"saturate({fmt(Param.SATURATE)}%) "
        f"hue-rotate({fmt(Param.HUE_ROTATE, HUE_UNITS_TO_DEG)}deg) "
        f"brightness({fmt(Param.BRIGHTNESS)}%) "
        f"contrast({fmt(Param.CONTRAST)}%)"
    )


def generate_filter(
    color: ColorInput,
    options: FilterOptions | None = None,
    *,
    rng: RandomSource | None = None,
) -> FilterResult:
    """Find a filter that turns black into ``color``.

    Raises InvalidColorFormat for strings that are neither hex nor rgb().
    """
    options = options or FilterOptions()
    rgb = parse_color(color)

    result = solve(rgb, rng)
    base = format_filter(result.values)
    filter_raw = FORCE_BLACK_PREFIX + base if options.force_black else base

    return FilterResult(
        filter=f"filter: {filter_raw};",
        filter_raw=filter_raw,
        loss=result.loss,
        rgb=rgb,
        values=result.values,
    )


def generate_filter_with_retry(
    color: ColorInput,
    options: FilterOptions | None = None,
    *,
    rng: RandomSource | None = None,
) -> FilterResultWithRetry:
    options = options or FilterOptions()
    max_attempts = max(1, math.ceil(options.max_attempts))

    best = generate_filter(color, options, rng=rng)
    attempts = 1
    while attempts < max_attempts and best.loss > options.max_loss:
        attempts += 1
        result = generate_filter(color, options, rng=rng)
        log.debug("attempt %d: loss=%.3f (best %.3f)", attempts, result.loss, best.loss)
        if result.loss < best.loss:
            best = result

    log.info("solved %s in %d attempt(s), loss=%.3f", best.rgb, attempts, best.loss)
    return FilterResultWithRetry(
        filter=best.filter,
        filter_raw=best.filter_raw,
        loss=best.loss,
        rgb=best.rgb,
        values=best.values,
        attempts=attempts,
    )


__all__ = [
    "FORCE_BLACK_PREFIX",
    "DEFAULT_MAX_LOSS",
    "DEFAULT_MAX_ATTEMPTS",
    "FilterOptions",
    "FilterResult",
    "FilterResultWithRetry",
    "format_filter",
    "generate_filter",
    "generate_filter_with_retry",
]
