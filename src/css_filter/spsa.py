# spsa.py – Simultaneous Perturbation Stochastic Approximation over the
# six filter amounts. Two phases: a wide search from a neutral start, then
# a narrow refinement whose step sizes scale with the wide-phase loss.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple, Protocol, Sequence

import numpy as np

from .color import HSL, rgb_to_hsl
from .loss import loss
from .pipeline import FilterParams, Param, fix_values

log = logging.getLogger(__name__)

N_PARAMS = len(Param)


class RandomSource(Protocol):
    """Anything with numpy's ``Generator.random(size)`` signature."""

    def random(self, size: int) -> np.ndarray: ...


class SolverResult(NamedTuple):
    values: FilterParams
    loss: float


@dataclass(frozen=True)
class PhaseConfig:
    A: float
    a: tuple[float, ...]
    c: float
    iterations: int
    alpha: float = 1.0
    gamma: float = 1.0 / 6.0
    _a: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.a) != N_PARAMS:
            raise ValueError(f"a must hold {N_PARAMS} learning rates")
        if self.iterations < 1:
            raise ValueError("iterations must be ≥ 1")
        object.__setattr__(self, "_a", np.asarray(self.a, dtype=np.float64))

    def step_size(self, k: int) -> np.ndarray:
        return self._a / (self.A + k + 1) ** self.alpha

    def perturbation(self, k: int) -> float:
        return self.c / (k + 1) ** self.gamma


# --- tuned constants ---------------------------------------------------------
INITIAL_VALUES = FilterParams(50.0, 20.0, 3750.0, 50.0, 100.0, 100.0)

WIDE_PHASE = PhaseConfig(
    A=5.0, a=(60.0, 180.0, 18000.0, 600.0, 1.2, 1.2), c=15.0, iterations=1000
)
WIDE_RETRIES = 3
WIDE_TARGET_LOSS = 25.0

NARROW_RATIOS = (0.25, 0.25, 1.0, 0.25, 0.2, 0.2)
NARROW_C = 2.0
NARROW_ITERATIONS = 500


def narrow_phase(wide_loss: float) -> PhaseConfig:
    A1 = wide_loss + 1
    return PhaseConfig(
        A=wide_loss,
        a=tuple(r * A1 for r in NARROW_RATIOS),
        c=NARROW_C,
        iterations=NARROW_ITERATIONS,
    )


def rademacher(rng: RandomSource, n: int = N_PARAMS) -> np.ndarray:
    return np.where(np.asarray(rng.random(n)) > 0.5, 1.0, -1.0)


def spsa(
    config: PhaseConfig,
    initial: Sequence[float],
    target: Sequence[float],
    target_hsl: HSL,
    rng: RandomSource,
) -> SolverResult:
    values = np.array(initial, dtype=np.float64)
    best = values.copy()
    best_loss = float("inf")

    for k in range(config.iterations):
        ck = config.perturbation(k)
        deltas = rademacher(rng)
        high = loss(values + ck * deltas, target, target_hsl)
        low = loss(values - ck * deltas, target, target_hsl)

        g = (high - low) / (2 * ck) * deltas
        values = fix_values(values - config.step_size(k) * g)

        current = loss(values, target, target_hsl)
        if current < best_loss:
            best = values.copy()
            best_loss = current

    return SolverResult(FilterParams.from_array(best), best_loss)


def solve_wide(
    target: Sequence[float],
    target_hsl: HSL,
    rng: RandomSource,
    *,
    config: PhaseConfig = WIDE_PHASE,
) -> SolverResult:
    best = SolverResult(INITIAL_VALUES, float("inf"))
    for i in range(WIDE_RETRIES):
        if best.loss <= WIDE_TARGET_LOSS:
            break
        result = spsa(config, INITIAL_VALUES, target, target_hsl, rng)
        log.debug("wide run %d: loss=%.3f", i + 1, result.loss)
        if result.loss < best.loss:
            best = result
    return best


def solve_narrow(
    wide: SolverResult,
    target: Sequence[float],
    target_hsl: HSL,
    rng: RandomSource,
) -> SolverResult:
    result = spsa(narrow_phase(wide.loss), wide.values, target, target_hsl, rng)
    log.debug("narrow run: loss %.3f → %.3f", wide.loss, result.loss)
    return result


def solve(target: Sequence[float], rng: RandomSource | None = None) -> SolverResult:
    """Wide search followed by narrow refinement; returns the narrow result."""
    if rng is None:
        rng = np.random.default_rng()
    target_hsl = rgb_to_hsl(target)
    wide = solve_wide(target, target_hsl, rng)
    return solve_narrow(wide, target, target_hsl, rng)


__all__ = [
    "RandomSource",
    "SolverResult",
    "PhaseConfig",
    "INITIAL_VALUES",
    "WIDE_PHASE",
    "WIDE_RETRIES",
    "WIDE_TARGET_LOSS",
    "NARROW_RATIOS",
    "narrow_phase",
    "rademacher",
    "spsa",
    "solve_wide",
    "solve_narrow",
    "solve",
]
