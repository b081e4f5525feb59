from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import optimize
from scipy.stats import norm

from seqstop.normal import quantile
from seqstop.schema import BoundaryMethod, TestConfig
from seqstop.spending import AlphaSpender, get_spending_function

BOUNDARY_FLOOR = 1.0

_GRID_POINTS = 401  # odd, for Simpson weights
_TAIL_SD = 8.0
_Z_MAX = 40.0


def information_schedule(cfg: TestConfig) -> Tuple[float, ...]:
    """Information fractions of the planned looks (k / max_looks unless supplied)."""
    if cfg.information_schedule is not None:
        return tuple(cfg.information_schedule)
    k_max = cfg.max_looks
    return tuple(k / k_max for k in range(1, k_max + 1))


@dataclass(frozen=True)
class BoundarySet:
    """Efficacy boundaries and alpha bookkeeping for every planned look."""

    boundaries: Tuple[float, ...]
    information_schedule: Tuple[float, ...]
    cumulative_alpha: Tuple[float, ...]
    incremental_alpha: Tuple[float, ...]
    floored: Tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.boundaries)

    @property
    def final_boundary(self) -> float:
        return self.boundaries[-1]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "look_number": np.arange(1, len(self.boundaries) + 1),
                "information_fraction": self.information_schedule,
                "boundary_z": self.boundaries,
                "cumulative_alpha": self.cumulative_alpha,
                "incremental_alpha": self.incremental_alpha,
            }
        )


def _nominal_boundary(incremental: float, two_sided: bool) -> float:
    boundary_alpha = incremental / 2.0 if two_sided else incremental
    return quantile(1.0 - boundary_alpha)


def _simpson_weights(n: int, h: float) -> np.ndarray:
    w = np.ones(n)
    w[1:-1:2] = 4.0
    w[2:-1:2] = 2.0
    return w * h / 3.0


class _ScoreDensity:
    """Sub-density of the score S = Z sqrt(t) over paths that have not stopped yet.

    Starts as a point mass at S=0, t=0. ``exit_probability`` gives the null
    probability of crossing +/-c at the next look; ``advance`` moves the
    density to that look, truncated to the continuation region.
    """

    def __init__(self, two_sided: bool) -> None:
        self.two_sided = two_sided
        self.t = 0.0
        self.grid = np.zeros(1)
        self.weights = np.ones(1)
        self.dens = np.ones(1)

    def exit_probability(self, t: float, c: float) -> float:
        sd = math.sqrt(t - self.t)
        u = c * math.sqrt(t)
        mass = self.weights * self.dens
        p = float(mass @ norm.sf((u - self.grid) / sd))
        if self.two_sided:
            p += float(mass @ norm.cdf((-u - self.grid) / sd))
        return p

    def advance(self, t: float, c: float) -> None:
        sd = math.sqrt(t - self.t)
        tail = _TAIL_SD * math.sqrt(t)
        hi = min(c * math.sqrt(t), tail)
        lo = -hi if self.two_sided else -tail
        grid = np.linspace(lo, hi, _GRID_POINTS)
        kernel = norm.pdf((grid[:, None] - self.grid[None, :]) / sd) / sd
        self.dens = kernel @ (self.weights * self.dens)
        self.weights = _simpson_weights(_GRID_POINTS, (hi - lo) / (_GRID_POINTS - 1))
        self.grid = grid
        self.t = t


def _exact_boundary(density: _ScoreDensity, t: float, incremental: float) -> float:
    if incremental <= 0:
        return math.inf

    def excess(c: float) -> float:
        return density.exit_probability(t, c) - incremental

    if excess(BOUNDARY_FLOOR) <= 0:
        return -math.inf  # even the floor spends less than the increment
    return float(optimize.brentq(excess, BOUNDARY_FLOOR, _Z_MAX, xtol=1e-10, maxiter=200))


def compute_boundaries(cfg: TestConfig, spender: Optional[AlphaSpender] = None) -> BoundarySet:
    """Convert the spending strategy into one critical |z| per look.

    ``BoundaryMethod.EXACT`` (default) solves, look by look, for the boundary
    whose null crossing probability, given no earlier crossing, equals the
    incremental alpha. The joint law of the looks is handled by recursive
    numerical integration of the score process on a Simpson grid.

    ``BoundaryMethod.NOMINAL`` converts each increment independently into
    ``quantile(1 - a_k)`` (``a_k / 2`` per tail when two-sided). It ignores
    the correlation between looks and is therefore conservative.

    Either way boundaries are floored at 1.0.
    """
    spender = spender or get_spending_function(cfg)
    schedule = information_schedule(cfg)
    exact = cfg.boundary_method == BoundaryMethod.EXACT
    density = _ScoreDensity(cfg.two_sided) if exact else None

    boundaries: List[float] = []
    cumulative: List[float] = []
    increments: List[float] = []
    floored: List[int] = []

    spent_so_far = 0.0
    for k, t in enumerate(schedule, start=1):
        spent_at = spender.spend(t, cfg.alpha)
        incremental = spent_at - spent_so_far
        if density is not None:
            z = _exact_boundary(density, t, incremental)
        else:
            z = _nominal_boundary(incremental, cfg.two_sided)
        if not z >= BOUNDARY_FLOOR:
            floored.append(k)
            z = BOUNDARY_FLOOR
        if density is not None and k < len(schedule):
            density.advance(t, z)
        boundaries.append(float(z))
        spent_so_far += incremental
        cumulative.append(float(spent_so_far))
        increments.append(float(incremental))

    return BoundarySet(
        boundaries=tuple(boundaries),
        information_schedule=tuple(schedule),
        cumulative_alpha=tuple(cumulative),
        incremental_alpha=tuple(increments),
        floored=tuple(floored),
    )


@dataclass(frozen=True)
class FutilityBoundary:
    information_fraction: float
    boundary: float
    conditional_power_threshold: float


def futility_boundaries(
    bset: BoundarySet,
    threshold: float = 0.10,
    assumed_effect: float = 0.0,
) -> List[FutilityBoundary]:
    """z-values below which conditional power drops under ``threshold``.

    Inverts ``1 - Phi(c_K - (z sqrt(f) + e sqrt(1 - f))) = threshold`` for z.
    At the final look there is no information left, so the futility boundary
    coincides with the efficacy boundary.
    """
    c_final = bset.final_boundary
    out: List[FutilityBoundary] = []
    for f in bset.information_schedule:
        if f >= 1:
            z_fut = c_final
        elif threshold <= 0:
            z_fut = -math.inf
        elif threshold >= 1:
            z_fut = math.inf
        else:
            target = c_final - quantile(1.0 - threshold)
            z_fut = (target - assumed_effect * math.sqrt(1.0 - f)) / math.sqrt(f)
        out.append(FutilityBoundary(information_fraction=f, boundary=float(z_fut), conditional_power_threshold=threshold))
    return out
