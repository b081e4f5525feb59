"""
Sample size planning for group sequential experiments.

Focus:
- binary metrics (conversion rate) via a two-proportion power formula;
- continuous metrics via a standardized two-mean formula.

A fixed-design sample size is computed first and then inflated for
sequential monitoring with an approximate, spending-function specific
factor (see ``seqstop.spending``). The inflated maximum is distributed
across looks according to the information schedule.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from seqstop.boundaries import information_schedule
from seqstop.errors import InvalidInputError
from seqstop.normal import quantile
from seqstop.schema import TestConfig
from seqstop.spending import AlphaSpender, get_spending_function


@dataclass
class SamplePlan:
    """
    Container for a sequential sample size plan.

    Attributes
    ----------
    fixed_sample_size : float
        Sample size of the equivalent fixed (single-look) design, unrounded.
    inflation_factor : float
        Multiplier applied for sequential monitoring.
    max_sample_size : int
        ceil(fixed_sample_size * inflation_factor).
    per_look : list of int
        Cumulative sample size to reach at each look.
    metric_type : str
        "proportion" or "mean".
    """

    fixed_sample_size: float
    inflation_factor: float
    max_sample_size: int
    per_look: List[int]
    metric_type: str

    @property
    def total(self) -> int:
        return self.per_look[-1]


def _z_alpha(cfg: TestConfig) -> float:
    """Critical z of the fixed design (two-sided uses alpha/2 per tail)."""
    if cfg.two_sided:
        return quantile(1 - cfg.alpha / 2.0)
    return quantile(1 - cfg.alpha)


def fixed_sample_size_proportions(p_baseline: float, mde: float, cfg: TestConfig) -> float:
    """
    Fixed-design sample size for a two-proportion comparison.

    Parameters
    ----------
    p_baseline : float
        Baseline conversion rate (0 < p < 1).
    mde : float
        Minimal detectable effect as an absolute difference; the treatment
        rate is p_baseline + mde.
    cfg : TestConfig
        Supplies alpha, power and sidedness.

    Returns
    -------
    float
        2 * ((z_a sqrt(2 p_bar (1 - p_bar)) + z_b sqrt(p1 q1 + p2 q2)) / (p2 - p1))^2
    """
    if not 0 < p_baseline < 1:
        raise InvalidInputError("baseline_rate must be in (0, 1).")
    if mde == 0:
        raise InvalidInputError("min_detectable_effect must be non-zero.")
    p1 = float(p_baseline)
    p2 = p1 + float(mde)
    if not 0 < p2 < 1:
        raise InvalidInputError(
            "baseline_rate + min_detectable_effect must be in (0, 1). "
            "Check that your minimal detectable effect is realistic."
        )

    z_a = _z_alpha(cfg)
    z_b = quantile(cfg.power)
    p_bar = (p1 + p2) / 2.0

    numerator = z_a * math.sqrt(2.0 * p_bar * (1 - p_bar)) + z_b * math.sqrt(p1 * (1 - p1) + p2 * (1 - p2))
    return 2.0 * (numerator / (p2 - p1)) ** 2


def fixed_sample_size_means(effect: float, cfg: TestConfig) -> float:
    """Fixed-design size for a standardized mean difference: 2 * ((z_a + z_b) / effect)^2."""
    if effect == 0 or not math.isfinite(effect):
        raise InvalidInputError("min_detectable_effect must be finite and non-zero.")
    z_a = _z_alpha(cfg)
    z_b = quantile(cfg.power)
    return 2.0 * ((z_a + z_b) / float(effect)) ** 2


class SampleSizePlanner:
    def __init__(self, cfg: TestConfig, spender: Optional[AlphaSpender] = None) -> None:
        self.cfg = cfg
        self.spender = spender or get_spending_function(cfg)

    @property
    def inflation_factor(self) -> float:
        return self.spender.inflation_factor

    def fixed_sample_size(self, min_detectable_effect: float, baseline_rate: float, is_conversion: bool = True) -> float:
        if is_conversion:
            return fixed_sample_size_proportions(baseline_rate, min_detectable_effect, self.cfg)
        return fixed_sample_size_means(min_detectable_effect, self.cfg)

    def plan(self, min_detectable_effect: float, baseline_rate: float, is_conversion: bool = True) -> SamplePlan:
        base = self.fixed_sample_size(min_detectable_effect, baseline_rate, is_conversion)
        max_n = int(math.ceil(base * self.inflation_factor))
        per_look = [int(math.ceil(max_n * t)) for t in information_schedule(self.cfg)]
        return SamplePlan(
            fixed_sample_size=float(base),
            inflation_factor=float(self.inflation_factor),
            max_sample_size=max_n,
            per_look=per_look,
            metric_type="proportion" if is_conversion else "mean",
        )

    def recommended_sample_size(
        self,
        min_detectable_effect: float,
        baseline_rate: float,
        is_conversion: bool = True,
    ) -> List[int]:
        """Cumulative sample size per look, ceil(max_sample_size * t_k)."""
        return self.plan(min_detectable_effect, baseline_rate, is_conversion).per_look
