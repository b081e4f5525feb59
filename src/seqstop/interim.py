"""
Interim analysis of one look against precomputed boundaries.

``InterimAnalyzer.analyze`` is pure: it validates the look's aggregated
statistics and returns an immutable ``InterimAnalysis``. Appending it to a
log is the engine's job. ``reduce_status`` folds a log into the current
status/decision using only the most recent analysis.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from seqstop.boundaries import BoundarySet, compute_boundaries
from seqstop.errors import InvalidInputError, InvalidLookNumberError
from seqstop.normal import cdf, two_sided_p_value
from seqstop.schema import Decision, InterimAnalysis, TestConfig, TestStatus
from seqstop.spending import AlphaSpender, get_spending_function


def _require_finite(name: str, value: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(v):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return v


def standard_error(n_control: float, n_treatment: float, pooled_std_dev: float) -> float:
    """sd * sqrt(1/n_c + 1/n_t), rejecting inputs that would divide by zero."""
    n_c = _require_finite("n_control", n_control)
    n_t = _require_finite("n_treatment", n_treatment)
    sd = _require_finite("pooled_std_dev", pooled_std_dev)
    if n_c <= 0 or n_t <= 0:
        raise InvalidInputError(f"sample sizes must be positive, got n_control={n_control}, n_treatment={n_treatment}")
    if sd <= 0:
        raise InvalidInputError(f"pooled_std_dev must be positive, got {pooled_std_dev}")
    return sd * math.sqrt(1.0 / n_c + 1.0 / n_t)


def conditional_power(
    current_z: float,
    information_fraction: float,
    final_boundary: float,
    assumed_effect: float = 0.0,
) -> float:
    """Probability of ending above the final boundary given the current z.

    The final statistic is projected as ``z sqrt(f) + e sqrt(1 - f)`` and
    compared with the terminal boundary. With no information left the answer
    is 1 if the current z already exceeds that boundary, else 0.
    """
    z = _require_finite("current_z", current_z)
    f = _require_finite("information_fraction", information_fraction)
    e = _require_finite("assumed_effect", assumed_effect)
    if f < 0:
        raise InvalidInputError(f"information_fraction must be >= 0, got {information_fraction!r}")
    remaining = 1.0 - f
    if remaining <= 0:
        return 1.0 if z > final_boundary else 0.0

    final_z = z * math.sqrt(f) + e * math.sqrt(remaining)
    cp = 1.0 - cdf(final_boundary - final_z)
    return float(min(max(cp, 0.0), 1.0))


class InterimAnalyzer:
    def __init__(
        self,
        cfg: TestConfig,
        bset: Optional[BoundarySet] = None,
        spender: Optional[AlphaSpender] = None,
    ) -> None:
        self.cfg = cfg
        self.spender = spender or get_spending_function(cfg)
        self.bset = bset or compute_boundaries(cfg, self.spender)

    def check_look(self, look_number: int) -> int:
        k_max = self.cfg.max_looks
        if isinstance(look_number, bool):
            raise InvalidLookNumberError(f"Look number must be an integer, got {look_number!r}")
        try:
            look = int(look_number)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidLookNumberError(f"Look number must be an integer, got {look_number!r}") from exc
        if look != look_number or not 1 <= look <= k_max:
            raise InvalidLookNumberError(f"Look number must be between 1 and {k_max}, got {look_number!r}")
        return look

    def conditional_power(self, current_z: float, information_fraction: float, assumed_effect: float = 0.0) -> float:
        return conditional_power(current_z, information_fraction, self.bset.final_boundary, assumed_effect)

    def analyze(
        self,
        look_number: int,
        n_control: float,
        n_treatment: float,
        mean_control: float,
        mean_treatment: float,
        pooled_std_dev: float,
    ) -> InterimAnalysis:
        cfg = self.cfg
        look = self.check_look(look_number)
        se = standard_error(n_control, n_treatment, pooled_std_dev)
        diff = _require_finite("mean_treatment", mean_treatment) - _require_finite("mean_control", mean_control)

        info = self.bset.information_schedule[look - 1]
        z = diff / se
        boundary = self.bset.boundaries[look - 1]
        # Reported two-sided regardless of cfg.sided.
        p_value = two_sided_p_value(z)

        stop_efficacy = abs(z) >= boundary
        cp = self.conditional_power(z, info, cfg.futility_effect)
        stop_futility = (not stop_efficacy) and info >= cfg.futility_start and cp < cfg.futility_threshold

        alpha_spent = self.spender.spend(info, cfg.alpha)

        return InterimAnalysis(
            look_number=look,
            information_fraction=float(info),
            z_score=float(z),
            p_value=float(p_value),
            critical_boundary=float(boundary),
            stop_for_efficacy=bool(stop_efficacy),
            stop_for_futility=bool(stop_futility),
            alpha_spent=float(alpha_spent),
            alpha_remaining=float(cfg.alpha - alpha_spent),
            conditional_power=float(cp),
            standard_error=float(se),
        )


def reduce_status(cfg: TestConfig, analyses: Sequence[InterimAnalysis]) -> Tuple[TestStatus, Optional[Decision]]:
    """Fold the analysis log into (status, decision) from its most recent entry."""
    if not analyses:
        return TestStatus.CONTINUE, None
    last = analyses[-1]
    if last.stop_for_efficacy:
        return TestStatus.STOP_EFFICACY, Decision.REJECT_NULL
    if last.stop_for_futility:
        return TestStatus.STOP_FUTILITY, Decision.FAIL_TO_REJECT
    if last.look_number >= cfg.max_looks:
        crossed = abs(last.z_score) >= last.critical_boundary
        return TestStatus.COMPLETE, Decision.REJECT_NULL if crossed else Decision.FAIL_TO_REJECT
    return TestStatus.CONTINUE, None


def adjusted_p_value(spender: AlphaSpender, analysis: InterimAnalysis) -> float:
    """Approximate stage-wise adjusted p-value for a stopping look.

    The stopping look's two-sided p-value is fed back through the spending
    function at that look's information fraction. This is a pragmatic
    approximation, not an exact inversion of the sequential rejection region.
    """
    p_stop = two_sided_p_value(analysis.z_score)
    return float(spender.spend(analysis.information_fraction, p_stop))
