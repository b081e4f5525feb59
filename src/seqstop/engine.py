"""
Stateful orchestration of one experiment's monitoring session.

The engine owns the configuration, the boundary set computed from it and an
append-only log of interim analyses. Status and decision are derived from
the log by a pure reducer, so ``result()`` can be called at any time and
returns an independent snapshot.

The engine is not internally synchronized: callers sharing one instance
across threads must serialize ``analyze`` / ``reset``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from seqstop.boundaries import BoundarySet, FutilityBoundary, compute_boundaries, futility_boundaries
from seqstop.errors import ExperimentStoppedError, LookOrderError
from seqstop.interim import InterimAnalyzer, adjusted_p_value, reduce_status
from seqstop.planning import SamplePlan, SampleSizePlanner
from seqstop.schema import InterimAnalysis, SequentialTestResult, TestConfig, TestStatus
from seqstop.spending import get_spending_function

logger = logging.getLogger(__name__)


class SequentialTestEngine:
    """Group sequential test for one running experiment.

    Parameters
    ----------
    config : TestConfig, optional
        Test design. Defaults to ``TestConfig()``.
    **overrides
        Field overrides applied on top of ``config`` (e.g. ``max_looks=3``).
    """

    def __init__(self, config: Optional[TestConfig] = None, **overrides: Any) -> None:
        cfg = config or TestConfig()
        if overrides:
            cfg = TestConfig(**{**cfg.to_dict(), **overrides})
        self.config = cfg
        self.spender = get_spending_function(cfg)
        self._log: List[InterimAnalysis] = []
        self._warnings: List[str] = []
        self._build()

    def _build(self) -> None:
        self._bset = compute_boundaries(self.config, self.spender)
        self._analyzer = InterimAnalyzer(self.config, self._bset, self.spender)
        self._planner = SampleSizePlanner(self.config, self.spender)
        if self._bset.floored:
            logger.debug("boundary floor applied at looks %s", list(self._bset.floored))

    @property
    def boundary_set(self) -> BoundarySet:
        return self._bset

    @property
    def boundaries(self) -> List[float]:
        return list(self._bset.boundaries)

    @property
    def information_schedule(self) -> List[float]:
        return list(self._bset.information_schedule)

    @property
    def analyses(self) -> Tuple[InterimAnalysis, ...]:
        return tuple(self._log)

    @property
    def cumulative_alpha_spent(self) -> float:
        """Cumulative alpha spent as of the most recently recorded look."""
        return self._log[-1].alpha_spent if self._log else 0.0

    def _check_sequence(self, look: int) -> Optional[str]:
        if not self._log:
            return None
        last = self._log[-1]
        if last.stopped:
            msg = f"look {look} recorded after a stop decision at look {last.look_number}"
            if self.config.strict:
                raise ExperimentStoppedError(msg)
            return msg
        if look <= last.look_number:
            msg = f"look {look} is not after previous look {last.look_number}"
            if self.config.strict:
                raise LookOrderError(msg)
            return msg
        return None

    def analyze(
        self,
        look_number: int,
        n_control: float,
        n_treatment: float,
        mean_control: float,
        mean_treatment: float,
        pooled_std_dev: float,
    ) -> InterimAnalysis:
        """Evaluate one look and append it to the log.

        Raises ``InvalidLookNumberError`` / ``InvalidInputError`` (and, in
        strict mode, ``LookOrderError`` / ``ExperimentStoppedError``) before
        anything is recorded.
        """
        look = self._analyzer.check_look(look_number)
        note = self._check_sequence(look)
        analysis = self._analyzer.analyze(look, n_control, n_treatment, mean_control, mean_treatment, pooled_std_dev)

        if note is not None:
            logger.warning(note)
            self._warnings.append(note)
        self._log.append(analysis)
        logger.debug(
            "look %d/%d: z=%.4f boundary=%.4f efficacy=%s futility=%s",
            analysis.look_number,
            self.config.max_looks,
            analysis.z_score,
            analysis.critical_boundary,
            analysis.stop_for_efficacy,
            analysis.stop_for_futility,
        )
        return analysis

    perform_interim_analysis = analyze

    def result(self) -> SequentialTestResult:
        analyses = tuple(self._log)
        status, decision = reduce_status(self.config, analyses)
        adj = None
        if status != TestStatus.CONTINUE:
            adj = adjusted_p_value(self.spender, analyses[-1])

        warnings = list(self._warnings)
        if self._bset.floored:
            warnings.append(f"Boundary floor of 1.0 applied at looks {list(self._bset.floored)}.")

        return SequentialTestResult(
            config=self.config,
            analyses=analyses,
            status=status,
            decision=decision,
            adjusted_p_value=adj,
            boundaries=self.boundaries,
            information_schedule=self.information_schedule,
            warnings=warnings,
        )

    get_result = result

    def conditional_power(self, current_z: float, information_fraction: float, assumed_effect: float = 0.0) -> float:
        return self._analyzer.conditional_power(current_z, information_fraction, assumed_effect)

    def futility_boundaries(self) -> List[FutilityBoundary]:
        return futility_boundaries(self._bset, self.config.futility_threshold, self.config.futility_effect)

    def sample_plan(self, min_detectable_effect: float, baseline_rate: float, is_conversion: bool = True) -> SamplePlan:
        return self._planner.plan(min_detectable_effect, baseline_rate, is_conversion)

    def recommended_sample_size(
        self,
        min_detectable_effect: float,
        baseline_rate: float,
        is_conversion: bool = True,
    ) -> List[int]:
        return self._planner.recommended_sample_size(min_detectable_effect, baseline_rate, is_conversion)

    def reset(self) -> None:
        """Clear the analysis log and rebuild boundaries from the same config."""
        self._log = []
        self._warnings = []
        self._build()
