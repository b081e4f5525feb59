from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Union

from seqstop.engine import SequentialTestEngine
from seqstop.errors import InvalidInputError
from seqstop.schema import SpendingFunction, TestConfig


@dataclass(frozen=True)
class StopCheck:
    should_stop: bool
    reason: Optional[str]
    p_value: float
    z_score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]


def should_stop_early(
    control_n: int,
    treatment_n: int,
    control_rate: float,
    treatment_rate: float,
    current_look: int,
    max_looks: int = 5,
    alpha: float = 0.05,
    futility_start: float = 0.5,
) -> StopCheck:
    """Quick stop/continue check for a conversion-rate experiment.

    Uses O'Brien-Fleming boundaries and a pooled-rate standard deviation.
    Futility is only assessed once ``futility_start`` of the information is
    in; pass 0.0 to assess it at every look.
    """
    if control_n <= 0 or treatment_n <= 0:
        raise InvalidInputError("control_n and treatment_n must be positive.")
    for name, rate in (("control_rate", control_rate), ("treatment_rate", treatment_rate)):
        if not 0 <= rate <= 1:
            raise InvalidInputError(f"{name} must be in [0, 1], got {rate}")

    engine = SequentialTestEngine(TestConfig(max_looks=max_looks, alpha=alpha, futility_start=futility_start))

    pooled_rate = (control_n * control_rate + treatment_n * treatment_rate) / (control_n + treatment_n)
    pooled_sd = math.sqrt(pooled_rate * (1 - pooled_rate))
    if pooled_sd <= 0:
        raise InvalidInputError("pooled conversion rate is 0 or 1; the test statistic is undefined.")

    analysis = engine.analyze(current_look, control_n, treatment_n, control_rate, treatment_rate, pooled_sd)

    if analysis.stop_for_efficacy:
        reason: Optional[str] = "efficacy"
    elif analysis.stop_for_futility:
        reason = "futility"
    else:
        reason = None

    return StopCheck(
        should_stop=analysis.stopped,
        reason=reason,
        p_value=analysis.p_value,
        z_score=analysis.z_score,
    )


def obrien_fleming_boundaries(max_looks: int = 5, alpha: float = 0.05) -> List[float]:
    engine = SequentialTestEngine(
        TestConfig(max_looks=max_looks, alpha=alpha, spending_function=SpendingFunction.OBRIEN_FLEMING)
    )
    return engine.result().boundaries


def sequential_sample_size(
    baseline_rate: float,
    min_detectable_effect: float,
    max_looks: int = 5,
    power: float = 0.8,
    alpha: float = 0.05,
    spending_function: Union[SpendingFunction, str] = SpendingFunction.OBRIEN_FLEMING,
) -> Dict[str, Any]:
    """Per-look and total sample size for a conversion-rate sequential test."""
    engine = SequentialTestEngine(
        TestConfig(max_looks=max_looks, power=power, alpha=alpha, spending_function=spending_function)
    )
    per_look = engine.recommended_sample_size(min_detectable_effect, baseline_rate, is_conversion=True)
    return {"per_look": per_look, "total": per_look[-1]}
