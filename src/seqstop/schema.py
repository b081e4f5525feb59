from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from seqstop.errors import InvalidConfigError


class Sided(str, Enum):
    ONE = "one"
    TWO = "two"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Sided"]:
        aliases = {"one-sided": cls.ONE, "one_sided": cls.ONE, "two-sided": cls.TWO, "two_sided": cls.TWO}
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None


class SpendingFunction(str, Enum):
    OBRIEN_FLEMING = "obrien_fleming"
    POCOCK = "pocock"
    HAYBITTLE_PETO = "haybittle_peto"
    LAN_DEMETS = "lan_demets"

    @classmethod
    def _missing_(cls, value: object) -> Optional["SpendingFunction"]:
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace("-", "_").replace("'", "")
        aliases = {"obf": cls.OBRIEN_FLEMING, "alpha_spending": cls.LAN_DEMETS}
        if key in aliases:
            return aliases[key]
        for member in cls:
            if member.value == key:
                return member
        return None


class BoundaryMethod(str, Enum):
    EXACT = "exact"  # recursive numerical integration over correlated looks
    NOMINAL = "nominal"  # each increment converted on its own


class TestStatus(str, Enum):
    __test__ = False

    CONTINUE = "continue"
    STOP_EFFICACY = "stop_efficacy"
    STOP_FUTILITY = "stop_futility"
    COMPLETE = "complete"


class Decision(str, Enum):
    REJECT_NULL = "reject_null"
    FAIL_TO_REJECT = "fail_to_reject"


@dataclass(frozen=True)
class TestConfig:
    """Design of a group sequential test.

    ``information_schedule`` is optional; when omitted looks are equally
    spaced at ``k / max_looks``. The futility fields default to the classic
    rule: conditional power under a zero future effect below 10%, assessed
    at every look. ``boundary_method`` selects exact (correlated looks) or
    nominal (per-increment) boundaries.
    """

    __test__ = False  # not a pytest class

    max_looks: int = 5
    alpha: float = 0.05
    power: float = 0.8
    sided: Sided = Sided.TWO
    spending_function: SpendingFunction = SpendingFunction.OBRIEN_FLEMING

    rho: float = 1.0
    futility_threshold: float = 0.10
    futility_effect: float = 0.0
    futility_start: float = 0.0
    information_schedule: Optional[Tuple[float, ...]] = None
    boundary_method: BoundaryMethod = BoundaryMethod.EXACT
    strict: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "sided", Sided(self.sided))
            object.__setattr__(self, "spending_function", SpendingFunction(self.spending_function))
            object.__setattr__(self, "boundary_method", BoundaryMethod(self.boundary_method))
        except ValueError as exc:
            raise InvalidConfigError(str(exc)) from exc

        looks = self.max_looks
        if (
            isinstance(looks, bool)
            or not isinstance(looks, (int, float))
            or not float(looks).is_integer()
            or looks < 1
        ):
            raise InvalidConfigError(f"max_looks must be an integer >= 1, got {self.max_looks!r}")
        object.__setattr__(self, "max_looks", int(self.max_looks))
        if not 0 < self.alpha < 1:
            raise InvalidConfigError(f"alpha must be in (0, 1), got {self.alpha!r}")
        if not 0 < self.power < 1:
            raise InvalidConfigError(f"power must be in (0, 1), got {self.power!r}")
        if not (math.isfinite(self.rho) and self.rho > 0):
            raise InvalidConfigError(f"rho must be positive, got {self.rho!r}")
        if not 0 <= self.futility_threshold <= 1:
            raise InvalidConfigError("futility_threshold must be in [0, 1]")
        if not 0 <= self.futility_start <= 1:
            raise InvalidConfigError("futility_start must be in [0, 1]")
        if not math.isfinite(self.futility_effect):
            raise InvalidConfigError("futility_effect must be finite")

        if self.information_schedule is not None:
            sched = tuple(float(t) for t in self.information_schedule)
            if len(sched) != self.max_looks:
                raise InvalidConfigError(
                    f"information_schedule has {len(sched)} entries, expected max_looks={self.max_looks}"
                )
            if any(not (0 < t <= 1) for t in sched):
                raise InvalidConfigError("information_schedule values must be in (0, 1]")
            if any(b <= a for a, b in zip(sched, sched[1:])):
                raise InvalidConfigError("information_schedule must be strictly increasing")
            if abs(sched[-1] - 1.0) > 1e-12:
                raise InvalidConfigError("information_schedule must end at 1.0")
            object.__setattr__(self, "information_schedule", sched[:-1] + (1.0,))

    @property
    def two_sided(self) -> bool:
        return self.sided == Sided.TWO

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["sided"] = self.sided.value
        d["spending_function"] = self.spending_function.value
        d["boundary_method"] = self.boundary_method.value
        d["information_schedule"] = list(self.information_schedule) if self.information_schedule else None
        return d


@dataclass(frozen=True)
class InterimAnalysis:
    """One recorded look. Never mutated after creation."""

    look_number: int
    information_fraction: float
    z_score: float
    p_value: float
    critical_boundary: float
    stop_for_efficacy: bool
    stop_for_futility: bool
    alpha_spent: float
    alpha_remaining: float

    conditional_power: float = math.nan
    standard_error: float = math.nan

    @property
    def stopped(self) -> bool:
        return self.stop_for_efficacy or self.stop_for_futility

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SequentialTestResult:
    config: TestConfig
    analyses: Tuple[InterimAnalysis, ...]
    status: TestStatus
    decision: Optional[Decision]
    adjusted_p_value: Optional[float]
    boundaries: List[float]
    information_schedule: List[float]
    warnings: List[str] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return self.status in (TestStatus.STOP_EFFICACY, TestStatus.STOP_FUTILITY)

    @property
    def last(self) -> Optional[InterimAnalysis]:
        return self.analyses[-1] if self.analyses else None

    def look_table(self) -> pd.DataFrame:
        cols = [f for f in InterimAnalysis.__dataclass_fields__]
        if not self.analyses:
            return pd.DataFrame(columns=cols)
        return pd.DataFrame([a.to_dict() for a in self.analyses], columns=cols)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "analyses": [a.to_dict() for a in self.analyses],
            "status": self.status.value,
            "decision": self.decision.value if self.decision is not None else None,
            "adjusted_p_value": self.adjusted_p_value,
            "boundaries": list(self.boundaries),
            "information_schedule": list(self.information_schedule),
            "warnings": list(self.warnings),
        }
