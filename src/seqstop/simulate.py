from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from seqstop.boundaries import information_schedule
from seqstop.interim import InterimAnalyzer, reduce_status
from seqstop.errors import InvalidInputError
from seqstop.schema import Decision, InterimAnalysis, TestConfig, TestStatus


@dataclass(frozen=True)
class SimulationConfig:
    n_sims: int = 2000
    n_per_arm: int = 1000
    effect: float = 0.0  # standardized (treatment - control) / sd
    noise_sd: float = 1.0
    seed: int = 42


@dataclass
class SimulationSummary:
    rejection_rate: float
    futility_rate: float
    expected_stop_look: float
    expected_sample_per_arm: float
    trials: pd.DataFrame
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rejection_rate": self.rejection_rate,
            "futility_rate": self.futility_rate,
            "expected_stop_look": self.expected_stop_look,
            "expected_sample_per_arm": self.expected_sample_per_arm,
            "diagnostics": dict(self.diagnostics),
        }


def _look_sizes(cfg: TestConfig, n_per_arm: int) -> np.ndarray:
    sizes = np.ceil(np.asarray(information_schedule(cfg)) * n_per_arm).astype(int)
    return np.maximum.accumulate(np.maximum(sizes, 1))


def simulate_design(cfg: TestConfig, sim: Optional[SimulationConfig] = None) -> SimulationSummary:
    """Monte-Carlo operating characteristics of a sequential design.

    Each trial draws per-arm batches between looks, so interim statistics
    share data across looks as in a real experiment, and replays the looks
    through the interim analyzer until it stops or reaches the final look.
    """
    sim = sim or SimulationConfig()
    if sim.n_sims <= 0 or sim.n_per_arm <= 0:
        raise InvalidInputError("n_sims and n_per_arm must be positive.")
    if sim.noise_sd <= 0:
        raise InvalidInputError("noise_sd must be positive.")

    rng = np.random.default_rng(int(sim.seed))
    sizes = _look_sizes(cfg, int(sim.n_per_arm))
    batch = np.diff(np.concatenate([[0], sizes]))
    sd = float(sim.noise_sd)
    delta = float(sim.effect) * sd

    # Batch sums per look: N(mu * m, sd^2 * m); cumulative sums give look-level means.
    sums_c = rng.normal(0.0, sd * np.sqrt(np.maximum(batch, 0)), size=(sim.n_sims, len(sizes)))
    sums_t = rng.normal(delta * batch, sd * np.sqrt(np.maximum(batch, 0)), size=(sim.n_sims, len(sizes)))
    means_c = np.cumsum(sums_c, axis=1) / sizes
    means_t = np.cumsum(sums_t, axis=1) / sizes

    # Boundaries are computed once; each trial is its own log folded by reduce_status.
    analyzer = InterimAnalyzer(cfg)
    rows: List[Dict[str, Any]] = []
    for i in range(sim.n_sims):
        log: List[InterimAnalysis] = []
        for k, n_k in enumerate(sizes, start=1):
            log.append(analyzer.analyze(k, int(n_k), int(n_k), means_c[i, k - 1], means_t[i, k - 1], sd))
            if log[-1].stopped:
                break
        status, decision = reduce_status(cfg, log)
        last = log[-1]
        rows.append(
            {
                "trial": i,
                "stop_look": last.look_number,
                "n_per_arm": int(sizes[last.look_number - 1]),
                "z": last.z_score,
                "status": status.value,
                "decision": decision.value if decision is not None else None,
            }
        )

    trials = pd.DataFrame(rows)
    rejected = trials["decision"] == Decision.REJECT_NULL.value
    futile = trials["status"] == TestStatus.STOP_FUTILITY.value

    return SimulationSummary(
        rejection_rate=float(rejected.mean()),
        futility_rate=float(futile.mean()),
        expected_stop_look=float(trials["stop_look"].mean()),
        expected_sample_per_arm=float(trials["n_per_arm"].mean()),
        trials=trials,
        diagnostics={
            "n_sims": int(sim.n_sims),
            "effect": float(sim.effect),
            "look_sizes": [int(x) for x in sizes],
            "spending_function": cfg.spending_function.value,
        },
    )
