import pandas as pd
import pytest

from seqstop.errors import InvalidInputError
from seqstop.schema import TestConfig
from seqstop.simulate import SimulationConfig, simulate_design


def test_simulation_is_reproducible_by_seed():
    cfg = TestConfig()
    sim = SimulationConfig(n_sims=200, n_per_arm=500, effect=0.1, seed=7)
    a = simulate_design(cfg, sim)
    b = simulate_design(cfg, sim)
    pd.testing.assert_frame_equal(a.trials, b.trials)
    assert a.rejection_rate == b.rejection_rate


def test_simulation_summary_ranges():
    cfg = TestConfig()
    s = simulate_design(cfg, SimulationConfig(n_sims=200, n_per_arm=500, seed=1))
    assert len(s.trials) == 200
    assert 0.0 <= s.rejection_rate <= 1.0
    assert 0.0 <= s.futility_rate <= 1.0
    assert 1.0 <= s.expected_stop_look <= cfg.max_looks
    assert 0 < s.expected_sample_per_arm <= 500
    assert s.diagnostics["look_sizes"] == [100, 200, 300, 400, 500]
    assert set(s.trials["status"]) <= {"stop_efficacy", "stop_futility", "complete"}


def test_null_rejection_rate_is_controlled():
    # futility stopping disabled so every trial runs to efficacy or the final look
    cfg = TestConfig(futility_threshold=0.0)
    s = simulate_design(cfg, SimulationConfig(n_sims=1000, n_per_arm=400, effect=0.0, seed=11))
    assert s.rejection_rate < 0.08
    assert s.futility_rate == 0.0


def test_large_effect_is_detected_early():
    cfg = TestConfig(futility_start=0.5)
    s = simulate_design(cfg, SimulationConfig(n_sims=200, n_per_arm=500, effect=0.5, seed=3))
    assert s.rejection_rate > 0.9
    assert s.expected_stop_look < cfg.max_looks


def test_simulation_validates_inputs():
    with pytest.raises(InvalidInputError):
        simulate_design(TestConfig(), SimulationConfig(n_sims=0))
    with pytest.raises(InvalidInputError):
        simulate_design(TestConfig(), SimulationConfig(noise_sd=0.0))
