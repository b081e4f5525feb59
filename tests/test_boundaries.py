import math

import numpy as np
import pandas as pd
import pytest
from scipy import integrate
from scipy.stats import norm

from seqstop.boundaries import (
    BOUNDARY_FLOOR,
    compute_boundaries,
    futility_boundaries,
    information_schedule,
)
from seqstop.errors import InvalidConfigError
from seqstop.interim import conditional_power
from seqstop.schema import BoundaryMethod, SpendingFunction, TestConfig
from seqstop.spending import get_spending_function


def test_equal_spacing_schedule():
    sched = information_schedule(TestConfig(max_looks=4))
    assert sched == (0.25, 0.5, 0.75, 1.0)


@pytest.mark.parametrize("method", list(BoundaryMethod))
@pytest.mark.parametrize("spending", list(SpendingFunction))
def test_boundary_set_shape(method, spending):
    cfg = TestConfig(max_looks=5, spending_function=spending, boundary_method=method)
    bset = compute_boundaries(cfg)
    assert len(bset) == 5
    assert len(bset.information_schedule) == 5
    assert all(np.isfinite(bset.boundaries))
    assert all(b >= BOUNDARY_FLOOR for b in bset.boundaries)
    assert np.all(np.diff(bset.cumulative_alpha) >= 0)
    assert bset.cumulative_alpha[-1] <= cfg.alpha + 1e-12
    assert abs(sum(bset.incremental_alpha) - cfg.alpha) < 1e-9


@pytest.mark.parametrize("method", list(BoundaryMethod))
def test_obrien_fleming_early_boundary_is_stricter(method):
    b = compute_boundaries(TestConfig(boundary_method=method)).boundaries
    assert b[0] > b[4]
    assert all(x > y for x, y in zip(b, b[1:]))


def test_nominal_boundaries_follow_per_increment_formula():
    cfg = TestConfig(boundary_method="nominal")
    bset = compute_boundaries(cfg)
    spender = get_spending_function(cfg)

    spent = 0.0
    for t, b in zip(bset.information_schedule, bset.boundaries):
        inc = spender.spend(t, cfg.alpha) - spent
        spent += inc
        assert abs(b - norm.ppf(1 - inc / 2)) < 1e-6
    # the per-increment rule ignores correlation and ends well above 1.96
    assert abs(bset.final_boundary - 2.298) < 0.01


def test_exact_final_obrien_fleming_boundary_near_fixed_design():
    b = compute_boundaries(TestConfig()).boundaries
    assert 1.95 < b[-1] < 2.1
    assert 4.2 < b[0] < 4.6


def test_exact_boundaries_are_below_nominal_after_first_look():
    exact = compute_boundaries(TestConfig()).boundaries
    nominal = compute_boundaries(TestConfig(boundary_method="nominal")).boundaries
    # no earlier looks to account for at the first one
    assert abs(exact[0] - nominal[0]) < 1e-3
    for e, n in zip(exact[1:], nominal[1:]):
        assert e < n


def test_exact_pocock_boundaries_are_nearly_flat():
    exact = compute_boundaries(TestConfig(spending_function="pocock")).boundaries
    nominal = compute_boundaries(TestConfig(spending_function="pocock", boundary_method="nominal")).boundaries
    assert max(exact) - min(exact) < 0.2
    assert nominal[-1] > nominal[0]


def test_exact_two_look_boundary_spends_increment():
    cfg = TestConfig(max_looks=2, information_schedule=(0.5, 1.0))
    bset = compute_boundaries(cfg)
    c1, c2 = bset.boundaries
    t = 0.5

    def integrand(z1):
        mu = math.sqrt(t) * z1
        sd = math.sqrt(1 - t)
        return norm.pdf(z1) * (norm.sf((c2 - mu) / sd) + norm.cdf((-c2 - mu) / sd))

    crossing, _ = integrate.quad(integrand, -c1, c1, epsabs=1e-12)
    assert abs(crossing - bset.incremental_alpha[1]) < 1e-6


def test_one_sided_exact_two_look_boundary_spends_increment():
    cfg = TestConfig(max_looks=2, sided="one", alpha=0.025)
    bset = compute_boundaries(cfg)
    c1, c2 = bset.boundaries
    t = 0.5

    def integrand(z1):
        return norm.pdf(z1) * norm.sf((c2 - math.sqrt(t) * z1) / math.sqrt(1 - t))

    crossing, _ = integrate.quad(integrand, -np.inf, c1, epsabs=1e-12)
    assert abs(crossing - bset.incremental_alpha[1]) < 1e-6


@pytest.mark.parametrize("method", list(BoundaryMethod))
def test_boundary_floor(method):
    bset = compute_boundaries(TestConfig(max_looks=1, alpha=0.9, boundary_method=method))
    assert bset.boundaries == (1.0,)
    assert bset.floored == (1,)


def test_boundaries_are_deterministic():
    cfg = TestConfig(max_looks=4, spending_function="lan_demets", rho=1.5)
    a = compute_boundaries(cfg)
    b = compute_boundaries(cfg)
    assert a == b


def test_custom_schedule():
    cfg = TestConfig(max_looks=3, information_schedule=[0.25, 0.5, 1.0])
    bset = compute_boundaries(cfg)
    assert bset.information_schedule == (0.25, 0.5, 1.0)
    assert len(bset.boundaries) == 3


@pytest.mark.parametrize(
    "sched",
    [
        (0.5, 1.0),
        (0.2, 0.6, 0.9),
        (0.6, 0.3, 1.0),
        (0.0, 0.5, 1.0),
        (0.4, 0.4, 1.0),
    ],
)
def test_invalid_schedule_rejected(sched):
    with pytest.raises(InvalidConfigError):
        TestConfig(max_looks=3, information_schedule=sched)


def test_to_frame_columns():
    df = compute_boundaries(TestConfig(max_looks=3)).to_frame()
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == [
        "look_number",
        "information_fraction",
        "boundary_z",
        "cumulative_alpha",
        "incremental_alpha",
    ]
    assert df["look_number"].tolist() == [1, 2, 3]


@pytest.mark.parametrize("effect", [0.0, 1.5])
def test_futility_boundaries_match_conditional_power(effect):
    bset = compute_boundaries(TestConfig())
    fbs = futility_boundaries(bset, threshold=0.10, assumed_effect=effect)
    assert len(fbs) == len(bset)
    for fb in fbs[:-1]:
        cp = conditional_power(fb.boundary, fb.information_fraction, bset.final_boundary, effect)
        assert abs(cp - 0.10) < 1e-5
        assert fb.conditional_power_threshold == 0.10
    assert fbs[-1].boundary == bset.final_boundary


def test_futility_boundaries_sit_below_efficacy_boundaries():
    bset = compute_boundaries(TestConfig())
    fbs = futility_boundaries(bset)
    for fb, b in zip(fbs[:-1], bset.boundaries[:-1]):
        assert fb.boundary < b


def test_futility_boundaries_degenerate_thresholds():
    bset = compute_boundaries(TestConfig(max_looks=3))
    assert futility_boundaries(bset, threshold=0.0)[0].boundary == -math.inf
    assert futility_boundaries(bset, threshold=1.0)[0].boundary == math.inf
