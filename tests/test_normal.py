import math

import numpy as np
from scipy.stats import norm

from seqstop.normal import cdf, quantile, two_sided_p_value


def test_cdf_matches_reference_values():
    xs = np.linspace(-6.0, 6.0, 121)
    ours = np.array([cdf(x) for x in xs])
    assert np.max(np.abs(ours - norm.cdf(xs))) < 1e-6


def test_cdf_special_points():
    assert cdf(0.0) == 0.5
    assert cdf(math.inf) == 1.0
    assert cdf(-math.inf) == 0.0
    assert math.isnan(cdf(math.nan))
    assert abs(cdf(1.96) - 0.975) < 1e-4


def test_quantile_matches_reference_values():
    ps = np.concatenate([[1e-6, 1e-4, 0.001, 0.01, 0.02425], np.linspace(0.05, 0.95, 19), [0.99, 0.999, 1 - 1e-6]])
    ours = np.array([quantile(p) for p in ps])
    assert np.max(np.abs(ours - norm.ppf(ps))) < 1e-6


def test_quantile_special_points():
    assert quantile(0.5) == 0.0
    assert quantile(0.0) == -math.inf
    assert quantile(-0.1) == -math.inf
    assert quantile(1.0) == math.inf
    assert quantile(1.5) == math.inf


def test_cdf_inverts_quantile():
    for p in np.linspace(0.001, 0.999, 999):
        assert abs(cdf(quantile(p)) - p) < 1e-6


def test_two_sided_p_value_is_symmetric():
    assert two_sided_p_value(0.0) == 1.0
    assert abs(two_sided_p_value(1.96) - 0.05) < 1e-4
    assert two_sided_p_value(-2.5) == two_sided_p_value(2.5)
