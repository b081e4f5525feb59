"""Group sequential early stopping for A/B experiments.

This package decides, at each interim look of a running experiment, whether
the accumulated data justify stopping early:

* for efficacy, when |z| crosses a boundary derived from an alpha spending
  function (O'Brien-Fleming, Pocock, Haybittle-Peto, Lan-DeMets);
* for futility, when conditional power of reaching the final boundary drops
  below a threshold.

Interim statistics (sample sizes, means, pooled std dev) are supplied already
aggregated. ``SequentialTestEngine`` owns the design and an append-only log
of analyses; status and decision are derived from the log.
"""

from seqstop.errors import (
    ExperimentStoppedError,
    InvalidConfigError,
    InvalidInputError,
    InvalidLookNumberError,
    LookOrderError,
    SequentialTestError,
)
from seqstop.schema import (
    BoundaryMethod,
    Decision,
    InterimAnalysis,
    SequentialTestResult,
    Sided,
    SpendingFunction,
    TestConfig,
    TestStatus,
)
from seqstop.normal import cdf, quantile
from seqstop.spending import get_spending_function
from seqstop.boundaries import BoundarySet, compute_boundaries, futility_boundaries, information_schedule
from seqstop.interim import InterimAnalyzer, conditional_power, reduce_status
from seqstop.planning import SamplePlan, SampleSizePlanner
from seqstop.engine import SequentialTestEngine
from seqstop.convenience import obrien_fleming_boundaries, sequential_sample_size, should_stop_early
