from __future__ import annotations

import argparse
import sys
from typing import Any, Dict

from seqstop.config import config_from_dict, load_config
from seqstop.schema import BoundaryMethod, Sided, SpendingFunction, TestConfig


def fail(msg: str) -> int:
    print(f"[seqstop][error] {msg}", file=sys.stderr)
    return 2


def _parse_floats_csv(s: str) -> list[float]:
    return [float(p.strip()) for p in str(s).split(",") if p.strip()]


def add_design_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="YAML file with the test design (overrides the flags below).")
    p.add_argument("--max-looks", type=int, default=5)
    p.add_argument("--alpha", type=float, default=0.05)
    p.add_argument("--power", type=float, default=0.8)
    p.add_argument("--sided", choices=[s.value for s in Sided], default=Sided.TWO.value)
    p.add_argument(
        "--spending",
        choices=[s.value for s in SpendingFunction],
        default=SpendingFunction.OBRIEN_FLEMING.value,
    )
    p.add_argument("--rho", type=float, default=1.0, help="Lan-DeMets exponent.")
    p.add_argument(
        "--boundary-method",
        choices=[m.value for m in BoundaryMethod],
        default=BoundaryMethod.EXACT.value,
        help="exact: joint crossing probability across looks; nominal: per-increment normal quantile.",
    )
    p.add_argument("--futility-threshold", type=float, default=0.10)
    p.add_argument("--futility-effect", type=float, default=0.0)
    p.add_argument("--futility-start", type=float, default=0.0)
    p.add_argument("--schedule", default=None, help="Comma-separated information fractions, e.g. 0.3,0.6,1.0")
    p.add_argument("--strict", action="store_true", help="Reject out-of-order looks and looks after a stop.")


def config_from_args(args: Any) -> TestConfig:
    if getattr(args, "config", None):
        return load_config(args.config)

    d: Dict[str, Any] = {
        "max_looks": int(getattr(args, "max_looks", 5)),
        "alpha": float(getattr(args, "alpha", 0.05)),
        "power": float(getattr(args, "power", 0.8)),
        "sided": str(getattr(args, "sided", "two")),
        "spending_function": str(getattr(args, "spending", "obrien_fleming")),
        "rho": float(getattr(args, "rho", 1.0)),
        "boundary_method": str(getattr(args, "boundary_method", "exact")),
        "futility_threshold": float(getattr(args, "futility_threshold", 0.10)),
        "futility_effect": float(getattr(args, "futility_effect", 0.0)),
        "futility_start": float(getattr(args, "futility_start", 0.0)),
        "strict": bool(getattr(args, "strict", False)),
    }
    if getattr(args, "schedule", None):
        d["information_schedule"] = _parse_floats_csv(args.schedule)
    return config_from_dict(d)
