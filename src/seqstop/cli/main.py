from __future__ import annotations

import argparse

from seqstop.cli.commands.analyze import cmd_analyze
from seqstop.cli.commands.boundaries import cmd_boundaries
from seqstop.cli.commands.common import add_design_args, fail
from seqstop.cli.commands.plan import cmd_plan
from seqstop.cli.commands.run_config import cmd_run_config
from seqstop.cli.commands.simulate import cmd_simulate
from seqstop.cli.commands.version import cmd_version
from seqstop.errors import SequentialTestError


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seqstop", description="Group sequential early-stopping CLI.")
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("version", help="Print installed package version.")
    sp.set_defaults(func=cmd_version)

    sp = sub.add_parser("boundaries", help="Print efficacy and futility boundaries for a design.")
    add_design_args(sp)
    sp.add_argument("--out", default=None, help="Optional bundle directory.")
    sp.set_defaults(func=cmd_boundaries)

    sp = sub.add_parser("plan", help="Sample size per look for a sequential design.")
    add_design_args(sp)
    sp.add_argument("--mde", type=float, required=True, help="Minimal detectable effect.")
    sp.add_argument("--baseline", type=float, default=None, help="Baseline conversion rate.")
    sp.add_argument("--continuous", action="store_true", help="Treat --mde as a standardized mean difference.")
    sp.set_defaults(func=cmd_plan)

    sp = sub.add_parser("analyze", help="Run interim analyses from a CSV of aggregated look statistics.")
    add_design_args(sp)
    sp.add_argument("--input", required=True)
    sp.add_argument("--out", default=None)
    sp.add_argument("--all-looks", action="store_true", help="Keep analysing rows after a stop decision.")
    sp.set_defaults(func=cmd_analyze)

    sp = sub.add_parser("simulate", help="Monte-Carlo operating characteristics of a design.")
    add_design_args(sp)
    sp.add_argument("--n-sims", type=int, default=2000)
    sp.add_argument("--n-per-arm", type=int, default=1000)
    sp.add_argument("--effect", type=float, default=0.0, help="Standardized true effect.")
    sp.add_argument("--noise-sd", type=float, default=1.0)
    sp.add_argument("--seed", type=int, default=42)
    sp.add_argument("--out", default=None)
    sp.set_defaults(func=cmd_simulate)

    sp = sub.add_parser("run-config", help="Run a command described by a YAML file.")
    sp.add_argument("--config", required=True)
    sp.set_defaults(func=cmd_run_config)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    try:
        return int(args.func(args))
    except (SequentialTestError, FileNotFoundError) as exc:
        return fail(str(exc))


if __name__ == "__main__":
    raise SystemExit(main())
