from __future__ import annotations

from types import SimpleNamespace
from typing import Any

from seqstop.cli.commands.analyze import cmd_analyze
from seqstop.cli.commands.boundaries import cmd_boundaries
from seqstop.cli.commands.common import fail
from seqstop.cli.commands.plan import cmd_plan
from seqstop.cli.commands.simulate import cmd_simulate
from seqstop.config import load_yaml


def _as_args(d: dict[str, Any]) -> SimpleNamespace:
    # cmd_* functions expect attribute access (args.foo)
    return SimpleNamespace(**d)


def cmd_run_config(args) -> int:
    cfg_path = str(args.config)
    cfg = load_yaml(cfg_path)

    command = str(cfg.get("command", "")).strip()
    if not command:
        return fail("Missing required field: command")

    params = cfg.get("params", {}) or {}
    if not isinstance(params, dict):
        return fail("Field `params` must be a mapping (YAML dict).")

    # The design is read from the `test:` section of the same file.
    base_args: dict[str, Any] = {"config": cfg_path, "out": cfg.get("out", None)}

    if command == "analyze":
        if cfg.get("input") is None:
            return fail("analyze requires `input`")
        merged = {**base_args, "input": cfg["input"], "all_looks": bool(params.get("all_looks", False))}
        return int(cmd_analyze(_as_args(merged)))

    if command == "boundaries":
        return int(cmd_boundaries(_as_args(base_args)))

    if command == "plan":
        if params.get("mde") is None:
            return fail("plan requires params.mde")
        merged = {
            **base_args,
            "mde": float(params["mde"]),
            "baseline": params.get("baseline"),
            "continuous": bool(params.get("continuous", False)),
        }
        return int(cmd_plan(_as_args(merged)))

    if command == "simulate":
        merged = {
            **base_args,
            "n_sims": int(params.get("n_sims", 2000)),
            "n_per_arm": int(params.get("n_per_arm", 1000)),
            "effect": float(params.get("effect", 0.0)),
            "noise_sd": float(params.get("noise_sd", 1.0)),
            "seed": int(params.get("seed", 42)),
        }
        return int(cmd_simulate(_as_args(merged)))

    return fail(f"Unknown command: {command}")
