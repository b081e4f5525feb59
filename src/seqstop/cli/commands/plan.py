from __future__ import annotations

import json

from seqstop.cli.bundle import _safe_json
from seqstop.cli.commands.common import config_from_args
from seqstop.planning import SampleSizePlanner


def cmd_plan(args) -> int:
    cfg = config_from_args(args)
    planner = SampleSizePlanner(cfg)
    is_conversion = not bool(getattr(args, "continuous", False))
    plan = planner.plan(float(args.mde), float(getattr(args, "baseline", 0.0) or 0.0), is_conversion=is_conversion)

    payload = {
        "command": "plan",
        "inputs": {
            "min_detectable_effect": float(args.mde),
            "baseline_rate": getattr(args, "baseline", None),
            "is_conversion": is_conversion,
        },
        "config": cfg.to_dict(),
        "plan": plan,
        "total": plan.total,
    }
    print(json.dumps(_safe_json(payload), indent=2))
    return 0
