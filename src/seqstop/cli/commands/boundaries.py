from __future__ import annotations

from typing import Any

from seqstop.boundaries import compute_boundaries, futility_boundaries
from seqstop.cli.bundle import prepare_out_dir, write_results_json, write_run_meta, write_table
from seqstop.cli.commands.common import config_from_args


def cmd_boundaries(args) -> int:
    cfg = config_from_args(args)
    bset = compute_boundaries(cfg)
    table = bset.to_frame()
    table["futility_z"] = [fb.boundary for fb in futility_boundaries(bset, cfg.futility_threshold, cfg.futility_effect)]

    print(table.to_string(index=False))

    if getattr(args, "out", None):
        out_dir = prepare_out_dir(args.out, command="boundaries")
        write_run_meta(out_dir, vars(args), extra={"command": "boundaries"})
        artifacts: dict[str, Any] = {"tables": [write_table(out_dir, "boundaries", table)]}
        write_results_json(
            out_dir,
            {
                "command": "boundaries",
                "config": cfg.to_dict(),
                "boundaries": list(bset.boundaries),
                "information_schedule": list(bset.information_schedule),
                "floored_looks": list(bset.floored),
                "artifacts": artifacts,
            },
        )
    return 0
