from __future__ import annotations

from typing import Any

from seqstop.cli.bundle import prepare_out_dir, write_results_json, write_run_meta, write_table
from seqstop.cli.commands.common import config_from_args
from seqstop.simulate import SimulationConfig, simulate_design


def cmd_simulate(args) -> int:
    cfg = config_from_args(args)
    sim_cfg = SimulationConfig(
        n_sims=int(getattr(args, "n_sims", 2000)),
        n_per_arm=int(getattr(args, "n_per_arm", 1000)),
        effect=float(getattr(args, "effect", 0.0)),
        noise_sd=float(getattr(args, "noise_sd", 1.0)),
        seed=int(getattr(args, "seed", 42)),
    )
    summary = simulate_design(cfg, sim_cfg)

    print(
        f"rejection_rate={summary.rejection_rate:.4f} futility_rate={summary.futility_rate:.4f} "
        f"expected_stop_look={summary.expected_stop_look:.3f}"
    )

    if getattr(args, "out", None):
        out_dir = prepare_out_dir(args.out, command="simulate")
        write_run_meta(out_dir, vars(args), extra={"command": "simulate"})
        artifacts: dict[str, Any] = {"tables": [write_table(out_dir, "trials", summary.trials)]}
        write_results_json(
            out_dir,
            {
                "command": "simulate",
                "inputs": {"sim_config": sim_cfg.__dict__, "config": cfg.to_dict()},
                "estimates": summary.to_dict(),
                "artifacts": artifacts,
            },
        )
    return 0
