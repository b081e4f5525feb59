from __future__ import annotations

from typing import Any

import pandas as pd

from seqstop.cli.bundle import (
    prepare_out_dir,
    save_plot,
    write_report_md,
    write_results_json,
    write_run_meta,
    write_table,
)
from seqstop.cli.commands.common import config_from_args, fail
from seqstop.engine import SequentialTestEngine
from seqstop.reporting import make_result_plots, render_result_md

LOOK_COLUMNS = ["look_number", "n_control", "n_treatment", "mean_control", "mean_treatment", "pooled_std_dev"]


def run_looks(engine: SequentialTestEngine, looks: pd.DataFrame, stop_on_decision: bool = True) -> list[str]:
    """Feed a table of aggregated look statistics through the engine in row order."""
    skipped: list[str] = []
    for i, row in enumerate(looks.itertuples(index=False)):
        engine.analyze(
            row.look_number,
            row.n_control,
            row.n_treatment,
            row.mean_control,
            row.mean_treatment,
            row.pooled_std_dev,
        )
        if stop_on_decision and engine.analyses[-1].stopped and i < len(looks) - 1:
            skipped.append(f"Stopped at look {engine.analyses[-1].look_number}; {len(looks) - i - 1} later row(s) ignored.")
            break
    return skipped


def cmd_analyze(args) -> int:
    looks = pd.read_csv(args.input)
    missing = [c for c in LOOK_COLUMNS if c not in looks.columns]
    if missing:
        return fail(f"Missing required columns: {missing}. Present columns: {list(looks.columns)}")

    cfg = config_from_args(args)
    engine = SequentialTestEngine(cfg)
    skipped = run_looks(engine, looks, stop_on_decision=not bool(getattr(args, "all_looks", False)))

    res = engine.result()
    res.warnings = list(res.warnings) + skipped

    out_dir = prepare_out_dir(getattr(args, "out", None), command="analyze")
    write_run_meta(out_dir, vars(args), extra={"command": "analyze"})

    artifacts: dict[str, Any] = {"report_md": "report.md", "plots": [], "tables": []}
    artifacts["tables"].append(write_table(out_dir, "look_table", res.look_table()))
    artifacts["tables"].append(write_table(out_dir, "boundaries", engine.boundary_set.to_frame()))

    for name, fig in make_result_plots(res).items():
        artifacts["plots"].append(save_plot(out_dir, name, fig))

    payload: dict[str, Any] = {
        "command": "analyze",
        "inputs": {"input": args.input, "n_rows": int(len(looks))},
        "config": cfg.to_dict(),
        "estimates": {
            "status": res.status.value,
            "decision": res.decision.value if res.decision is not None else None,
            "adjusted_p_value": res.adjusted_p_value,
            "last_look": res.last.to_dict() if res.last is not None else None,
        },
        "boundaries": res.boundaries,
        "information_schedule": res.information_schedule,
        "warnings": res.warnings,
        "artifacts": artifacts,
    }

    write_results_json(out_dir, payload)
    write_report_md(out_dir, render_result_md(res))
    print(f"{res.status.value}: {payload['estimates']['decision'] or 'pending'} -> {out_dir}")
    return 0
