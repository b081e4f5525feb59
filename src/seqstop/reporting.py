from __future__ import annotations

from typing import Dict

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from seqstop.schema import SequentialTestResult, TestStatus
from seqstop.spending import get_spending_function


def _fmt(x) -> str:
    if x is None or not np.isfinite(x):
        return "(n/a)"
    return f"{x:.6g}"


def render_result_md(result: SequentialTestResult) -> str:
    cfg = result.config
    last = result.last

    if last is not None:
        last_block = (
            f"- last look: `{last.look_number}` of `{cfg.max_looks}` (t={last.information_fraction:.3f})\n"
            f"- z: `{_fmt(last.z_score)}` vs boundary `{_fmt(last.critical_boundary)}`\n"
            f"- p-value (two-sided, nominal): `{_fmt(last.p_value)}`\n"
            f"- conditional power (assumed effect {cfg.futility_effect:g}): `{_fmt(last.conditional_power)}`\n"
            f"- alpha spent: `{_fmt(last.alpha_spent)}`, remaining: `{_fmt(last.alpha_remaining)}`"
        )
    else:
        last_block = "- no interim analyses recorded yet"

    bounds = ", ".join(f"{b:.3f}" for b in result.boundaries)
    sched = ", ".join(f"{t:.3f}" for t in result.information_schedule)
    warn_block = ("- " + "\n- ".join(result.warnings)) if result.warnings else "(none)"

    notes = [
        f"Boundaries ({cfg.boundary_method.value}) come from the alpha spending function evaluated on the "
        "information schedule; each look spends its incremental alpha (boundaries floored at 1.0).",
        "The adjusted p-value is a stage-wise approximation obtained by passing the stopping look's "
        "p-value through the spending function; it is not an exact sequential p-value.",
    ]
    if result.status == TestStatus.STOP_FUTILITY:
        notes.append(
            f"Futility: conditional power fell below {cfg.futility_threshold:g} "
            f"under an assumed future effect of {cfg.futility_effect:g}."
        )
    note_block = "\n".join(f"- {x}" for x in notes)

    return f"""# seqstop sequential test report

## Design
- looks: `{cfg.max_looks}`
- alpha: `{cfg.alpha}` ({cfg.sided.value}-sided), power: `{cfg.power}`
- spending function: `{cfg.spending_function.value}`
- information schedule: {sched}
- efficacy boundaries (|z|): {bounds}

## Decision
- status: **{result.status.value}**
- decision: **{result.decision.value if result.decision is not None else "(pending)"}**
- adjusted p-value (approximate): `{_fmt(result.adjusted_p_value)}`

## Last look
{last_block}

## Notes
{note_block}

## Warnings
{warn_block}
"""


def make_boundary_plot(result: SequentialTestResult) -> Figure:
    fig = plt.figure(figsize=(8, 4.5))
    ax = fig.add_subplot(111)
    t = np.asarray(result.information_schedule, dtype=float)
    b = np.asarray(result.boundaries, dtype=float)
    ax.plot(t, b, linestyle="--", marker="o", label="efficacy boundary")
    if result.config.two_sided:
        ax.plot(t, -b, linestyle="--", marker="o", color=ax.lines[-1].get_color())
    if result.analyses:
        lt = result.look_table()
        ax.plot(lt["information_fraction"], lt["z_score"], marker="s", label="observed z")
    ax.axhline(0.0, linewidth=1.0)
    ax.set_title("Sequential z-trajectory vs boundaries")
    ax.set_xlabel("information fraction")
    ax.set_ylabel("z")
    ax.set_xlim(0.0, 1.05)
    ax.legend(loc="best")
    fig.tight_layout()
    return fig


def make_alpha_plot(result: SequentialTestResult) -> Figure:
    cfg = result.config
    spender = get_spending_function(cfg)
    grid = np.linspace(0.0, 1.0, 101)
    fig = plt.figure(figsize=(8, 4.5))
    ax = fig.add_subplot(111)
    ax.plot(grid, [spender.spend(x, cfg.alpha) for x in grid], label=spender.name)
    ax.scatter(
        result.information_schedule,
        [spender.spend(x, cfg.alpha) for x in result.information_schedule],
        zorder=3,
        label="looks",
    )
    ax.axhline(cfg.alpha, linestyle=":", linewidth=1.0)
    ax.set_title("Cumulative alpha spent")
    ax.set_xlabel("information fraction")
    ax.set_ylabel("alpha")
    ax.legend(loc="best")
    fig.tight_layout()
    return fig


def make_result_plots(result: SequentialTestResult) -> Dict[str, Figure]:
    return {
        "z_trajectory": make_boundary_plot(result),
        "alpha_spending": make_alpha_plot(result),
    }
