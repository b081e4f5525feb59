import json

import pandas as pd

from seqstop.cli.main import main


def _write_looks(path, z_trend):
    rows = []
    for k, mt in enumerate(z_trend, start=1):
        n = 2000 * k
        rows.append(
            {
                "look_number": k,
                "n_control": n,
                "n_treatment": n,
                "mean_control": 0.10,
                "mean_treatment": mt,
                "pooled_std_dev": 0.30,
            }
        )
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_version(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out.strip() != ""


def test_boundaries_prints_table(capsys, tmp_path):
    out = tmp_path / "bounds"
    assert main(["boundaries", "--max-looks", "3", "--spending", "pocock", "--out", str(out)]) == 0
    text = capsys.readouterr().out
    assert "boundary_z" in text
    assert "futility_z" in text

    payload = json.loads((out / "results.json").read_text(encoding="utf-8"))
    assert payload["command"] == "boundaries"
    assert len(payload["boundaries"]) == 3
    assert (out / "tables" / "boundaries.csv").exists()
    assert (out / "run_meta.json").exists()


def test_plan_prints_json(capsys):
    assert main(["plan", "--mde", "0.02", "--baseline", "0.10"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "plan"
    assert payload["total"] == payload["plan"]["per_look"][-1]
    assert len(payload["plan"]["per_look"]) == 5


def test_analyze_writes_bundle(tmp_path):
    csv = _write_looks(tmp_path / "looks.csv", [0.101, 0.102, 0.103, 0.104, 0.105])
    out = tmp_path / "out"
    code = main(["analyze", "--input", str(csv), "--out", str(out), "--futility-start", "0.5"])
    assert code == 0

    for rel in (
        "results.json",
        "run_meta.json",
        "report.md",
        "tables/look_table.csv",
        "tables/boundaries.csv",
        "plots/z_trajectory.png",
        "plots/alpha_spending.png",
    ):
        assert (out / rel).exists(), rel

    payload = json.loads((out / "results.json").read_text(encoding="utf-8"))
    assert payload["command"] == "analyze"
    assert payload["estimates"]["status"] in {"continue", "stop_efficacy", "stop_futility", "complete"}
    assert len(payload["boundaries"]) == len(payload["information_schedule"]) == 5

    look_table = pd.read_csv(out / "tables" / "look_table.csv")
    assert len(look_table) >= 1
    assert "z_score" in look_table.columns

    report = (out / "report.md").read_text(encoding="utf-8")
    assert "## Decision" in report


def test_analyze_stops_at_efficacy_and_skips_later_rows(tmp_path):
    csv = _write_looks(tmp_path / "looks.csv", [0.10, 0.14, 0.14, 0.14, 0.14])
    out = tmp_path / "out"
    assert main(["analyze", "--input", str(csv), "--out", str(out), "--futility-start", "0.5"]) == 0

    payload = json.loads((out / "results.json").read_text(encoding="utf-8"))
    assert payload["estimates"]["status"] == "stop_efficacy"
    assert payload["estimates"]["decision"] == "reject_null"
    assert payload["estimates"]["last_look"]["look_number"] == 2
    assert any("later row(s) ignored" in w for w in payload["warnings"])


def test_analyze_missing_columns(tmp_path, capsys):
    csv = tmp_path / "bad.csv"
    pd.DataFrame({"look_number": [1], "n_control": [10]}).to_csv(csv, index=False)
    assert main(["analyze", "--input", str(csv), "--out", str(tmp_path / "out")]) == 2
    assert "[seqstop][error]" in capsys.readouterr().err


def test_errors_exit_with_code_2(tmp_path, capsys):
    assert main(["boundaries", "--alpha", "1.5"]) == 2
    assert "SEQ_INVALID_CONFIG" in capsys.readouterr().err

    assert main(["analyze", "--input", str(tmp_path / "nope.csv")]) == 2

    csv = _write_looks(tmp_path / "looks.csv", [0.10])
    csv_df = pd.read_csv(csv)
    csv_df.loc[0, "look_number"] = 9
    csv_df.to_csv(csv, index=False)
    assert main(["analyze", "--input", str(csv), "--out", str(tmp_path / "out")]) == 2
    assert "SEQ_INVALID_LOOK" in capsys.readouterr().err


def test_run_config(tmp_path):
    csv = _write_looks(tmp_path / "looks.csv", [0.101, 0.102, 0.103])
    out = tmp_path / "bundle"
    cfg = tmp_path / "run.yaml"
    cfg.write_text(
        f"command: analyze\n"
        f"input: {csv.as_posix()}\n"
        f"out: {out.as_posix()}\n"
        f"test:\n"
        f"  maxLooks: 3\n"
        f"  spendingFunction: obrien-fleming\n"
        f"  futilityStart: 0.5\n"
        f"params:\n"
        f"  all_looks: true\n",
        encoding="utf-8",
    )
    assert main(["run-config", "--config", str(cfg)]) == 0
    payload = json.loads((out / "results.json").read_text(encoding="utf-8"))
    assert payload["config"]["max_looks"] == 3
    assert (out / "report.md").exists()


def test_simulate_bundle(tmp_path, capsys):
    out = tmp_path / "sim"
    args = ["simulate", "--n-sims", "50", "--n-per-arm", "200", "--seed", "5", "--out", str(out)]
    assert main(args) == 0
    assert "rejection_rate=" in capsys.readouterr().out
    assert (out / "tables" / "trials.csv").exists()
    payload = json.loads((out / "results.json").read_text(encoding="utf-8"))
    assert 0.0 <= payload["estimates"]["rejection_rate"] <= 1.0


def test_analyze_missing_look_number_reports_error(tmp_path, capsys):
    csv = _write_looks(tmp_path / "looks.csv", [0.10, 0.11])
    df = pd.read_csv(csv)
    df["look_number"] = df["look_number"].astype(float)
    df.loc[1, "look_number"] = float("nan")
    df.to_csv(csv, index=False)
    assert main(["analyze", "--input", str(csv), "--out", str(tmp_path / "out"), "--futility-start", "0.5"]) == 2
    assert "SEQ_INVALID_LOOK" in capsys.readouterr().err
