import json
from pathlib import Path
import sys


STATUSES = {"continue", "stop_efficacy", "stop_futility", "complete"}
DECISIONS = {None, "reject_null", "fail_to_reject"}


def _die(msg: str) -> None:
    print(f"[verify_bundle][FAIL] {msg}", file=sys.stderr)
    raise SystemExit(2)


def _ok(msg: str) -> None:
    print(f"[verify_bundle] {msg}")


def _read_json(p: Path) -> dict:
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception as e:
        _die(f"Failed to read json: {p} ({e})")


def _require_file(p: Path) -> None:
    if not p.exists() or not p.is_file():
        _die(f"Missing file: {p}")
    if p.stat().st_size <= 0:
        _die(f"Empty file: {p}")


def _require_dir(p: Path) -> None:
    if not p.exists() or not p.is_dir():
        _die(f"Missing dir: {p}")


def _is_list_of_str(x) -> bool:
    return isinstance(x, list) and all(isinstance(i, str) for i in x)


def verify_bundle_common(out_dir: Path) -> dict:
    """
    Structural + integrity checks:
      - results.json / run_meta.json exist and are non-empty
      - results.json schema basics
      - artifacts paths exist and non-empty
    """
    _require_dir(out_dir)
    _require_file(out_dir / "results.json")
    _require_file(out_dir / "run_meta.json")

    payload = _read_json(out_dir / "results.json")
    for key in ("command", "artifacts"):
        if key not in payload:
            _die(f"{out_dir}: results.json missing '{key}'")

    artifacts = payload.get("artifacts", {})
    tables = artifacts.get("tables", [])
    plots = artifacts.get("plots", [])
    if not _is_list_of_str(tables):
        _die(f"{out_dir}: artifacts.tables must be list[str]")
    if not _is_list_of_str(plots):
        _die(f"{out_dir}: artifacts.plots must be list[str]")

    for rel in tables + plots:
        _require_file(out_dir / str(rel).replace("\\", "/"))

    return payload


def verify_analyze(out_dir: Path, payload: dict) -> None:
    _require_file(out_dir / "report.md")
    _require_file(out_dir / "tables" / "look_table.csv")
    _require_file(out_dir / "tables" / "boundaries.csv")
    _require_file(out_dir / "plots" / "z_trajectory.png")

    est = payload.get("estimates", {})
    if est.get("status") not in STATUSES:
        _die(f"{out_dir}: unexpected status {est.get('status')!r}")
    if est.get("decision") not in DECISIONS:
        _die(f"{out_dir}: unexpected decision {est.get('decision')!r}")

    bounds = payload.get("boundaries", [])
    sched = payload.get("information_schedule", [])
    if len(bounds) != len(sched) or not bounds:
        _die(f"{out_dir}: boundaries and information_schedule must have the same non-zero length")


def verify_one(out_dir: Path) -> None:
    payload = verify_bundle_common(out_dir)
    cmd = str(payload.get("command", "")).strip()

    if cmd == "analyze":
        verify_analyze(out_dir, payload)
    elif cmd == "boundaries":
        _require_file(out_dir / "tables" / "boundaries.csv")
    elif cmd == "simulate":
        _require_file(out_dir / "tables" / "trials.csv")
    else:
        _ok(f"{out_dir}: unknown command '{cmd}', only common checks applied")

    _ok(f"{out_dir}: OK")


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print("Usage: python ci/verify_bundle.py <out_dir> [<out_dir> ...]")
        return 2

    out_dirs = [Path(a) for a in argv[1:]]
    for d in out_dirs:
        verify_one(d)

    _ok(f"OK ({len(out_dirs)} bundles)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
