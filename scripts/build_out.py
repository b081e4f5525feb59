from __future__ import annotations

import argparse
import shutil
import subprocess
from pathlib import Path


def run(cmd: list[str]) -> None:
    print("+", " ".join(cmd))
    subprocess.run(cmd, check=True)


def main() -> int:
    p = argparse.ArgumentParser(description="Build out/ bundles (same as CI).")
    p.add_argument("--out", default="out", help="Output directory (default: out)")
    p.add_argument("--clean", action="store_true", help="Remove out/ before building")
    args = p.parse_args()

    out = Path(args.out)
    if args.clean and out.exists():
        shutil.rmtree(out)

    run(["seqstop", "--help"])
    run(["seqstop", "version"])

    run(["seqstop", "boundaries", "--max-looks", "5", "--spending", "obrien_fleming", "--out", str(out / "boundaries_obf")])
    run(["seqstop", "boundaries", "--max-looks", "5", "--spending", "pocock", "--out", str(out / "boundaries_pocock")])
    run(["seqstop", "plan", "--baseline", "0.10", "--mde", "0.02", "--max-looks", "5"])

    run([
        "seqstop", "analyze",
        "--input", "examples/example_looks.csv",
        "--futility-start", "0.5",
        "--out", str(out / "analyze_example"),
    ])

    run([
        "seqstop", "simulate",
        "--n-sims", "500",
        "--n-per-arm", "2000",
        "--effect", "0.0",
        "--seed", "123",
        "--out", str(out / "simulate_null"),
    ])

    run([
        "python", "ci/verify_bundle.py",
        str(out / "boundaries_obf"),
        str(out / "analyze_example"),
        str(out / "simulate_null"),
    ])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
