"""
Command-line entry point for the monthly payout forecast.

Usage (from project root):

    python -m payout_forecast.cli data/claims.csv
    python -m payout_forecast.cli data/claims.csv --cluster -k 45 --epsilon 0.1
    python -m payout_forecast.cli data/claims.csv --synthetic 2000

For every forecast month (Jan16 .. Jan17) this script:
1) Re-reads the claim rows and rebuilds the policy payout summaries
2) Optionally clusters policies by payout behaviour
3) Computes one prediction per policy and writes Predictions<Month>.csv
Finally it writes a run manifest with per-phase timings and file hashes.
"""

from __future__ import annotations

import argparse
import datetime
import hashlib
import json
import logging
import platform
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .engine import ForecastEngine
from .generators import generate_claims
from .io import prediction_path, read_claims, write_predictions


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------

def file_hash(path: Path, chunk_size: int = 1 << 16) -> str:
    """SHA-256 hex digest of a written predictions file."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payout-forecast",
        description="Per-policy monthly payout forecast from one year of claims.",
    )
    parser.add_argument("input", nargs="?", type=Path, help="claims CSV file")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="where to write predictions (default: beside the input)")
    parser.add_argument("--months", type=int, nargs="+", default=None,
                        help="forecast month indices (0 = Jan16 ... 12 = Jan17)")
    parser.add_argument("--cluster", action="store_true", default=config.CLUSTERING_ENABLED,
                        help="use cluster centroids as target statistics")
    parser.add_argument("-k", "--clusters", type=int, default=config.DEFAULT_N_CLUSTERS)
    parser.add_argument("--epsilon", type=float, default=config.DEFAULT_EPSILON)
    parser.add_argument("--seed", type=int, default=config.SEED_CLUSTERING)
    parser.add_argument("--synthetic", type=int, metavar="N", default=None,
                        help="first write N synthetic policies' claims to INPUT")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


# -------------------------------------------------------------------
# One forecast month
# -------------------------------------------------------------------

def run_month(month: int, input_path: Path, args: argparse.Namespace) -> dict:
    """Full pipeline for one month; returns the manifest entry."""
    label = config.MONTH_LABELS[month]
    entry: dict = {"month": month, "label": label, "success": False, "timings_ms": {}}

    print()
    print(f"Predictions for {label}")

    start = time.perf_counter()
    print("\t-> retrieving data...", end="")
    claims = read_claims(input_path)
    entry["timings_ms"]["read"] = round(_elapsed_ms(start), 1)
    if not claims:
        print("\n\t✖ no claim rows found")
        entry["diagnostic"] = "no claim rows"
        return entry
    print(f"data retrieved (time: {entry['timings_ms']['read']} ms)")

    engine = ForecastEngine(claims)
    steps = [("calculating summaries", "summaries calculated",
              engine.calculate_policy_summaries)]
    if args.cluster:
        steps.append(("computing clusters", "clusters computed",
                      lambda: engine.compute_clusters(args.clusters, args.epsilon, args.seed)))
    steps.append(("calculating predictions", "predictions calculated",
                  lambda: engine.calculate_predictions(month)))

    for doing, done, phase in steps:
        print(f"\t-> {doing}...", end="")
        result = phase()
        entry["timings_ms"][result.phase] = round(result.elapsed_ms, 1)
        if not result:
            print(f"\n\t✖ {result.phase} failed: {result.diagnostic}")
            entry["diagnostic"] = result.diagnostic
            return entry
        print(f"{done} (time: {entry['timings_ms'][result.phase]} ms)")

    if engine.clusters is not None:
        entry["n_clusters"] = engine.clusters.n_clusters
        entry["cluster_iterations"] = engine.clusters.iterations
        print(f"\tℹ {engine.clusters.n_clusters} clusters after "
              f"{engine.clusters.iterations} iterations")

    start = time.perf_counter()
    print("\t-> saving predictions...", end="")
    out_path = write_predictions(
        engine.predictions, prediction_path(input_path, month, args.output_dir)
    )
    entry["timings_ms"]["write"] = round(_elapsed_ms(start), 1)
    print(f"output data saved (time: {entry['timings_ms']['write']} ms)")

    entry.update(
        success=True,
        policies=len(engine.summaries),
        predictions=len(engine.predictions),
        output=str(out_path),
        sha256=file_hash(out_path),
    )
    return entry


# -------------------------------------------------------------------
# Main entrypoint
# -------------------------------------------------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = args.input
    if input_path is None:
        input_path = Path(input("Enter file path for input CSV data file: ").strip())

    if args.synthetic is not None:
        print(f"▶ Generating {args.synthetic} synthetic policies...")
        input_path.parent.mkdir(parents=True, exist_ok=True)
        generate_claims(n_policies=args.synthetic).to_csv(input_path, index=False)
        print(f"✔ Claims written to {input_path}")

    months = args.months if args.months is not None else list(range(config.N_FORECAST_MONTHS))
    bad = [m for m in months if not 0 <= m < config.N_FORECAST_MONTHS]
    if bad:
        print(f"✖ forecast months must be in 0..{config.N_FORECAST_MONTHS - 1}: {bad}")
        return 2

    entries = []
    for month in months:
        try:
            entries.append(run_month(month, input_path, args))
        except (OSError, ValueError) as exc:
            print(f"\n\t✖ {exc}")
            entries.append({"month": month, "success": False, "diagnostic": str(exc)})

    # ---------------- Run manifest ---------------- #

    manifest = {
        "generated_at_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "entrypoint": "payout_forecast.cli",
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "input": str(input_path),
        "forecast_year": config.FORECAST_YEAR,
        "clustering": {
            "enabled": args.cluster,
            "k": args.clusters,
            "epsilon": args.epsilon,
            "seed": args.seed,
        },
        "months": entries,
    }
    manifest_dir = args.output_dir if args.output_dir is not None else input_path.parent
    manifest_path = Path(manifest_dir) / config.MANIFEST_NAME
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print()
    print(f"✔ Manifest path: {manifest_path}")

    n_failed = sum(1 for e in entries if not e["success"])
    if n_failed:
        print(f"✖ {n_failed} of {len(entries)} forecast months failed")
        return 1

    print("✅ Forecast complete")
    return 0


# -------------------------------------------------------------------
# CLI hook
# -------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
