#!/usr/bin/env python3
"""Naive-likelihood bias as a function of the censoring rate.

Runs one experiment per target censoring rate, with the censoring policy
calibrated to that rate, and collects the mean bias of both likelihoods
into a single table.

Usage:
    python scripts/run_censoring_sweep.py --rates 0,0.1,0.2,0.4 --replicates 20
    python scripts/run_censoring_sweep.py --rates 0.1,0.3 --kind fixed --method grid
"""

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Dict, List

import numpy as np

from adoption_bayes.data.censoring import calibrate_censoring
from adoption_bayes.data.scenarios import SimulationScenario
from adoption_bayes.data.types import CensoringKind, InferenceMethod, RunStatus
from adoption_bayes.experiments.config import Experiment
from adoption_bayes.experiments.runner import ExperimentRunner
from adoption_bayes.models.config import InferenceConfig


DEFAULT_RATES = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5]


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Sweep the censoring rate and compare naive vs censored bias.",
    )

    parser.add_argument(
        "--rates",
        type=str,
        help="Comma-separated target censoring rates (default: 0 to 0.5)",
    )
    parser.add_argument(
        "--probabilities",
        type=str,
        default="0.1,0.15",
        help="Comma-separated group probabilities (default: 0.1,0.15)",
    )
    parser.add_argument(
        "--kind",
        type=str,
        choices=["fixed", "random"],
        default="random",
        help="Censoring policy to calibrate (default: random)",
    )
    parser.add_argument(
        "--method",
        type=str,
        choices=[m.name.lower() for m in InferenceMethod],
        default="conjugate",
        help="Inference engine (default: conjugate)",
    )
    parser.add_argument("--n-subjects", type=int, default=1000)
    parser.add_argument("--replicates", type=int, default=20)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs/censoring_sweep"),
        help="Base output directory (default: outputs/censoring_sweep/)",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress per-replicate output",
    )

    return parser.parse_args()


def parse_floats(text: str) -> List[float]:
    return [float(s.strip()) for s in text.split(",") if s.strip()]


def run_sweep(
    rates: List[float],
    probabilities: List[float],
    kind: CensoringKind,
    inference: InferenceConfig,
    n_subjects: int,
    n_replicates: int,
    seed: int,
    output_dir: Path,
    verbose: bool = True,
) -> List[Dict]:
    """Run one experiment per censoring rate.

    Returns:
        One row per (rate, group) with the mean bias of both likelihoods.
    """
    rows = []
    calibrate_at = float(np.mean(probabilities))

    for rate in rates:
        policy = calibrate_censoring(calibrate_at, rate, kind)
        print(f"\n[rate={rate:.2f}] policy={policy.to_dict()}", file=sys.stderr)

        scenario = SimulationScenario(
            name=f"censoring_{int(round(100 * rate)):02d}",
            description=f"Calibrated to {rate:.0%} censoring at p={calibrate_at:.3f}",
            n_subjects=n_subjects,
            group_labels=[chr(ord("A") + i) for i in range(len(probabilities))],
            group_probabilities=probabilities,
            censoring=policy,
        )
        experiment = Experiment(
            name=f"sweep_{scenario.name}",
            seed=seed,
            scenario=scenario,
            inference=inference,
            n_replicates=n_replicates,
            experiment_id=scenario.name,
        )

        runner = ExperimentRunner(experiment, output_dir, verbose=verbose)
        if runner.run() != RunStatus.COMPLETED:
            print(f"  FAILED at rate {rate}", file=sys.stderr)
            continue

        summary_path = output_dir / experiment.experiment_id / "results" / "bias_summary.json"
        with open(summary_path, "r") as f:
            summary = json.load(f)

        for group, entry in summary.items():
            rows.append({
                "target_rate": rate,
                "group": group,
                "true_probability": entry["true_probability"],
                "expected_censoring_rate": entry["expected_censoring_rate"],
                "censored_mean_bias": entry["censored"]["mean_bias"],
                "naive_mean_bias": entry["naive"]["mean_bias"],
                "censored_mae": entry["censored"]["mean_absolute_error"],
                "naive_mae": entry["naive"]["mean_absolute_error"],
            })

    return rows


def main() -> int:
    """Main entry point."""
    args = parse_args()

    rates = parse_floats(args.rates) if args.rates else DEFAULT_RATES
    probabilities = parse_floats(args.probabilities)
    inference = InferenceConfig(method=InferenceMethod[args.method.upper()])

    try:
        rows = run_sweep(
            rates=rates,
            probabilities=probabilities,
            kind=CensoringKind[args.kind.upper()],
            inference=inference,
            n_subjects=args.n_subjects,
            n_replicates=args.replicates,
            seed=args.seed,
            output_dir=args.output_dir,
            verbose=not args.quiet,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if not rows:
        print("ERROR: No experiment completed", file=sys.stderr)
        return 2

    table_path = args.output_dir / "sweep_summary.csv"
    with open(table_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)

    print(f"\n{'rate':>6} {'group':<6} {'censored':>10} {'naive':>10}")
    for row in rows:
        print(f"{row['target_rate']:>6.2f} {row['group']:<6} "
              f"{row['censored_mean_bias']:>+10.4f} {row['naive_mean_bias']:>+10.4f}")
    print(f"\nSummary saved to: {table_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
