"""CLI for running naive-vs-censored experiments."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ..data.scenarios import PREDEFINED_SCENARIOS, get_scenario
from ..data.types import InferenceMethod
from ..experiments.config import Experiment
from ..experiments.runner import execute_experiment, run_experiment
from ..models.config import InferenceConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m adoption_bayes.cli.run_experiment",
        description="Compare naive and censored likelihoods over simulated replicates.",
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--config",
        type=Path,
        help="Path to experiment JSON config",
    )
    group.add_argument(
        "--scenario",
        type=str,
        choices=list(PREDEFINED_SCENARIOS.keys()),
        help="Run a predefined scenario with default settings",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs/experiments"),
        help="Output directory (default: outputs/experiments/)",
    )

    parser.add_argument(
        "--replicates",
        type=int,
        default=20,
        help="Replicates when using --scenario (default: 20)",
    )

    parser.add_argument(
        "--method",
        type=str,
        choices=[m.name.lower() for m in InferenceMethod],
        default="conjugate",
        help="Inference engine when using --scenario (default: conjugate)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed when using --scenario (default: 42)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config without running",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress non-error output",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for run_experiment CLI.

    Returns:
        Exit code.
    """
    args = build_parser().parse_args(argv)
    verbose = not args.quiet

    if args.config:
        if not args.config.exists():
            print(f"ERROR: Config file not found: {args.config}", file=sys.stderr)
            return 1
        return run_experiment(
            config_path=args.config,
            output_dir=args.output_dir,
            dry_run=args.dry_run,
            verbose=verbose,
        )

    try:
        experiment = Experiment(
            name=args.scenario,
            seed=args.seed,
            scenario=get_scenario(args.scenario),
            inference=InferenceConfig(method=InferenceMethod[args.method.upper()]),
            n_replicates=args.replicates,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return execute_experiment(
        experiment,
        output_dir=args.output_dir,
        dry_run=args.dry_run,
        verbose=verbose,
    )


if __name__ == "__main__":
    sys.exit(main())
