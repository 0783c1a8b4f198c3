"""CLI for fitting adoption probabilities to an observed dataset."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ..analysis.summary import summarize_posterior
from ..data.generator import AdoptionDataset
from ..data.loader import load_adoption_csv
from ..data.types import InferenceMethod, LikelihoodKind
from ..errors import InvalidParameterError
from ..models.config import InferenceConfig
from ..models.posterior import fit_posterior
from ..models.priors import BetaPrior
from ..visualization.posterior import plot_posterior_densities


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m adoption_bayes.cli.fit_dataset",
        description="Estimate per-group adoption probabilities from censored times.",
    )

    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Dataset: .npz written by generate_data, or a CSV table",
    )

    parser.add_argument(
        "--method",
        type=str,
        choices=[m.name.lower() for m in InferenceMethod],
        default="conjugate",
        help="Inference engine (default: conjugate)",
    )

    parser.add_argument(
        "--likelihood",
        type=str,
        choices=[k.name.lower() for k in LikelihoodKind],
        default="censored",
        help="Likelihood for censored subjects (default: censored)",
    )

    parser.add_argument("--prior-alpha", type=float, default=1.0,
                        help="Beta prior alpha (default: 1)")
    parser.add_argument("--prior-beta", type=float, default=5.0,
                        help="Beta prior beta (default: 5)")
    parser.add_argument("--draws", type=int, default=4000,
                        help="Posterior draws per group (default: 4000)")
    parser.add_argument("--credible-interval", type=float, default=0.9,
                        help="Credible interval width (default: 0.9)")

    # CSV columns. Files written by generate_data are recognised by their header.
    parser.add_argument("--time-column", type=str,
                        help="Elapsed time column (default: time, or elapsed_time)")
    parser.add_argument("--outcome-column", type=str,
                        help="Outcome column (default: outcome, or event_occurred)")
    parser.add_argument("--group-column", type=str, default="group")
    parser.add_argument(
        "--event-outcome",
        type=str,
        action="append",
        help="Outcome value counted as the event; repeatable (default: Adoption, or True)",
    )
    parser.add_argument(
        "--groups",
        type=str,
        nargs="+",
        help="Groups to keep, in order (default: all, sorted)",
    )

    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed (default: 42)")
    parser.add_argument(
        "--plot",
        type=Path,
        help="Save a posterior density plot to this path (without extension)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON",
    )

    return parser


def load_dataset(args: argparse.Namespace) -> AdoptionDataset:
    if args.input.suffix == ".npz":
        return AdoptionDataset.load(args.input)

    header = set(pd.read_csv(args.input, nrows=0).columns)
    simulated = {"elapsed_time", "event_occurred"} <= header
    return load_adoption_csv(
        args.input,
        time_column=args.time_column or ("elapsed_time" if simulated else "time"),
        outcome_column=args.outcome_column or ("event_occurred" if simulated else "outcome"),
        group_column=args.group_column,
        event_outcomes=tuple(args.event_outcome or (["True"] if simulated else ["Adoption"])),
        groups=args.groups,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for fit_dataset CLI.

    Returns:
        Exit code.
    """
    args = build_parser().parse_args(argv)

    if not args.input.exists():
        print(f"ERROR: Input file not found: {args.input}", file=sys.stderr)
        return 1

    try:
        dataset = load_dataset(args)
        config = InferenceConfig(
            method=InferenceMethod[args.method.upper()],
            prior=BetaPrior(alpha=args.prior_alpha, beta=args.prior_beta),
            n_draws=args.draws,
            credible_interval=args.credible_interval,
        )
    except (InvalidParameterError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    likelihood = LikelihoodKind[args.likelihood.upper()]
    result = fit_posterior(dataset, config, likelihood, seed=args.seed)
    summaries = summarize_posterior(result, config.credible_interval)

    if args.json:
        print(json.dumps({
            "n_subjects": len(dataset),
            "censoring_rate": dataset.censoring_rate(),
            "posterior": result.to_dict(),
            "summaries": [s.to_dict() for s in summaries],
        }, indent=2, default=str))
    else:
        print(f"Fitted {len(dataset)} subjects "
              f"({dataset.censoring_rate():.1%} censored) "
              f"with {args.method}, {args.likelihood} likelihood")
        width = int(round(100 * config.credible_interval))
        print(f"{'group':<12} {'mean':>8} {'median':>8} {'sd':>8} "
              f"{f'{width}% interval':>20}")
        for s in summaries:
            print(f"{s.group:<12} {s.mean:>8.4f} {s.median:>8.4f} {s.std:>8.4f} "
                  f"   [{s.ci_lower:.4f}, {s.ci_upper:.4f}]")

    if args.plot:
        plot_posterior_densities(result, output_path=args.plot)
        print(f"Plot saved to: {args.plot}.png")

    return 0


if __name__ == "__main__":
    sys.exit(main())
