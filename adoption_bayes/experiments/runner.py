"""Experiment runner for naive-vs-censored replicates."""

import csv
import json
import sys
from pathlib import Path
from typing import List, Union

from .config import Experiment
from .logging import ExperimentLogger
from .run import ReplicateRun
from ..analysis.bias import BiasReport, aggregate_bias, bias_reports
from ..analysis.summary import summarize_posterior
from ..data.censoring import expected_censoring_rate
from ..data.generator import simulate
from ..data.types import LikelihoodKind, RunStatus
from ..models.posterior import fit_posterior
from ..visualization.posterior import plot_bias_comparison


class ExperimentRunner:
    """Orchestrates experiment execution.

    Handles:
    - Simulating one dataset per replicate
    - Fitting each dataset with the censored and naive likelihoods
    - Logging posterior summaries per replicate
    - Aggregating the bias across replicates

    Args:
        experiment: Experiment configuration.
        output_dir: Output directory for results.
        verbose: Whether to print progress.
    """

    def __init__(
        self,
        experiment: Experiment,
        output_dir: Union[str, Path],
        verbose: bool = True,
    ):
        self.experiment = experiment
        self.output_dir = Path(output_dir) / experiment.experiment_id
        self.verbose = verbose

        self._setup_directories()

        self.runs: List[ReplicateRun] = []
        self.reports: List[BiasReport] = []

    def _setup_directories(self) -> None:
        """Create output directory structure."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / "runs").mkdir(exist_ok=True)
        (self.output_dir / "results").mkdir(exist_ok=True)
        if self.experiment.save_data:
            (self.output_dir / "data").mkdir(exist_ok=True)

    def run(self) -> RunStatus:
        """Execute every replicate and aggregate the results.

        Returns:
            Final experiment status.
        """
        try:
            self.experiment.to_json(self.output_dir / "config.json")

            scenario = self.experiment.scenario
            self.experiment.start()
            self._log(f"Starting experiment: {self.experiment.name}")
            self._log(f"Scenario: {scenario.name} "
                      f"({scenario.n_subjects} subjects, "
                      f"censoring={scenario.censoring.to_dict()})")
            self._log(f"Engine: {self.experiment.inference.method.name.lower()}, "
                      f"{self.experiment.n_replicates} replicates")

            seeds = self.experiment.replicate_seeds()
            n_failed = 0
            for replicate, seed in enumerate(seeds):
                self._log(f"\n[{replicate + 1}/{len(seeds)}] seed={seed}")
                if not self._run_replicate(replicate, seed):
                    n_failed += 1

            if self.reports:
                self._aggregate_results()

            if n_failed == 0:
                self.experiment.complete()
                self._log("\nExperiment completed successfully!")
            elif n_failed < len(seeds):
                self.experiment.complete()
                self._log(f"\nExperiment completed with {n_failed} failed replicates")
            else:
                self.experiment.fail()
                self._log("\nExperiment failed: all replicates failed")

            self.experiment.to_json(self.output_dir / "config.json")
            return self.experiment.status

        except Exception as e:
            self.experiment.fail()
            self._log(f"\nExperiment failed with error: {e}")
            return RunStatus.FAILED

    def _run_replicate(self, replicate: int, seed: int) -> bool:
        """Simulate and fit one replicate.

        Args:
            replicate: Replicate index.
            seed: Seed for simulation and fitting.

        Returns:
            True if the replicate succeeded.
        """
        scenario = self.experiment.scenario
        config = self.experiment.inference

        run = ReplicateRun.create(self.experiment.experiment_id, replicate, seed)
        logger = ExperimentLogger(self.output_dir, run.run_id, replicate)
        run.start()

        try:
            dataset = simulate(
                n=scenario.n_subjects,
                group_probabilities=scenario.group_probabilities,
                censoring_policy=scenario.censoring,
                seed=seed,
                group_labels=scenario.group_labels,
            )
            if self.experiment.save_data:
                dataset.save(self.output_dir / "data" / f"{run.run_id}.npz")

            results = {}
            for likelihood in LikelihoodKind:
                result = fit_posterior(dataset, config, likelihood, seed)
                summaries = summarize_posterior(result, config.credible_interval)
                logger.log_summaries(
                    summaries, likelihood.name.lower(), scenario.group_probabilities
                )
                results[likelihood] = result

            reports = bias_reports(
                dataset,
                scenario.group_probabilities,
                censored=results[LikelihoodKind.CENSORED],
                naive=results[LikelihoodKind.NAIVE],
                replicate=replicate,
            )
            self.reports.extend(reports)

            run.complete(len(dataset), dataset.censoring_rate())
            for report in reports:
                self._log(f"  {report.group}: true={report.true_probability:.3f} "
                          f"censored={report.censored_mean:.4f} "
                          f"naive={report.naive_mean:.4f} "
                          f"(censored {report.censoring_rate:.1%})")
            success = True

        except Exception as e:
            run.fail(str(e))
            self._log(f"  ERROR: {e}")
            success = False

        finally:
            logger.log_run_info(run.to_dict())
            logger.close()

        self.runs.append(run)
        return success

    def _aggregate_results(self) -> None:
        """Aggregate bias reports and create summary files."""
        results_dir = self.output_dir / "results"

        rows = [report.to_dict() for report in self.reports]
        with open(results_dir / "bias_reports.csv", "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)

        scenario = self.experiment.scenario
        summary = aggregate_bias(self.reports)
        for label, probability in zip(scenario.group_labels, scenario.group_probabilities):
            if label in summary:
                summary[label]["true_probability"] = probability
                summary[label]["expected_censoring_rate"] = expected_censoring_rate(
                    probability, scenario.censoring
                )

        with open(results_dir / "bias_summary.json", "w") as f:
            json.dump(summary, f, indent=2, default=str)

        plot_bias_comparison(
            self.reports,
            results_dir / "bias_comparison",
            title=f"{self.experiment.name}: bias across {len(self.runs)} replicates",
        )

        for label, entry in summary.items():
            self._log(f"\n{label}: naive bias {entry['naive']['mean_bias']:+.4f}, "
                      f"censored bias {entry['censored']['mean_bias']:+.4f}")

    def _log(self, message: str) -> None:
        """Log a message if verbose mode is enabled."""
        if self.verbose:
            print(message, file=sys.stderr)


def run_experiment(
    config_path: Union[str, Path],
    output_dir: Union[str, Path] = "outputs/experiments",
    dry_run: bool = False,
    verbose: bool = True,
) -> int:
    """Run an experiment from a config file.

    Args:
        config_path: Path to experiment config JSON.
        output_dir: Base output directory.
        dry_run: If True, validate config without running.
        verbose: Whether to print progress.

    Returns:
        Exit code (0=success, 1=config error, 2=runtime error).
    """
    try:
        experiment = Experiment.from_json(config_path)
    except Exception as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    return execute_experiment(experiment, output_dir, dry_run, verbose)


def execute_experiment(
    experiment: Experiment,
    output_dir: Union[str, Path] = "outputs/experiments",
    dry_run: bool = False,
    verbose: bool = True,
) -> int:
    """Run an already constructed experiment.

    Returns:
        Exit code (0=success, 2=runtime error).
    """
    if dry_run:
        print(f"Config validation successful: {experiment.name}")
        print(f"  Experiment ID: {experiment.experiment_id}")
        print(f"  Scenario: {experiment.scenario.name}")
        print(f"  Replicates: {experiment.n_replicates}")
        return 0

    runner = ExperimentRunner(
        experiment=experiment,
        output_dir=output_dir,
        verbose=verbose,
    )
    status = runner.run()

    return 0 if status == RunStatus.COMPLETED else 2
