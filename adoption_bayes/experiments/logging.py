"""Experiment logging utilities for CSV and JSON."""

import csv
import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from ..analysis.summary import PosteriorSummary


class CSVSummaryWriter:
    """CSV writer for posterior summaries.

    Writes one row per group and likelihood.

    Args:
        output_path: Path to CSV file.
        replicate: Replicate index written on every row.
        append: If True, append to existing file.
    """

    FIELDNAMES = [
        "replicate",
        "likelihood",
        "group",
        "true_probability",
        "mean",
        "median",
        "std",
        "ci_lower",
        "ci_upper",
        "credible_interval",
        "n_draws",
    ]

    def __init__(
        self,
        output_path: Union[str, Path],
        replicate: int = 0,
        append: bool = False,
    ):
        self.output_path = Path(output_path)
        self.replicate = replicate
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        mode = "a" if append and self.output_path.exists() else "w"
        self.file = open(self.output_path, mode, newline="")
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES)

        # Write header if new file
        if mode == "w":
            self.writer.writeheader()

    def write(
        self,
        summary: PosteriorSummary,
        likelihood: str,
        true_probability: Optional[float] = None,
    ) -> None:
        """Write one posterior summary to CSV.

        Args:
            summary: Summary of one group's posterior.
            likelihood: Likelihood name ("censored" or "naive").
            true_probability: Simulation probability, if known.
        """
        row = {
            "replicate": self.replicate,
            "likelihood": likelihood,
            "true_probability": true_probability if true_probability is not None else "",
            **summary.to_dict(),
        }
        self.writer.writerow(row)
        self.file.flush()

    def close(self) -> None:
        """Close the CSV file."""
        self.file.close()


class ExperimentLogger:
    """Logger for one replicate of an experiment.

    Args:
        experiment_dir: Base directory for experiment outputs.
        run_id: Run identifier.
        replicate: Replicate index.
    """

    def __init__(
        self,
        experiment_dir: Union[str, Path],
        run_id: str,
        replicate: int = 0,
    ):
        self.experiment_dir = Path(experiment_dir)
        self.run_id = run_id
        self.replicate = replicate

        # Setup run directory
        self.run_dir = self.experiment_dir / "runs" / run_id
        self.run_dir.mkdir(parents=True, exist_ok=True)

        csv_path = self.run_dir / "posterior_summary.csv"
        self.csv_writer = CSVSummaryWriter(csv_path, replicate=replicate)

    def log_summaries(
        self,
        summaries: Sequence[PosteriorSummary],
        likelihood: str,
        true_probabilities: Optional[Sequence[float]] = None,
    ) -> None:
        """Log the summaries of every group for one likelihood.

        Args:
            summaries: Summaries in group label order.
            likelihood: Likelihood name.
            true_probabilities: Simulation probabilities in label order.
        """
        for i, summary in enumerate(summaries):
            truth = true_probabilities[i] if true_probabilities is not None else None
            self.csv_writer.write(summary, likelihood, truth)

    def log_run_info(self, info: Dict[str, Any]) -> None:
        """Log run information to JSON file.

        Args:
            info: Dictionary of run information.
        """
        info_path = self.run_dir / "run_info.json"
        with open(info_path, "w") as f:
            json.dump(info, f, indent=2, default=str)

    def close(self) -> None:
        """Close all writers."""
        self.csv_writer.close()
