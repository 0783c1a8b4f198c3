"""Experiment orchestration and management."""

from .config import Experiment
from .run import ReplicateRun
from .logging import CSVSummaryWriter, ExperimentLogger
from .runner import ExperimentRunner, execute_experiment, run_experiment

__all__ = [
    "Experiment",
    "ReplicateRun",
    "CSVSummaryWriter",
    "ExperimentLogger",
    "ExperimentRunner",
    "execute_experiment",
    "run_experiment",
]
