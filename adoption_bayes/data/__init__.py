"""Data generation and loading modules for adoption-time experiments."""

from .types import CensoringKind, LikelihoodKind, InferenceMethod, RunStatus
from .censoring import (
    CensoringPolicy,
    NoCensoring,
    FixedCensoring,
    RandomCensoring,
    censoring_policy_from_dict,
    apply_censoring,
    expected_censoring_rate,
    calibrate_censoring,
    validate_censoring_rate,
)
from .scenarios import SimulationScenario, get_scenario, PREDEFINED_SCENARIOS
from .generator import AdoptionDataGenerator, AdoptionDataset, SubjectRecord, simulate
from .loader import dataset_from_frame, load_adoption_csv

__all__ = [
    # Types
    "CensoringKind",
    "LikelihoodKind",
    "InferenceMethod",
    "RunStatus",
    # Censoring
    "CensoringPolicy",
    "NoCensoring",
    "FixedCensoring",
    "RandomCensoring",
    "censoring_policy_from_dict",
    "apply_censoring",
    "expected_censoring_rate",
    "calibrate_censoring",
    "validate_censoring_rate",
    # Scenarios
    "SimulationScenario",
    "get_scenario",
    "PREDEFINED_SCENARIOS",
    # Generator
    "AdoptionDataGenerator",
    "AdoptionDataset",
    "SubjectRecord",
    "simulate",
    # Loader
    "dataset_from_frame",
    "load_adoption_csv",
]
