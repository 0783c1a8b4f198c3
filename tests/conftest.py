"""Shared pytest fixtures for adoption_bayes tests."""

import numpy as np
import pytest

from adoption_bayes.data.censoring import FixedCensoring
from adoption_bayes.data.generator import AdoptionDataset, simulate
from adoption_bayes.data.scenarios import SimulationScenario


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducibility."""
    return 42


@pytest.fixture
def small_dataset():
    """Hand-built dataset with two groups and one censored subject per group."""
    return AdoptionDataset.from_records(
        [
            ("A", 3, True),
            ("A", 5, False),
            ("A", 1, True),
            ("B", 2, True),
            ("B", 4, False),
        ],
        group_labels=["A", "B"],
    )


@pytest.fixture
def empty_dataset():
    """Dataset with one group and no subjects."""
    return AdoptionDataset(
        group=np.array([], dtype=np.int64),
        elapsed_time=np.array([], dtype=np.int64),
        event_occurred=np.array([], dtype=bool),
        group_labels=("A",),
    )


@pytest.fixture
def censored_dataset(random_seed):
    """Two groups, probabilities [0.1, 0.15], 20-step observation window."""
    return simulate(
        n=2000,
        group_probabilities=[0.1, 0.15],
        censoring_policy=FixedCensoring(limit=20),
        seed=random_seed,
    )


@pytest.fixture
def small_scenario():
    """Small fixed-window scenario for fast end-to-end runs."""
    return SimulationScenario(
        name="test_fixed",
        n_subjects=300,
        group_probabilities=[0.1, 0.15],
        censoring=FixedCensoring(limit=20),
    )
