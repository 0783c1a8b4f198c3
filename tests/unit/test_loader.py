"""Unit tests for loading observed adoption records."""

import numpy as np
import pandas as pd
import pytest

from adoption_bayes.data.censoring import FixedCensoring
from adoption_bayes.data.generator import simulate
from adoption_bayes.data.loader import dataset_from_frame, load_adoption_csv
from adoption_bayes.errors import InvalidParameterError


@pytest.fixture
def shelter_frame():
    """Shelter-style table: outcome "Adoption" is the event."""
    return pd.DataFrame(
        {
            "time": [3, 10, 1, 7, 2, 5],
            "outcome": ["Adoption", "Transfer", "Adoption", None, "Adoption", "Euthanasia"],
            "group": ["black", "other", "black", "black", "other", "other"],
        }
    )


class TestDatasetFromFrame:
    """Tests for DataFrame conversion."""

    def test_maps_outcomes_to_events(self, shelter_frame):
        data = dataset_from_frame(shelter_frame)
        # The row with a missing outcome is dropped
        assert len(data) == 5
        assert data.group_labels == ("black", "other")
        np.testing.assert_array_equal(data.elapsed_time, [3, 10, 1, 2, 5])
        np.testing.assert_array_equal(data.event_occurred, [True, False, True, True, False])
        np.testing.assert_array_equal(data.group, [0, 1, 0, 1, 1])

    def test_group_filter_and_order(self, shelter_frame):
        data = dataset_from_frame(shelter_frame, groups=["other"])
        assert data.group_labels == ("other",)
        assert len(data) == 3
        assert (data.group == 0).all()

    def test_custom_event_outcomes(self, shelter_frame):
        data = dataset_from_frame(shelter_frame, event_outcomes=("Adoption", "Transfer"))
        assert data.event_occurred.sum() == 4

    def test_missing_column(self, shelter_frame):
        with pytest.raises(ValueError, match="Missing columns"):
            dataset_from_frame(shelter_frame, time_column="days")

    def test_non_positive_time(self, shelter_frame):
        shelter_frame.loc[0, "time"] = 0
        with pytest.raises(InvalidParameterError, match=">= 1"):
            dataset_from_frame(shelter_frame)

    def test_fractional_time(self, shelter_frame):
        shelter_frame["time"] = shelter_frame["time"].astype(float)
        shelter_frame.loc[0, "time"] = 2.5
        with pytest.raises(InvalidParameterError, match="whole time steps"):
            dataset_from_frame(shelter_frame)


class TestLoadAdoptionCsv:
    """Tests for reading CSV files."""

    def test_load_csv(self, shelter_frame, tmp_path):
        path = tmp_path / "shelter.csv"
        shelter_frame.to_csv(path, index=False)
        data = load_adoption_csv(path)
        assert len(data) == 5

    def test_semicolon_separator(self, shelter_frame, tmp_path):
        path = tmp_path / "shelter.csv"
        shelter_frame.to_csv(path, index=False, sep=";")
        data = load_adoption_csv(path, sep=";")
        assert data.group_labels == ("black", "other")

    def test_reads_simulated_csv(self, tmp_path):
        """A dataset written with to_csv can be read back."""
        original = simulate(
            n=200,
            group_probabilities=[0.1, 0.2],
            censoring_policy=FixedCensoring(5),
            seed=0,
        )
        path = tmp_path / "simulated.csv"
        original.to_csv(path)

        loaded = load_adoption_csv(
            path,
            time_column="elapsed_time",
            outcome_column="event_occurred",
            event_outcomes=("True",),
        )
        np.testing.assert_array_equal(loaded.elapsed_time, original.elapsed_time)
        np.testing.assert_array_equal(loaded.event_occurred, original.event_occurred)
        np.testing.assert_array_equal(loaded.group, original.group)
