"""Unit tests for the adoption-time simulator and dataset container."""

import numpy as np
import pytest

from adoption_bayes.data.censoring import FixedCensoring, NoCensoring, RandomCensoring
from adoption_bayes.data.generator import (
    AdoptionDataGenerator,
    AdoptionDataset,
    SubjectRecord,
    default_group_labels,
    simulate,
)
from adoption_bayes.data.scenarios import (
    PREDEFINED_SCENARIOS,
    SimulationScenario,
    get_scenario,
)
from adoption_bayes.errors import InvalidParameterError


class TestSimulationScenario:
    """Tests for SimulationScenario configuration."""

    def test_default_scenario_creation(self):
        """Test creating a scenario with default values."""
        scenario = SimulationScenario(name="test")
        assert scenario.n_subjects == 1000
        assert scenario.group_labels == ["A", "B"]
        assert scenario.group_probabilities == [0.1, 0.15]
        assert isinstance(scenario.censoring, NoCensoring)

    def test_validation_invalid_probability(self):
        """Test that a probability outside (0, 1) raises error."""
        with pytest.raises(ValueError, match="group_probabilities"):
            SimulationScenario(name="test", group_probabilities=[0.1, 1.0])

    def test_validation_label_count_mismatch(self):
        """Test that labels and probabilities must have the same length."""
        with pytest.raises(ValueError, match="same length"):
            SimulationScenario(name="test", group_labels=["A"], group_probabilities=[0.1, 0.2])

    def test_validation_duplicate_labels(self):
        """Test that group labels must be unique."""
        with pytest.raises(ValueError, match="unique"):
            SimulationScenario(name="test", group_labels=["A", "A"])

    def test_predefined_scenarios_exist(self):
        """Test that all predefined scenarios are available."""
        for name in ["uncensored", "fixed_window", "random_window"]:
            scenario = get_scenario(name)
            assert scenario.name == name
        assert get_scenario("fixed_window").censoring == FixedCensoring(limit=20)
        assert get_scenario("random_window").censoring == RandomCensoring(0.05)

    def test_unknown_scenario(self):
        """Test that an unknown scenario name raises error."""
        with pytest.raises(ValueError, match="Unknown scenario"):
            get_scenario("does_not_exist")

    def test_scenario_serialization(self, tmp_path):
        """Test scenario to/from JSON."""
        scenario = SimulationScenario(
            name="test_scenario",
            n_subjects=500,
            group_labels=["young", "old"],
            group_probabilities=[0.2, 0.05],
            censoring=RandomCensoring(censor_probability=0.1),
        )
        path = tmp_path / "scenario.json"
        scenario.to_json(path)

        loaded = SimulationScenario.from_json(path)
        assert loaded.name == "test_scenario"
        assert loaded.n_subjects == 500
        assert loaded.group_labels == ["young", "old"]
        assert loaded.group_probabilities == [0.2, 0.05]
        assert loaded.censoring == RandomCensoring(censor_probability=0.1)

    def test_with_n_subjects_copies(self):
        """Test that overriding the subject count leaves the original intact."""
        original = PREDEFINED_SCENARIOS["fixed_window"]
        copy = original.with_n_subjects(50)
        assert copy.n_subjects == 50
        assert original.n_subjects == 1000
        assert copy.censoring == original.censoring


class TestSimulate:
    """Tests for the simulator."""

    @pytest.mark.parametrize("p", [0.01, 0.3, 0.99])
    def test_uncensored_all_events(self, p):
        """Without censoring every subject has an event at time >= 1."""
        data = simulate(n=500, group_probabilities=[p], seed=1)
        assert len(data) == 500
        assert data.event_occurred.all()
        assert (data.elapsed_time >= 1).all()
        np.testing.assert_array_equal(data.elapsed_time, data.true_event_time)

    def test_fixed_window_bounds(self):
        """Elapsed times never exceed the limit; censored iff true time > limit."""
        limit = 20
        data = simulate(
            n=1000,
            group_probabilities=[0.1, 0.15],
            censoring_policy=FixedCensoring(limit=limit),
            seed=7,
        )
        assert (data.elapsed_time <= limit).all()
        censored = ~data.event_occurred
        expected = (data.elapsed_time == limit) & (data.true_event_time > limit)
        np.testing.assert_array_equal(censored, expected)
        # A subject adopted exactly on the last day is an event
        on_limit = data.true_event_time == limit
        assert data.event_occurred[on_limit].all()

    def test_random_window_invariants(self):
        """Random censoring: event iff true time <= window, elapsed <= true time."""
        data = simulate(
            n=2000,
            group_probabilities=[0.1, 0.15],
            censoring_policy=RandomCensoring(censor_probability=0.05),
            seed=11,
        )
        assert (data.elapsed_time >= 1).all()
        assert (data.elapsed_time <= data.true_event_time).all()
        events = data.event_occurred
        np.testing.assert_array_equal(
            data.elapsed_time[events], data.true_event_time[events]
        )
        assert (data.elapsed_time[~events] < data.true_event_time[~events]).all()
        assert 0.0 < data.censoring_rate() < 1.0

    def test_reproducible_with_seed(self):
        """Same seed gives the same dataset, different seeds differ."""
        kwargs = dict(
            n=300,
            group_probabilities=[0.1, 0.15],
            censoring_policy=RandomCensoring(0.05),
        )
        a = simulate(seed=123, **kwargs)
        b = simulate(seed=123, **kwargs)
        c = simulate(seed=124, **kwargs)
        np.testing.assert_array_equal(a.group, b.group)
        np.testing.assert_array_equal(a.elapsed_time, b.elapsed_time)
        np.testing.assert_array_equal(a.event_occurred, b.event_occurred)
        assert not np.array_equal(a.elapsed_time, c.elapsed_time)

    def test_accepts_generator(self):
        """A numpy Generator can be passed instead of an integer seed."""
        rng = np.random.default_rng(5)
        data = simulate(n=10, group_probabilities=[0.5], seed=rng)
        assert len(data) == 10

    def test_groups_are_roughly_balanced(self):
        """Groups are assigned uniformly at random."""
        data = simulate(n=4000, group_probabilities=[0.1, 0.2, 0.3, 0.4], seed=3)
        counts = np.bincount(data.group, minlength=4)
        np.testing.assert_allclose(counts / 4000, 0.25, atol=0.03)

    def test_mean_event_time(self):
        """Shifted geometric event times have mean 1/p."""
        data = simulate(n=20000, group_probabilities=[0.2], seed=9)
        assert data.true_event_time.mean() == pytest.approx(5.0, rel=0.03)
        assert data.true_event_time.min() == 1

    @pytest.mark.parametrize("n", [0, -5])
    def test_invalid_n(self, n):
        with pytest.raises(InvalidParameterError, match="n must be > 0"):
            simulate(n=n, group_probabilities=[0.1])

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.5, float("nan")])
    def test_invalid_probability(self, p):
        with pytest.raises(InvalidParameterError):
            simulate(n=10, group_probabilities=[0.1, p])

    def test_empty_probabilities(self):
        with pytest.raises(InvalidParameterError, match="cannot be empty"):
            simulate(n=10, group_probabilities=[])

    def test_invalid_limit(self):
        with pytest.raises(InvalidParameterError, match="limit"):
            FixedCensoring(limit=0)

    def test_invalid_censor_probability(self):
        with pytest.raises(InvalidParameterError, match="censor_probability"):
            RandomCensoring(censor_probability=1.0)

    def test_custom_labels(self):
        data = simulate(n=50, group_probabilities=[0.1, 0.2], group_labels=["x", "y"], seed=0)
        assert data.group_labels == ("x", "y")

    def test_label_count_mismatch(self):
        with pytest.raises(InvalidParameterError, match="group labels"):
            simulate(n=50, group_probabilities=[0.1, 0.2], group_labels=["x"])


class TestAdoptionDataset:
    """Tests for the dataset container."""

    def test_arrays_are_read_only(self, small_dataset):
        with pytest.raises(ValueError):
            small_dataset.elapsed_time[0] = 10

    def test_input_arrays_not_frozen(self):
        """Construction copies its inputs."""
        times = np.array([1, 2, 3])
        AdoptionDataset(
            group=[0, 0, 0], elapsed_time=times, event_occurred=[True] * 3, group_labels=("A",)
        )
        times[0] = 4
        assert times[0] == 4

    def test_rejects_non_positive_time(self):
        with pytest.raises(InvalidParameterError, match="elapsed_time"):
            AdoptionDataset(
                group=[0], elapsed_time=[0], event_occurred=[True], group_labels=("A",)
            )

    def test_rejects_length_mismatch(self):
        with pytest.raises(InvalidParameterError, match="same length"):
            AdoptionDataset(
                group=[0, 0], elapsed_time=[1], event_occurred=[True], group_labels=("A",)
            )

    def test_rejects_group_out_of_range(self):
        with pytest.raises(InvalidParameterError, match="group indices"):
            AdoptionDataset(
                group=[1], elapsed_time=[1], event_occurred=[True], group_labels=("A",)
            )

    def test_records_round_trip(self, small_dataset):
        records = list(small_dataset.records())
        assert records[0] == SubjectRecord("A", 3, True)
        assert records[1] == SubjectRecord("A", 5, False)

        rebuilt = AdoptionDataset.from_records(records)
        assert rebuilt.group_labels == ("A", "B")
        np.testing.assert_array_equal(rebuilt.elapsed_time, small_dataset.elapsed_time)

    def test_from_records_unknown_group(self):
        with pytest.raises(InvalidParameterError, match="unknown groups"):
            AdoptionDataset.from_records([("C", 1, True)], group_labels=["A"])

    def test_subset(self, small_dataset):
        subset = small_dataset.subset("B")
        assert len(subset) == 2
        assert subset.group_labels == ("A", "B")
        assert (subset.group == 1).all()

    def test_censoring_rate(self, small_dataset, empty_dataset):
        assert small_dataset.censoring_rate() == pytest.approx(2 / 5)
        assert empty_dataset.censoring_rate() == 0.0

    def test_to_frame(self, small_dataset):
        frame = small_dataset.to_frame()
        assert list(frame.columns) == ["group", "elapsed_time", "event_occurred"]
        assert frame["group"].tolist() == ["A", "A", "A", "B", "B"]

    def test_equality_compares_contents(self):
        a = simulate(n=5, group_probabilities=[0.3], seed=1)
        b = simulate(n=5, group_probabilities=[0.3], seed=1)
        c = simulate(n=6, group_probabilities=[0.3], seed=1)

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1
        assert a != c

    def test_equality_respects_labels_and_ground_truth(self, small_dataset):
        relabelled = AdoptionDataset(
            group=small_dataset.group,
            elapsed_time=small_dataset.elapsed_time,
            event_occurred=small_dataset.event_occurred,
            group_labels=("X", "Y"),
        )
        with_truth = AdoptionDataset(
            group=small_dataset.group,
            elapsed_time=small_dataset.elapsed_time,
            event_occurred=small_dataset.event_occurred,
            group_labels=small_dataset.group_labels,
            true_event_time=small_dataset.elapsed_time,
        )
        assert small_dataset != relabelled
        assert small_dataset != with_truth
        assert small_dataset != "not a dataset"

    def test_save_and_load(self, tmp_path):
        data = simulate(
            n=100,
            group_probabilities=[0.1, 0.2],
            censoring_policy=FixedCensoring(10),
            seed=1,
            group_labels=["cats", "kittens"],
        )
        path = tmp_path / "data.npz"
        data.save(path)

        loaded = AdoptionDataset.load(path)
        assert loaded.group_labels == ("cats", "kittens")
        np.testing.assert_array_equal(loaded.group, data.group)
        np.testing.assert_array_equal(loaded.elapsed_time, data.elapsed_time)
        np.testing.assert_array_equal(loaded.event_occurred, data.event_occurred)
        np.testing.assert_array_equal(loaded.true_event_time, data.true_event_time)


class TestAdoptionDataGenerator:
    """Tests for scenario-driven generation."""

    def test_generate_from_scenario(self):
        scenario = get_scenario("fixed_window").with_n_subjects(200)
        data = AdoptionDataGenerator(scenario, seed=42).generate()
        assert len(data) == 200
        assert (data.elapsed_time <= 20).all()

    def test_successive_calls_are_fresh_replicates(self):
        generator = AdoptionDataGenerator(get_scenario("uncensored"), seed=42)
        first = generator.generate()
        second = generator.generate()
        assert not np.array_equal(first.elapsed_time, second.elapsed_time)

    def test_same_seed_same_data(self):
        scenario = get_scenario("random_window")
        a = AdoptionDataGenerator(scenario, seed=3).generate()
        b = AdoptionDataGenerator(scenario, seed=3).generate()
        np.testing.assert_array_equal(a.elapsed_time, b.elapsed_time)


def test_default_group_labels():
    assert default_group_labels(3) == ["A", "B", "C"]
    assert default_group_labels(30)[0] == "G0"
