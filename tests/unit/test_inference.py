"""Unit tests for priors, inference engines and posterior summaries."""

import numpy as np
import pytest

from adoption_bayes.analysis.bias import aggregate_bias, compare_likelihoods, BiasReport
from adoption_bayes.analysis.significance import (
    compute_confidence_interval,
    paired_significance_test,
)
from adoption_bayes.analysis.summary import summarize_draws, summarize_posterior
from adoption_bayes.data.censoring import FixedCensoring, RandomCensoring
from adoption_bayes.data.generator import simulate
from adoption_bayes.data.types import InferenceMethod, LikelihoodKind
from adoption_bayes.errors import InvalidParameterError
from adoption_bayes.models.config import InferenceConfig
from adoption_bayes.models.likelihood import group_statistics
from adoption_bayes.models.posterior import fit_posterior, probability_grid
from adoption_bayes.models.priors import BetaPrior, DEFAULT_PRIOR
from adoption_bayes.models.trainer import MAPTrainer, fit_map


class TestBetaPrior:
    """Tests for the Beta prior."""

    def test_default_prior(self):
        assert DEFAULT_PRIOR == BetaPrior(alpha=1.0, beta=5.0)
        assert DEFAULT_PRIOR.mean == pytest.approx(1 / 6)

    @pytest.mark.parametrize("alpha,beta", [(0, 1), (1, -1)])
    def test_invalid_parameters(self, alpha, beta):
        with pytest.raises(InvalidParameterError):
            BetaPrior(alpha=alpha, beta=beta)

    def test_logpdf(self):
        # Beta(1, 5) density is 5 * (1 - p)**4
        assert BetaPrior().logpdf(0.2) == pytest.approx(np.log(5 * 0.8**4))


class TestInferenceConfig:
    """Tests for inference configuration."""

    def test_defaults(self):
        config = InferenceConfig()
        assert config.method == InferenceMethod.CONJUGATE
        assert config.prior == BetaPrior(1.0, 5.0)

    def test_validation(self):
        with pytest.raises(ValueError, match="n_draws"):
            InferenceConfig(n_draws=0)
        with pytest.raises(ValueError, match="credible_interval"):
            InferenceConfig(credible_interval=1.0)
        with pytest.raises(ValueError, match="grid_size"):
            InferenceConfig(grid_size=5)

    def test_dict_round_trip(self):
        config = InferenceConfig(
            method=InferenceMethod.GRID, prior=BetaPrior(2.0, 8.0), grid_size=500
        )
        loaded = InferenceConfig.from_dict(config.to_dict())
        assert loaded.method == InferenceMethod.GRID
        assert loaded.prior == BetaPrior(2.0, 8.0)
        assert loaded.grid_size == 500

    def test_with_method(self):
        config = InferenceConfig(n_draws=100).with_method(InferenceMethod.MAP)
        assert config.method == InferenceMethod.MAP
        assert config.n_draws == 100


class TestConjugate:
    """Tests for the exact Beta posterior."""

    def test_beta_parameters(self, small_dataset):
        result = fit_posterior(small_dataset, seed=0)
        # A: 2 events, exposure 7; B: 1 event, exposure 5
        assert result.beta_parameters["A"] == (3.0, 12.0)
        assert result.beta_parameters["B"] == (2.0, 10.0)
        assert result.posterior_mean("A") == pytest.approx(3 / 15)
        assert result.posterior_mean(1) == pytest.approx(2 / 12)
        assert result.posterior_mean(np.int64(0)) == pytest.approx(3 / 15)

    def test_draws_match_exact_mean(self, censored_dataset):
        result = fit_posterior(censored_dataset, InferenceConfig(n_draws=20000), seed=1)
        for label in result.group_labels:
            assert np.mean(result.draws[label]) == pytest.approx(
                result.posterior_mean(label), rel=0.01
            )

    def test_recovers_true_probabilities(self, censored_dataset):
        result = fit_posterior(censored_dataset, seed=0)
        np.testing.assert_allclose(result.means(), [0.1, 0.15], atol=0.015)

    def test_reproducible(self, small_dataset):
        a = fit_posterior(small_dataset, seed=3)
        b = fit_posterior(small_dataset, seed=3)
        np.testing.assert_array_equal(a.draws["A"], b.draws["A"])

    def test_to_dict(self, small_dataset):
        data = fit_posterior(small_dataset, seed=0).to_dict()
        assert data["method"] == "conjugate"
        assert data["likelihood"] == "censored"
        assert data["beta_parameters"]["A"] == [3.0, 12.0]


class TestGrid:
    """Tests for the grid approximation."""

    def test_grid_midpoints(self):
        grid = probability_grid(4)
        np.testing.assert_allclose(grid, [0.125, 0.375, 0.625, 0.875])

    @pytest.mark.parametrize("kind", list(LikelihoodKind))
    def test_agrees_with_conjugate(self, censored_dataset, kind):
        exact = fit_posterior(censored_dataset, likelihood=kind, seed=0)
        grid = fit_posterior(
            censored_dataset,
            InferenceConfig(method=InferenceMethod.GRID),
            likelihood=kind,
            seed=0,
        )
        assert grid.method == InferenceMethod.GRID
        np.testing.assert_allclose(grid.means(), exact.means(), atol=1e-3)


class TestMAP:
    """Tests for the torch MAP estimator."""

    def test_matches_posterior_mode(self):
        data = simulate(
            n=400,
            group_probabilities=[0.1, 0.15],
            censoring_policy=FixedCensoring(20),
            seed=5,
        )
        result = fit_posterior(data, InferenceConfig(method=InferenceMethod.MAP))
        assert result.method == InferenceMethod.MAP

        for stats, estimate in zip(group_statistics(data), result.means()):
            # Mode of Beta(1 + k, 5 + s)
            mode = stats.n_events / (stats.n_events + stats.exposure + 4)
            assert estimate == pytest.approx(mode, rel=1e-3)

        for label in result.group_labels:
            assert len(result.draws[label]) == 1

    def test_loss_decreases(self, censored_dataset):
        trainer = MAPTrainer(censored_dataset, DEFAULT_PRIOR, max_steps=200)
        state = trainer.train()
        assert not state.failed
        assert state.loss_history[-1] < state.loss_history[0]

    def test_diagnostics(self, small_dataset):
        result = fit_map(small_dataset, InferenceConfig(max_steps=50))
        assert result.diagnostics["steps"] <= 50
        assert "final_loss" in result.diagnostics


class TestMCMC:
    """Tests for PyMC sampling (skipped without the sampling extra)."""

    def test_agrees_with_conjugate(self):
        pytest.importorskip("pymc")
        data = simulate(
            n=400,
            group_probabilities=[0.1, 0.15],
            censoring_policy=FixedCensoring(20),
            seed=6,
        )
        config = InferenceConfig(
            method=InferenceMethod.MCMC, n_draws=500, n_tune=500, n_chains=2
        )
        result = fit_posterior(data, config, seed=6)
        exact = fit_posterior(data, seed=6)

        np.testing.assert_allclose(result.means(), exact.means(), atol=0.01)
        assert set(result.diagnostics["convergence"]) == {"A", "B"}
        for label in result.group_labels:
            assert len(result.draws[label]) == 1000

    def test_model_has_group_dims(self, small_dataset):
        pytest.importorskip("pymc")
        from adoption_bayes.models.sampler import build_model

        model = build_model(small_dataset, InferenceConfig())
        assert list(model.coords["group"]) == ["A", "B"]


class TestNaiveBias:
    """Dropping censored subjects overstates the probability."""

    @pytest.mark.parametrize(
        "policy", [FixedCensoring(limit=20), RandomCensoring(censor_probability=0.05)]
    )
    def test_naive_mean_exceeds_truth(self, policy):
        data = simulate(
            n=4000, group_probabilities=[0.1, 0.15], censoring_policy=policy, seed=10
        )
        naive = fit_posterior(data, likelihood=LikelihoodKind.NAIVE, seed=0)
        censored = fit_posterior(data, likelihood=LikelihoodKind.CENSORED, seed=0)

        for truth, naive_mean, censored_mean in zip(
            [0.1, 0.15], naive.means(), censored.means()
        ):
            assert naive_mean > truth
            assert naive_mean > censored_mean
            assert abs(censored_mean - truth) < abs(naive_mean - truth)

    def test_compare_likelihoods(self, censored_dataset):
        reports = compare_likelihoods(censored_dataset, [0.1, 0.15], seed=0)
        assert [r.group for r in reports] == ["A", "B"]
        for report in reports:
            assert report.naive_bias > 0
            assert abs(report.censored_bias) < report.naive_bias
            assert 0.0 < report.censoring_rate < 1.0

    def test_compare_likelihoods_count_mismatch(self, censored_dataset):
        with pytest.raises(ValueError, match="Expected 2 true probabilities"):
            compare_likelihoods(censored_dataset, [0.1])

    def test_aggregate_bias(self):
        reports = []
        for replicate in range(5):
            data = simulate(
                n=600,
                group_probabilities=[0.1, 0.15],
                censoring_policy=FixedCensoring(20),
                seed=100 + replicate,
            )
            reports.extend(compare_likelihoods(data, [0.1, 0.15], seed=replicate,
                                               replicate=replicate))

        summary = aggregate_bias(reports)
        assert set(summary) == {"A", "B"}
        for entry in summary.values():
            assert entry["n_replicates"] == 5
            assert entry["naive"]["mean_bias"] > 0
            assert entry["naive"]["ci_lower"] <= entry["naive"]["mean_bias"]
            assert entry["absolute_error_test"]["n"] == 5

    def test_aggregate_single_replicate(self):
        reports = [BiasReport("A", 0.1, 0.11, 0.14)]
        summary = aggregate_bias(reports)
        assert "absolute_error_test" not in summary["A"]
        assert summary["A"]["naive"]["mean_bias"] == pytest.approx(0.04)

    def test_aggregate_empty(self):
        with pytest.raises(ValueError, match="empty"):
            aggregate_bias([])


class TestSummaries:
    """Tests for posterior summaries."""

    def test_summarize_draws(self):
        draws = np.random.default_rng(0).beta(20, 180, size=50000)
        summary = summarize_draws(draws, "A", credible_interval=0.9)
        assert summary.mean == pytest.approx(0.1, rel=0.01)
        assert summary.ci_lower < summary.median < summary.ci_upper
        inside = np.mean((draws >= summary.ci_lower) & (draws <= summary.ci_upper))
        assert inside == pytest.approx(0.9, abs=0.005)
        assert summary.contains(0.1)

    def test_summarize_draws_invalid(self):
        with pytest.raises(ValueError, match="empty"):
            summarize_draws(np.array([]))
        with pytest.raises(ValueError, match="credible_interval"):
            summarize_draws(np.array([0.1, 0.2]), credible_interval=1.5)

    def test_summarize_posterior_uses_exact_mean(self, small_dataset):
        result = fit_posterior(small_dataset, seed=0)
        summaries = summarize_posterior(result)
        assert [s.group for s in summaries] == ["A", "B"]
        assert summaries[0].mean == pytest.approx(3 / 15)


class TestSignificance:
    """Tests for replicate-level statistics."""

    def test_paired_test(self):
        a = np.array([0.01, 0.02, 0.015, 0.012, 0.018])
        b = a + np.array([0.03, 0.028, 0.033, 0.031, 0.029])
        result = paired_significance_test(a, b)
        assert result["mean_diff"] == pytest.approx(0.0302)
        assert result["p_value"] < 0.001
        assert result["ci_lower"] < result["mean_diff"] < result["ci_upper"]

    def test_paired_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            paired_significance_test([1.0, 2.0], [1.0])

    def test_confidence_interval(self):
        mean, lower, upper = compute_confidence_interval([1.0, 2.0, 3.0])
        assert mean == pytest.approx(2.0)
        assert lower < 2.0 < upper

    def test_confidence_interval_single_value(self):
        assert compute_confidence_interval([0.5]) == (0.5, 0.5, 0.5)
