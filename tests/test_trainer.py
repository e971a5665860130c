"""
Tests for Baum-Welch training.

Covers posterior computation, re-estimation, convergence behaviour and the
stochasticity, monotonicity and determinism guarantees of training.
"""

import logging

import pytest
import numpy as np

from hmm_engine.config import set_config
from hmm_engine.exceptions import InvalidConfigurationError, InvalidObservationError
from hmm_engine.hmm import create_model, forward_scaled, backward_scaled
from hmm_engine.train import BaumWelchTrainer, TrainingResult, compute_posteriors, reestimate, train


class TestPosteriors:
    """Test gamma and xi computation."""

    def test_shapes_and_normalization(self, handmade_model):
        observations = np.array([0, 1, 2, 3, 1])
        forward = forward_scaled(handmade_model, observations)
        beta = backward_scaled(handmade_model, observations, forward.scale)

        gamma, xi = compute_posteriors(handmade_model, observations, forward.alpha, beta)

        assert gamma.shape == (5, 3)
        assert xi.shape == (4, 3, 3)
        np.testing.assert_allclose(gamma.sum(axis=1), 1.0)
        np.testing.assert_allclose(xi.sum(axis=(1, 2)), 1.0)

    def test_xi_marginalizes_to_gamma(self, handmade_model):
        observations = np.array([3, 0, 0, 1, 2, 2])
        forward = forward_scaled(handmade_model, observations)
        beta = backward_scaled(handmade_model, observations, forward.scale)

        gamma, xi = compute_posteriors(handmade_model, observations, forward.alpha, beta)

        np.testing.assert_allclose(xi.sum(axis=2), gamma[:-1], atol=1e-12)
        np.testing.assert_allclose(xi.sum(axis=1), gamma[1:], atol=1e-12)

    def test_single_observation_has_no_transitions(self, handmade_model):
        observations = np.array([1])
        forward = forward_scaled(handmade_model, observations)
        beta = backward_scaled(handmade_model, observations, forward.scale)

        gamma, xi = compute_posteriors(handmade_model, observations, forward.alpha, beta)

        assert xi.shape == (0, 3, 3)
        np.testing.assert_allclose(gamma.sum(), 1.0)


class TestReestimate:
    """Test the M-step."""

    def test_pi_is_first_occupancy(self, handmade_model):
        observations = np.array([0, 1, 1, 2])
        forward = forward_scaled(handmade_model, observations)
        beta = backward_scaled(handmade_model, observations, forward.scale)
        gamma, xi = compute_posteriors(handmade_model, observations, forward.alpha, beta)

        pi_new, A_new, B_new = reestimate(handmade_model, observations, gamma, xi)

        np.testing.assert_array_equal(pi_new, gamma[0])
        np.testing.assert_allclose(A_new.sum(axis=1), 1.0)
        np.testing.assert_allclose(B_new.sum(axis=1), 1.0)

    def test_unseen_symbols_get_zero_emission_mass(self, handmade_model):
        observations = np.array([0, 1, 0, 1])
        forward = forward_scaled(handmade_model, observations)
        beta = backward_scaled(handmade_model, observations, forward.scale)
        gamma, xi = compute_posteriors(handmade_model, observations, forward.alpha, beta)

        _, _, B_new = reestimate(handmade_model, observations, gamma, xi)

        np.testing.assert_array_equal(B_new[:, 2:], 0.0)

    def test_single_observation_transitions_become_uniform(self, handmade_model):
        """With no transitions to count, flooring makes every A row uniform."""
        trainer = BaumWelchTrainer(max_iterations=1, tolerance=1e-4)

        trainer.fit(handmade_model, [2])

        np.testing.assert_allclose(handmade_model.A, np.full((3, 3), 1.0 / 3.0))
        assert handmade_model.validate_stochastic_matrices() is True


class TestTrainingConvergence:
    """Test iteration budget and tolerance handling."""

    def test_single_iteration(self, weather_observations):
        hmm = create_model(2, 2, seed=0)
        before = hmm.get_parameters()

        history = train(hmm, weather_observations, max_iterations=1, tolerance=1e-4)

        assert len(history) == 1
        assert not np.array_equal(before[1], hmm.A)

    def test_single_iteration_is_one_update(self, weather_observations):
        one_shot = create_model(2, 2, seed=0)
        train(one_shot, weather_observations, max_iterations=1, tolerance=1e-4)

        stepped = create_model(2, 2, seed=0)
        BaumWelchTrainer().step(stepped, np.array(weather_observations))

        np.testing.assert_array_equal(one_shot.A, stepped.A)
        np.testing.assert_array_equal(one_shot.B, stepped.B)

    def test_loose_tolerance_stops_after_two_iterations(self):
        hmm = create_model(3, 3, seed=7)
        observations = [0, 1, 2, 2, 1, 0, 0, 1, 2, 2, 2, 1]

        history = train(hmm, observations, max_iterations=50, tolerance=1e10)

        assert len(history) == 2
        assert history == pytest.approx([-14.745032560066972, -12.786388817933735], rel=1e-9)

    def test_budget_exhausted_without_convergence(self, long_observations):
        hmm = create_model(3, 4, seed=1)

        result = BaumWelchTrainer(max_iterations=3, tolerance=1e-300).fit(hmm, long_observations)

        assert result.iterations == 3
        assert result.converged is False

    def test_reference_history_seed_zero(self, weather_observations):
        """Matches the reference Baum-Welch trace for W H H W H from seed 0."""
        hmm = create_model(2, 2, seed=0, mode='random')

        result = BaumWelchTrainer(max_iterations=30, tolerance=1e-4).fit(hmm, weather_observations)

        assert result.converged is True
        assert result.iterations == 12
        assert result.log_likelihood_history[0] == pytest.approx(-3.582338805329277, rel=1e-9)
        assert result.log_likelihood_history[1] == pytest.approx(-3.2032809575762413, rel=1e-9)
        assert result.final_log_likelihood == pytest.approx(-1.386304794888647, rel=1e-6)

    def test_uniform_start_stays_symmetric(self, weather_observations):
        """Identical states receive identical updates."""
        hmm = create_model(2, 2, mode='uniform')

        history = train(hmm, weather_observations, max_iterations=30, tolerance=1e-4)

        assert len(history) == 3
        assert history[0] == pytest.approx(5 * np.log(0.5))
        assert history[1] == pytest.approx(3 * np.log(0.6) + 2 * np.log(0.4))
        np.testing.assert_allclose(hmm.B, [[0.6, 0.4], [0.6, 0.4]])
        np.testing.assert_allclose(hmm.A, np.full((2, 2), 0.5))


class TestTrainingProperties:
    """Test invariants that must hold for any training run."""

    @pytest.mark.parametrize("seed", [0, 3, 17, 2024])
    def test_log_likelihood_non_decreasing(self, seed, long_observations):
        hmm = create_model(3, 4, seed=seed)

        history = train(hmm, long_observations, max_iterations=40, tolerance=1e-8)

        assert np.all(np.diff(history) >= -1e-6)

    def test_stochastic_after_every_iteration(self, long_observations):
        hmm = create_model(4, 4, seed=5)
        trainer = BaumWelchTrainer(max_iterations=1, tolerance=1e-4)
        observations = np.array(long_observations)

        for _ in range(15):
            trainer.step(hmm, observations)
            assert hmm.validate_stochastic_matrices(tolerance=1e-9) is True
            assert np.all(hmm.pi > 0)
            assert np.all(hmm.A > 0)
            assert np.all(hmm.B > 0)

    def test_deterministic(self, long_observations):
        first = create_model(3, 4, seed=99)
        second = create_model(3, 4, seed=99)

        history_1 = train(first, long_observations, max_iterations=20, tolerance=1e-6)
        history_2 = train(second, long_observations, max_iterations=20, tolerance=1e-6)

        assert history_1 == history_2
        np.testing.assert_array_equal(first.A, second.A)
        np.testing.assert_array_equal(first.B, second.B)

    def test_final_likelihood_improves_on_start(self, long_observations):
        hmm = create_model(2, 4, seed=8)
        start = forward_scaled(hmm, long_observations).log_likelihood

        train(hmm, long_observations, max_iterations=25, tolerance=1e-6)

        assert forward_scaled(hmm, long_observations).log_likelihood >= start


class TestTrainingLogging:
    """Test diagnostics emitted during training."""

    def test_decrease_is_logged_and_training_continues(self, engine_caplog, weather_observations):
        hmm = create_model(2, 2, seed=0)
        trainer = BaumWelchTrainer(max_iterations=2, tolerance=1e-12)
        original_step = trainer.step
        calls = []

        def step_then_replace_parameters(model, observations):
            log_likelihood = original_step(model, observations)
            if not calls:
                # Emissions that almost never produce symbol 1
                model.set_parameters([0.5, 0.5], [[0.5, 0.5], [0.5, 0.5]],
                                     [[0.99, 0.01], [0.99, 0.01]])
            calls.append(log_likelihood)
            return log_likelihood

        trainer.step = step_then_replace_parameters

        result = trainer.fit(hmm, weather_observations)

        assert result.iterations == 2
        assert result.log_likelihood_history[1] < result.log_likelihood_history[0]
        warnings = [r for r in engine_caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Log-likelihood decreased" in warnings[0].getMessage()
        assert warnings[0].name == 'hmm_engine.train.trainer'

    def test_regular_training_logs_no_warning(self, engine_caplog, long_observations):
        hmm = create_model(3, 4, seed=3)

        train(hmm, long_observations, max_iterations=20, tolerance=1e-8)

        assert not [r for r in engine_caplog.records if r.levelno >= logging.WARNING]


class TestTrainerConfiguration:
    """Test trainer parameter validation and config integration."""

    @pytest.mark.parametrize("kwargs", [
        {"max_iterations": 0},
        {"max_iterations": 2.5},
        {"tolerance": 0.0},
        {"tolerance": -1.0},
        {"epsilon": 0.0},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            BaumWelchTrainer(**kwargs)

    def test_invalid_observations_rejected_before_training(self):
        hmm = create_model(2, 2, seed=0)
        before = hmm.get_parameters()

        with pytest.raises(InvalidObservationError):
            train(hmm, [0, 1, 2], max_iterations=5, tolerance=1e-4)

        np.testing.assert_array_equal(before[1], hmm.A)

    def test_from_config(self):
        set_config('hmm', 'max_iterations', 7)
        set_config('hmm', 'tolerance', 0.25)

        trainer = BaumWelchTrainer.from_config()

        assert trainer.max_iterations == 7
        assert trainer.tolerance == 0.25
        assert trainer.epsilon == 1e-12

    def test_training_result_defaults(self):
        result = TrainingResult()

        assert result.iterations == 0
        assert result.final_log_likelihood is None
        assert result.converged is False
