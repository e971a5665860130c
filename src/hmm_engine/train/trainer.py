"""
Baum-Welch (Expectation-Maximization) training for discrete HMMs.

Each iteration runs the scaled forward and backward passes against the current
parameters, turns them into state and transition posteriors, re-estimates
pi, A and B from those posteriors and commits all three together.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import get_config
from ..exceptions import InvalidConfigurationError
from ..hmm.inference import backward_scaled, forward_scaled
from ..hmm.model import DiscreteHMM
from ..hmm.simplex import DEFAULT_EPSILON, SCALE_FLOOR, floor_denominator
from ..logger import get_logger

logger = get_logger(__name__)

# Allowed numerical slack before a log-likelihood drop is reported
DECREASE_TOLERANCE = 1e-6


@dataclass
class TrainingResult:
    """
    Summary of one training call.

    Attributes:
        log_likelihood_history: Log-likelihood at the start of each completed iteration
        converged: Whether training stopped on the tolerance rather than the budget
        iterations: Number of completed iterations (parameter updates)
    """
    log_likelihood_history: List[float] = field(default_factory=list)
    converged: bool = False

    @property
    def iterations(self) -> int:
        return len(self.log_likelihood_history)

    @property
    def final_log_likelihood(self) -> Optional[float]:
        if not self.log_likelihood_history:
            return None
        return self.log_likelihood_history[-1]


def compute_posteriors(model: DiscreteHMM, observations: np.ndarray,
                       alpha: np.ndarray, beta: np.ndarray,
                       epsilon: float = DEFAULT_EPSILON) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute state-occupancy and transition posteriors.

    gamma[t, i] is proportional to alpha[t, i] * beta[t, i]; xi[t, i, j] is
    proportional to alpha[t, i] * A[i, j] * B[j, O[t+1]] * beta[t+1, j]. Each
    gamma row and each xi time slice is renormalized to sum to 1, with the
    denominator floored at epsilon.

    Args:
        model: Parameters the forward/backward pass was run against
        observations: Validated observation indices [T]
        alpha: Scaled forward probabilities [T, n_states]
        beta: Scaled backward probabilities [T, n_states]
        epsilon: Denominator floor

    Returns:
        Tuple of gamma [T, n_states] and xi [T-1, n_states, n_states]
    """
    T = len(observations)

    gamma = alpha * beta
    gamma /= floor_denominator(gamma.sum(axis=1, keepdims=True), epsilon)

    xi = np.zeros((max(T - 1, 0), model.n_states, model.n_states))
    for t in range(T - 1):
        emission_next = model.B[:, observations[t + 1]] * beta[t + 1, :]
        xi[t] = alpha[t, :, None] * model.A * emission_next[None, :]
        xi[t] /= floor_denominator(xi[t].sum(), epsilon)

    return gamma, xi


def reestimate(model: DiscreteHMM, observations: np.ndarray,
               gamma: np.ndarray, xi: np.ndarray,
               epsilon: float = DEFAULT_EPSILON) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    M-step: expected counts to new (unnormalized) parameters.

    - pi = gamma[0]
    - A[i, j] = sum_t xi[t, i, j] / sum_t gamma[t, i] for t in [0, T-1)
    - B[i, k] = sum_{t: O[t] = k} gamma[t, i] / sum_t gamma[t, i]

    Denominators are floored at epsilon. The caller projects the result onto
    the simplex when committing it.

    Returns:
        Tuple of (pi, A, B)
    """
    pi_new = gamma[0].copy()

    A_denominator = floor_denominator(gamma[:-1].sum(axis=0), epsilon)
    A_new = xi.sum(axis=0) / A_denominator[:, None]

    B_denominator = floor_denominator(gamma.sum(axis=0), epsilon)
    B_numerator = np.zeros((model.n_states, model.n_observations))
    for k in range(model.n_observations):
        mask = (observations == k)
        B_numerator[:, k] = gamma[mask].sum(axis=0)
    B_new = B_numerator / B_denominator[:, None]

    return pi_new, A_new, B_new


def _check_training_parameters(max_iterations, tolerance, epsilon) -> None:
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise InvalidConfigurationError(f"max_iterations must be an integer, got {max_iterations!r}")
    if max_iterations < 1:
        raise InvalidConfigurationError(f"max_iterations must be at least 1, got {max_iterations}")
    if not tolerance > 0:
        raise InvalidConfigurationError(f"tolerance must be positive, got {tolerance}")
    if not epsilon > 0:
        raise InvalidConfigurationError(f"epsilon must be positive, got {epsilon}")


class BaumWelchTrainer:
    """
    Baum-Welch trainer for a single observation sequence.

    Example:
        >>> model = create_model(2, 2, mode='uniform')
        >>> result = BaumWelchTrainer(max_iterations=30, tolerance=1e-4).fit(model, [1, 0, 0, 1, 0])
        >>> result.iterations <= 30
        True
    """

    def __init__(self,
                 max_iterations: int = 30,
                 tolerance: float = 1e-4,
                 epsilon: float = DEFAULT_EPSILON,
                 scale_floor: float = SCALE_FLOOR):
        """
        Args:
            max_iterations: Maximum number of EM iterations (default: 30)
            tolerance: Stop when |LL_t - LL_t-1| < tolerance (default: 1e-4)
            epsilon: Probability and denominator floor (default: 1e-12)
            scale_floor: Forward scaling floor (default: 1e-300)

        Raises:
            InvalidConfigurationError: If any setting is out of range
        """
        _check_training_parameters(max_iterations, tolerance, epsilon)

        self.max_iterations = int(max_iterations)
        self.tolerance = tolerance
        self.epsilon = epsilon
        self.scale_floor = scale_floor

    @classmethod
    def from_config(cls) -> "BaumWelchTrainer":
        """Create a trainer from the 'hmm' configuration section."""
        return cls(
            max_iterations=get_config('hmm', 'max_iterations'),
            tolerance=get_config('hmm', 'tolerance'),
            epsilon=get_config('hmm', 'epsilon'),
            scale_floor=get_config('hmm', 'scale_floor')
        )

    def step(self, model: DiscreteHMM, observations: np.ndarray) -> float:
        """
        Run one EM iteration and commit the updated parameters.

        Args:
            model: Model to update in place
            observations: Validated observation indices [T]

        Returns:
            Log-likelihood of the observations under the parameters before the update
        """
        forward = forward_scaled(model, observations, scale_floor=self.scale_floor)
        beta = backward_scaled(model, observations, forward.scale)

        gamma, xi = compute_posteriors(model, observations, forward.alpha, beta, self.epsilon)
        pi_new, A_new, B_new = reestimate(model, observations, gamma, xi, self.epsilon)

        model.set_parameters(pi_new, A_new, B_new, epsilon=self.epsilon)

        return forward.log_likelihood

    def fit(self, model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]]) -> TrainingResult:
        """
        Train ``model`` in place on one observation sequence.

        The first iteration only establishes a baseline. From the second one on,
        training stops once the log-likelihood moved by less than the tolerance
        from the previous iteration; that iteration's update is kept.

        Args:
            model: Model to train (mutated in place)
            observations: Sequence of observation indices [T]

        Returns:
            TrainingResult with the per-iteration log-likelihood history

        Raises:
            InvalidObservationError: If observations are empty or outside the alphabet
        """
        obs = model.validate_observations(observations)
        result = TrainingResult()
        prev_log_likelihood = None

        logger.debug(f"Starting Baum-Welch: {model!r}, T={len(obs)}, "
                     f"max_iterations={self.max_iterations}, tolerance={self.tolerance}")

        for iteration in range(self.max_iterations):
            log_likelihood = self.step(model, obs)
            result.log_likelihood_history.append(log_likelihood)

            logger.debug(f"Iteration {iteration + 1}: log_likelihood={log_likelihood:.6f}")

            if prev_log_likelihood is not None:
                improvement = log_likelihood - prev_log_likelihood

                # EM never decreases the likelihood in exact arithmetic
                if improvement < -DECREASE_TOLERANCE:
                    logger.warning(f"Log-likelihood decreased by {-improvement:.6f} "
                                   f"at iteration {iteration + 1}")

                if abs(improvement) < self.tolerance:
                    result.converged = True
                    logger.debug(f"Converged after {iteration + 1} iterations "
                                 f"(|improvement| {abs(improvement):.6g} < tolerance {self.tolerance})")
                    break

            prev_log_likelihood = log_likelihood

        if not result.converged:
            logger.debug(f"Training stopped after {self.max_iterations} iterations without convergence")

        return result


def train(model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]],
          max_iterations: int, tolerance: float,
          epsilon: float = DEFAULT_EPSILON) -> List[float]:
    """
    Train ``model`` in place with Baum-Welch.

    Returns:
        Log-likelihood per completed iteration
    """
    trainer = BaumWelchTrainer(max_iterations=max_iterations, tolerance=tolerance, epsilon=epsilon)
    return trainer.fit(model, observations).log_likelihood_history
