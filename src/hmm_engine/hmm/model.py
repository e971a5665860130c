"""
Discrete Hidden Markov Model parameter store.

This module holds the model value type ``lambda = (pi, A, B)`` for an HMM with
N hidden states and an alphabet of M observation symbols, together with the
uniform and seeded-random initializers.
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .rng import Mulberry32
from .simplex import DEFAULT_EPSILON, project_to_simplex
from ..exceptions import InvalidConfigurationError, InvalidObservationError
from ..logger import get_logger

logger = get_logger(__name__)

INIT_MODES = ('uniform', 'random')

ArrayLike = Union[np.ndarray, Sequence]


def _check_count(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidConfigurationError(f"{name} must be at least 1, got {value}")
    return int(value)


class DiscreteHMM:
    """
    Discrete-emission Hidden Markov Model parameters.

    Attributes:
        pi: Initial state probabilities [n_states]
        A: Transition matrix [n_states, n_states] where A[i, j] = P(q_t+1=j | q_t=i)
        B: Emission matrix [n_states, n_observations] where B[i, k] = P(o_t=k | q_t=i)

    Every stored row is floored at epsilon and renormalized, so no probability
    is ever exactly zero. Parameters are only ever replaced all together through
    ``set_parameters``.
    """

    def __init__(self, pi: ArrayLike, A: ArrayLike, B: ArrayLike, epsilon: float = DEFAULT_EPSILON):
        """
        Build a model from explicit parameters.

        Args:
            pi: Initial state probabilities [n_states]
            A: Transition matrix [n_states, n_states]
            B: Emission matrix [n_states, n_observations]
            epsilon: Probability floor applied before storing

        Raises:
            InvalidConfigurationError: If the shapes are inconsistent
        """
        pi = np.asarray(pi, dtype=float)
        if pi.ndim != 1 or pi.shape[0] < 1:
            raise InvalidConfigurationError(f"pi must be a non-empty vector, got shape {pi.shape}")

        self.n_states = pi.shape[0]
        B = np.asarray(B, dtype=float)
        if B.ndim != 2 or B.shape[1] < 1:
            raise InvalidConfigurationError(f"B must be a non-empty matrix, got shape {B.shape}")
        self.n_observations = B.shape[1]

        self.set_parameters(pi, A, B, epsilon=epsilon)

    @classmethod
    def uniform(cls, n_states: int, n_observations: int) -> "DiscreteHMM":
        """
        Create a model with every distribution uniform.

        pi[i] = 1/N, A[i, j] = 1/N, B[i, k] = 1/M.
        """
        n_states = _check_count("n_states", n_states)
        n_observations = _check_count("n_observations", n_observations)

        pi = np.full(n_states, 1.0 / n_states)
        A = np.full((n_states, n_states), 1.0 / n_states)
        B = np.full((n_states, n_observations), 1.0 / n_observations)

        logger.debug(f"Initialized uniform DiscreteHMM with {n_states} states and {n_observations} observations")
        return cls(pi, A, B)

    @classmethod
    def random(cls, n_states: int, n_observations: int,
               stream: Optional[Mulberry32] = None,
               epsilon: float = DEFAULT_EPSILON) -> "DiscreteHMM":
        """
        Create a model from pseudorandom draws.

        Draws are consumed in a fixed order: pi, then A row by row, then B row
        by row. Each vector is floored at epsilon and renormalized.

        Args:
            n_states: Number of hidden states
            n_observations: Alphabet size
            stream: Pseudorandom stream (default: ``Mulberry32(0)``)
            epsilon: Probability floor

        Returns:
            Newly initialized model
        """
        n_states = _check_count("n_states", n_states)
        n_observations = _check_count("n_observations", n_observations)
        if stream is None:
            stream = Mulberry32(0)

        pi = stream.draw(n_states)
        A = stream.draw((n_states, n_states))
        B = stream.draw((n_states, n_observations))

        logger.debug(f"Initialized random DiscreteHMM with {n_states} states, "
                     f"{n_observations} observations from {stream!r}")
        return cls(pi, A, B, epsilon=epsilon)

    def get_parameters(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Get current model parameters.

        Returns:
            Tuple of (pi, A, B) copies
        """
        return self.pi.copy(), self.A.copy(), self.B.copy()

    def set_parameters(self, pi: ArrayLike, A: ArrayLike, B: ArrayLike,
                       epsilon: float = DEFAULT_EPSILON) -> None:
        """
        Replace all parameters at once.

        Each vector is projected onto the probability simplex with an epsilon
        floor before being stored. Nothing is assigned unless all three
        parameters have the expected shapes.

        Raises:
            InvalidConfigurationError: If parameter dimensions don't match the model
        """
        pi = np.asarray(pi, dtype=float)
        A = np.asarray(A, dtype=float)
        B = np.asarray(B, dtype=float)

        if pi.shape != (self.n_states,):
            raise InvalidConfigurationError(
                f"pi shape {pi.shape} doesn't match expected ({self.n_states},)")

        if A.shape != (self.n_states, self.n_states):
            raise InvalidConfigurationError(
                f"A shape {A.shape} doesn't match expected ({self.n_states}, {self.n_states})")

        if B.shape != (self.n_states, self.n_observations):
            raise InvalidConfigurationError(
                f"B shape {B.shape} doesn't match expected ({self.n_states}, {self.n_observations})")

        new_pi = project_to_simplex(pi, epsilon)
        new_A = project_to_simplex(A, epsilon)
        new_B = project_to_simplex(B, epsilon)

        self.pi, self.A, self.B = new_pi, new_A, new_B

    def validate_stochastic_matrices(self, tolerance: float = 1e-9) -> bool:
        """
        Validate that all probability matrices satisfy stochastic properties.

        Returns:
            bool: True if all matrices are valid stochastic matrices

        Raises:
            ValueError: If any matrix violates stochastic properties
        """
        if not np.isclose(self.pi.sum(), 1.0, rtol=0.0, atol=tolerance):
            raise ValueError(f"Initial probabilities sum to {self.pi.sum()}, expected 1.0")

        if np.any(self.pi < 0):
            raise ValueError("Initial probabilities contain negative values")

        row_sums_A = self.A.sum(axis=1)
        if not np.allclose(row_sums_A, 1.0, rtol=0.0, atol=tolerance):
            raise ValueError(f"Transition matrix rows don't sum to 1.0: {row_sums_A}")

        if np.any(self.A < 0):
            raise ValueError("Transition matrix contains negative values")

        row_sums_B = self.B.sum(axis=1)
        if not np.allclose(row_sums_B, 1.0, rtol=0.0, atol=tolerance):
            raise ValueError(f"Emission matrix rows don't sum to 1.0: {row_sums_B}")

        if np.any(self.B < 0):
            raise ValueError("Emission matrix contains negative values")

        return True

    def validate_observations(self, observations: ArrayLike) -> np.ndarray:
        """
        Check an observation sequence against the model alphabet.

        Args:
            observations: Sequence of observation indices [T]

        Returns:
            Integer array copy of the sequence

        Raises:
            InvalidObservationError: If the sequence is empty, not one-dimensional,
                not integer valued, or holds symbols outside [0, n_observations)
        """
        # numpy silently casts bools mixed with ints to int64
        if isinstance(observations, (list, tuple)) and any(
                isinstance(o, (bool, np.bool_)) for o in observations):
            raise InvalidObservationError("Observations must be integers, got a boolean")

        obs = np.array(observations)

        if obs.ndim != 1:
            raise InvalidObservationError(f"Observations must be a 1-D sequence, got shape {obs.shape}")

        if obs.size == 0:
            raise InvalidObservationError("Observation sequence is empty")

        if obs.dtype.kind == 'f' and np.all(np.isfinite(obs)) and np.all(obs == np.floor(obs)):
            obs = obs.astype(np.int64)
        elif obs.dtype.kind not in 'iu':
            raise InvalidObservationError(
                f"Observations must be integers, got dtype {obs.dtype}")

        if np.any(obs < 0) or np.any(obs >= self.n_observations):
            bad = obs[(obs < 0) | (obs >= self.n_observations)][0]
            raise InvalidObservationError(
                f"Observation {bad} is outside the alphabet [0, {self.n_observations})")

        return obs.astype(np.int64)

    def copy(self) -> "DiscreteHMM":
        """Return an independent model with the same parameters."""
        clone = DiscreteHMM.__new__(DiscreteHMM)
        clone.n_states = self.n_states
        clone.n_observations = self.n_observations
        clone.pi, clone.A, clone.B = self.get_parameters()
        return clone

    def __repr__(self) -> str:
        """String representation of the HMM."""
        return f"DiscreteHMM(n_states={self.n_states}, n_observations={self.n_observations})"


def create_model(n_states: int, n_observations: int, seed: int = 0,
                 mode: str = 'random', stream: Optional[Mulberry32] = None,
                 epsilon: float = DEFAULT_EPSILON) -> DiscreteHMM:
    """
    Construct a model from a state count, alphabet size, seed and init mode.

    Args:
        n_states: Number of hidden states (N >= 1)
        n_observations: Alphabet size (M >= 1)
        seed: 32-bit seed for the random initializer
        mode: 'uniform' or 'random'
        stream: Optional pseudorandom stream used instead of ``Mulberry32(seed)``
        epsilon: Probability floor

    Returns:
        Initialized DiscreteHMM

    Raises:
        InvalidConfigurationError: For non-positive counts, unknown modes or a
            non-integer seed
    """
    if mode not in INIT_MODES:
        raise InvalidConfigurationError(f"Unknown init mode {mode!r}; expected one of {INIT_MODES}")

    # The seed is checked in both modes even though uniform never draws
    if stream is None:
        try:
            stream = Mulberry32(seed)
        except TypeError as e:
            raise InvalidConfigurationError(str(e))

    if mode == 'uniform':
        return DiscreteHMM.uniform(n_states, n_observations)

    return DiscreteHMM.random(n_states, n_observations, stream=stream, epsilon=epsilon)
