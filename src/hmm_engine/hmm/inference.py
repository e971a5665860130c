"""
Scaled forward and backward recursions.

Both passes keep every time slice normalized so that probabilities never
underflow; the per-step scaling coefficients recover the sequence
log-likelihood as ``sum(log(c_t))``.
"""

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from .model import DiscreteHMM
from .simplex import SCALE_FLOOR
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class ForwardResult:
    """
    Output of the scaled forward pass.

    Attributes:
        alpha: Scaled forward probabilities [T, n_states]; every row sums to 1
        scale: Scaling coefficients c_t [T]
        log_likelihood: log P(O | lambda)
    """
    alpha: np.ndarray
    scale: np.ndarray
    log_likelihood: float


def forward_scaled(model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]],
                   scale_floor: float = SCALE_FLOOR) -> ForwardResult:
    """
    Compute the scaled forward pass.

    alpha[0, i] = pi[i] * B[i, O[0]]; alpha[t, j] = (sum_i alpha[t-1, i] * A[i, j]) * B[j, O[t]].
    Each row is divided by its sum c_t. A sum of exactly zero is replaced with
    ``scale_floor`` instead of being reported.

    Args:
        model: Current model parameters
        observations: Sequence of observation indices [T]
        scale_floor: Substitute for a zero scaling coefficient

    Returns:
        ForwardResult with alpha, scaling coefficients and log-likelihood

    Raises:
        InvalidObservationError: If observations are empty or outside the alphabet
    """
    obs = model.validate_observations(observations)
    T = len(obs)

    alpha = np.zeros((T, model.n_states))
    c_scale = np.zeros(T)

    alpha[0, :] = model.pi * model.B[:, obs[0]]
    c_scale[0] = alpha[0, :].sum()
    if c_scale[0] == 0:
        c_scale[0] = scale_floor
    alpha[0, :] /= c_scale[0]

    for t in range(1, T):
        alpha[t, :] = (alpha[t - 1, :] @ model.A) * model.B[:, obs[t]]

        c_scale[t] = alpha[t, :].sum()
        if c_scale[t] == 0:
            c_scale[t] = scale_floor

        alpha[t, :] /= c_scale[t]

    log_likelihood = float(np.sum(np.log(c_scale)))

    logger.debug(f"Forward pass completed: T={T}, log_likelihood={log_likelihood:.6f}")

    return ForwardResult(alpha=alpha, scale=c_scale, log_likelihood=log_likelihood)


def backward_scaled(model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]],
                    scale: np.ndarray) -> np.ndarray:
    """
    Compute the scaled backward pass.

    beta[T-1, i] = 1; beta[t, i] = (sum_j A[i, j] * B[j, O[t+1]] * beta[t+1, j]) / c[t+1].

    ``scale`` must come from ``forward_scaled`` run on the same observations and
    the same, unmodified parameters. This is not checked.

    Args:
        model: Current model parameters
        observations: Sequence of observation indices [T]
        scale: Scaling coefficients from the matching forward pass [T]

    Returns:
        beta: Scaled backward probabilities [T, n_states]
    """
    obs = model.validate_observations(observations)
    T = len(obs)

    beta = np.zeros((T, model.n_states))
    beta[T - 1, :] = 1.0

    for t in range(T - 2, -1, -1):
        beta[t, :] = model.A @ (model.B[:, obs[t + 1]] * beta[t + 1, :])
        beta[t, :] /= scale[t + 1]

    return beta


def score(model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]]) -> float:
    """
    Compute log-likelihood of an observation sequence using the forward algorithm.

    Returns:
        log P(O | lambda)
    """
    return forward_scaled(model, observations).log_likelihood
