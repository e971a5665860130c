"""
Log-domain Viterbi decoding.
"""

from typing import List, Sequence, Tuple, Union

import numpy as np

from ..hmm.model import DiscreteHMM
from ..hmm.simplex import LOG_FLOOR
from ..logger import get_logger

logger = get_logger(__name__)


def viterbi(model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]],
            log_floor: float = LOG_FLOOR) -> Tuple[np.ndarray, float]:
    """
    Find the most likely hidden-state path.

    dp[0, i] = log pi[i] + log B[i, O[0]]
    dp[t, j] = max_i (dp[t-1, i] + log A[i, j]) + log B[j, O[t]]

    Probabilities are floored at ``log_floor`` before taking logarithms. When
    several predecessors reach the same maximal score the lowest state index
    wins, both for backpointers and for the final state.

    Args:
        model: Model parameters
        observations: Sequence of observation indices [T]
        log_floor: Minimum probability before the logarithm

    Returns:
        Tuple of (path [T], log-probability of the path)

    Raises:
        InvalidObservationError: If observations are empty or outside the alphabet
    """
    obs = model.validate_observations(observations)
    T = len(obs)

    log_pi = np.log(np.maximum(model.pi, log_floor))
    log_A = np.log(np.maximum(model.A, log_floor))
    log_B = np.log(np.maximum(model.B, log_floor))

    dp = np.zeros((T, model.n_states))
    backpointer = np.zeros((T, model.n_states), dtype=np.int64)

    dp[0, :] = log_pi + log_B[:, obs[0]]

    for t in range(1, T):
        # scores[i, j] = dp[t-1, i] + log A[i, j]
        scores = dp[t - 1, :, None] + log_A
        # argmax returns the first maximal index, which is the tie-break we want
        backpointer[t, :] = np.argmax(scores, axis=0)
        dp[t, :] = scores[backpointer[t, :], np.arange(model.n_states)] + log_B[:, obs[t]]

    path = np.zeros(T, dtype=np.int64)
    path[T - 1] = int(np.argmax(dp[T - 1, :]))
    for t in range(T - 2, -1, -1):
        path[t] = backpointer[t + 1, path[t + 1]]

    log_probability = float(dp[T - 1, path[T - 1]])

    logger.debug(f"Viterbi decoding completed: T={T}, log_probability={log_probability:.6f}")

    return path, log_probability


def decode(model: DiscreteHMM, observations: Union[np.ndarray, Sequence[int]],
           log_floor: float = LOG_FLOOR) -> List[int]:
    """
    Decode the most likely state sequence.

    Returns:
        State indices in [0, n_states), one per observation
    """
    path, _ = viterbi(model, observations, log_floor=log_floor)
    return [int(state) for state in path]
