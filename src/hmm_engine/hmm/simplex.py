"""
Probability simplex projection with an epsilon floor.

Every probability vector the engine produces (initial distribution, transition
rows, emission rows) passes through ``project_to_simplex`` before it is stored,
so no stored probability is ever exactly zero and every row sums to one.
"""

from typing import Union, Sequence

import numpy as np

# Floor applied to probabilities and posterior denominators
DEFAULT_EPSILON = 1e-12

# Substituted for an all-zero forward scaling coefficient
SCALE_FLOOR = 1e-300

# Applied to probabilities before taking logarithms in Viterbi decoding
LOG_FLOOR = 1e-300


def project_to_simplex(values: Union[np.ndarray, Sequence], epsilon: float = DEFAULT_EPSILON) -> np.ndarray:
    """
    Floor every entry at ``epsilon`` and renormalize along the last axis.

    Works on a single vector or on a matrix, in which case each row is
    treated independently. The input is never modified.

    Args:
        values: Probability vector [K] or row-stochastic matrix [R, K]
        epsilon: Minimum value kept before renormalizing (must be positive)

    Returns:
        New array of the same shape whose rows sum to 1
    """
    if epsilon <= 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")

    projected = np.array(values, dtype=float)
    if projected.ndim == 0 or projected.shape[-1] == 0:
        raise ValueError("Cannot project an empty array onto the probability simplex")

    np.maximum(projected, epsilon, out=projected)
    projected /= projected.sum(axis=-1, keepdims=True)
    return projected


def floor_denominator(value: Union[float, np.ndarray], epsilon: float = DEFAULT_EPSILON):
    """Clamp a normalizer (scalar or array) so it is never below ``epsilon``."""
    return np.maximum(value, epsilon)
