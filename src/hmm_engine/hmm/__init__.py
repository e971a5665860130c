"""
Hidden Markov Model module.

Parameter store, initializers and the scaled forward/backward evaluators.
"""

from .model import DiscreteHMM, create_model, INIT_MODES
from .rng import Mulberry32
from .simplex import project_to_simplex, DEFAULT_EPSILON, SCALE_FLOOR, LOG_FLOOR
from .inference import ForwardResult, forward_scaled, backward_scaled, score

__all__ = [
    "DiscreteHMM",
    "create_model",
    "INIT_MODES",
    "Mulberry32",
    "project_to_simplex",
    "DEFAULT_EPSILON",
    "SCALE_FLOOR",
    "LOG_FLOOR",
    "ForwardResult",
    "forward_scaled",
    "backward_scaled",
    "score"
]
