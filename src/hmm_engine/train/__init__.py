"""
Training module.

Baum-Welch parameter re-estimation for discrete HMMs.
"""

from .trainer import (
    BaumWelchTrainer,
    TrainingResult,
    compute_posteriors,
    reestimate,
    train
)

__all__ = [
    "BaumWelchTrainer",
    "TrainingResult",
    "compute_posteriors",
    "reestimate",
    "train"
]
