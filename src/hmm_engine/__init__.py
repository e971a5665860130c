"""
HMM Engine: discrete Hidden Markov Model inference and learning.

Scaled forward/backward evaluation, Baum-Welch parameter re-estimation and
log-domain Viterbi decoding over a discrete observation alphabet.
"""

__version__ = "0.1.0"
__author__ = "HMM Engine Development Team"

from .config import get_config, set_config
from .logger import get_logger
from .hmm import DiscreteHMM, Mulberry32, create_model, forward_scaled, backward_scaled, score
from .train import BaumWelchTrainer, TrainingResult, train
from .decode import viterbi, decode
from .vocabulary import Vocabulary, state_labels

__all__ = [
    "get_config",
    "set_config",
    "get_logger",
    "DiscreteHMM",
    "Mulberry32",
    "create_model",
    "forward_scaled",
    "backward_scaled",
    "score",
    "BaumWelchTrainer",
    "TrainingResult",
    "train",
    "viterbi",
    "decode",
    "Vocabulary",
    "state_labels",
    "__version__"
]
