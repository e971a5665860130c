"""
Decoding module.

Viterbi maximum-likelihood state decoding.
"""

from .viterbi import viterbi, decode

__all__ = [
    "viterbi",
    "decode"
]
