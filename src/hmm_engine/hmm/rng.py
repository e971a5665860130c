"""
Deterministic pseudorandom stream used for model initialization.

Mulberry32 is a 32-bit generator whose whole state is one unsigned integer.
Every operation is reduced modulo 2**32, so a given seed produces the same
sequence of draws on every platform and interpreter.
"""

from typing import Tuple, Union

import numpy as np

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiplication."""
    return (a * b) & _MASK32


class Mulberry32:
    """
    Seeded Mulberry32 stream producing floats in [0, 1).

    Example:
        >>> stream = Mulberry32(42)
        >>> first = stream.next_float()
        >>> Mulberry32(42).next_float() == first
        True
    """

    def __init__(self, seed: int = 0):
        if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
            raise TypeError(f"seed must be an integer, got {type(seed).__name__}")

        # Negative seeds wrap the same way a 32-bit unsigned conversion does
        self.seed = int(seed) & _MASK32
        self._state = self.seed

    def next_uint32(self) -> int:
        """Advance the stream and return the next raw 32-bit output."""
        self._state = (self._state + _INCREMENT) & _MASK32
        t = self._state
        x = _imul(t ^ (t >> 15), 1 | t)
        x ^= (x + _imul(x ^ (x >> 7), 61 | x)) & _MASK32
        return (x ^ (x >> 14)) & _MASK32

    def next_float(self) -> float:
        """Return the next draw in [0, 1)."""
        return self.next_uint32() / _TWO_POW_32

    __call__ = next_float

    def draw(self, shape: Union[int, Tuple[int, ...]]) -> np.ndarray:
        """
        Fill an array of the given shape with successive draws in row-major order.

        Args:
            shape: Output shape

        Returns:
            Array of floats in [0, 1)
        """
        out = np.empty(shape, dtype=float)
        flat = out.reshape(-1)
        for i in range(flat.size):
            flat[i] = self.next_float()
        return out

    def __repr__(self) -> str:
        return f"Mulberry32(seed={self.seed})"
