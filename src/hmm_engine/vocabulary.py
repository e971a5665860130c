"""
Token vocabulary for observation sequences.

The engine only sees integer symbols in [0, M). ``Vocabulary`` maps arbitrary
string tokens to that alphabet and decoded state indices back to display labels.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .exceptions import InvalidObservationError


@dataclass(frozen=True)
class Vocabulary:
    """
    Ordered mapping between tokens and observation symbols.

    Attributes:
        symbols: Tokens in symbol order; ``symbols[k]`` is the token for symbol k
    """
    symbols: Tuple[str, ...]

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> "Vocabulary":
        """
        Build a vocabulary from the distinct tokens of a sequence, sorted ascending.

        Example:
            >>> Vocabulary.from_tokens(["W", "H", "H", "W"]).symbols
            ('H', 'W')
        """
        return cls(tuple(sorted(set(tokens))))

    @classmethod
    def from_text(cls, text: str) -> Tuple["Vocabulary", List[str]]:
        """Split whitespace-separated text into tokens and build a vocabulary over them."""
        tokens = text.split()
        return cls.from_tokens(tokens), tokens

    @property
    def size(self) -> int:
        return len(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def as_dict(self) -> Dict[str, int]:
        """Token to symbol index mapping."""
        return {token: index for index, token in enumerate(self.symbols)}

    def encode(self, tokens: Sequence[str]) -> List[int]:
        """
        Map tokens to symbol indices.

        Raises:
            InvalidObservationError: If a token is not in the vocabulary
        """
        mapping = self.as_dict()
        encoded = []
        for token in tokens:
            if token not in mapping:
                raise InvalidObservationError(f"Unknown token {token!r}; vocabulary is {list(self.symbols)}")
            encoded.append(mapping[token])
        return encoded

    def decode(self, indices: Sequence[int]) -> List[str]:
        """Map symbol indices back to tokens."""
        return [self.symbols[int(index)] for index in indices]


def state_labels(n_states: int) -> List[str]:
    """Display labels S0..S{N-1} for hidden states."""
    return [f"S{i}" for i in range(n_states)]
