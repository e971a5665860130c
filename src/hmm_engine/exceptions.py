"""
Exception hierarchy for the HMM engine.
"""


class HMMEngineError(Exception):
    """Base exception for the HMM engine."""
    pass


class InvalidConfigurationError(HMMEngineError, ValueError):
    """Caller supplied an invalid model or training configuration."""
    pass


class InvalidObservationError(InvalidConfigurationError):
    """Observation sequence is empty, malformed or outside the alphabet."""
    pass
