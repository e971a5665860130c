"""
Test configuration and fixtures for the HMM engine.

This file contains pytest configuration and shared fixtures
for testing the HMM engine.
"""

import logging

import pytest
import numpy as np

from hmm_engine.config import get_config, reset_config
from hmm_engine.hmm import DiscreteHMM, Mulberry32
from hmm_engine.logger import set_log_level


@pytest.fixture(autouse=True)
def clean_config():
    """Restore default configuration and log level after every test."""
    yield
    reset_config()
    set_log_level(get_config('logging', 'level'))


@pytest.fixture
def engine_caplog(caplog):
    """caplog wired to the engine logger, which does not propagate to root."""
    engine_logger = logging.getLogger('hmm_engine')
    engine_logger.addHandler(caplog.handler)
    yield caplog
    engine_logger.removeHandler(caplog.handler)


@pytest.fixture
def weather_observations():
    """W H H W H with H -> 0 and W -> 1."""
    return [1, 0, 0, 1, 0]


@pytest.fixture
def long_observations():
    """Deterministic pseudorandom sequence over a 4-symbol alphabet."""
    stream = Mulberry32(2024)
    return [int(stream.next_float() * 4) for _ in range(60)]


@pytest.fixture
def handmade_model():
    """Small model with distinct, known parameters."""
    pi = np.array([0.6, 0.3, 0.1])
    A = np.array([[0.7, 0.2, 0.1],
                  [0.1, 0.8, 0.1],
                  [0.2, 0.3, 0.5]])
    B = np.array([[0.8, 0.1, 0.05, 0.05],
                  [0.1, 0.8, 0.05, 0.05],
                  [0.05, 0.05, 0.8, 0.1]])
    return DiscreteHMM(pi, A, B)


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
