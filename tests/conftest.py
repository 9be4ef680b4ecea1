"""Shared fixtures for update_weights tests."""

import numpy as np
import pytest

from update_weights.timing import TIMING_CONFIGURE, TIMING_RESET


@pytest.fixture(autouse=True)
def quiet_timing():
    TIMING_CONFIGURE(print_results=False)
    TIMING_RESET()
    yield
    TIMING_CONFIGURE()
    TIMING_RESET()


@pytest.fixture
def rng():
    return np.random.default_rng(20160615)
