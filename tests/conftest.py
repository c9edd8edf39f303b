'''
Pytest configuration and fixtures for the RobARMA test suite.

Provides seeded random generators, simulated ARMA series and models of the
scenarios used across the test modules, and an autouse fixture that restores
the global configuration after every test.
'''

import logging

import numpy as np
import pandas as pd
import pytest

from robarma import ARMAModel, reset_config, simulate


@pytest.fixture(autouse=True)
def restore_config():
    """Reset global configuration and the package log level after each test."""
    yield
    reset_config()
    logging.getLogger("robarma").setLevel(logging.WARNING)


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def normal_data(rng: np.random.Generator) -> np.ndarray:
    """Standard normal sample of size 1000."""
    return rng.standard_normal(1000)


# ---- Simulated ARMA series ----

@pytest.fixture
def ar1_data() -> np.ndarray:
    """AR(1) with phi = 0.5, mu = 0, n = 2000."""
    return simulate(phi=[0.5], mu=0.0, n=2000, seed=11)


@pytest.fixture
def ar1_model(ar1_data: np.ndarray) -> ARMAModel:
    return ARMAModel(ar1_data, p=1, q=0)


@pytest.fixture
def ma1_data() -> np.ndarray:
    """MA(1) with theta = 0.4, mu = 1, n = 2000."""
    return simulate(theta=[0.4], mu=1.0, n=2000, seed=12)


@pytest.fixture
def ma1_model(ma1_data: np.ndarray) -> ARMAModel:
    return ARMAModel(ma1_data, p=0, q=1)


@pytest.fixture
def arma11_data() -> np.ndarray:
    """ARMA(1,1) with phi = 0.6, theta = 0.3, mu = 1, n = 5000."""
    return simulate(phi=[0.6], theta=[0.3], mu=1.0, n=5000, seed=13)


@pytest.fixture
def arma11_model(arma11_data: np.ndarray) -> ARMAModel:
    return ARMAModel(arma11_data, p=1, q=1)


@pytest.fixture
def ar1_pandas_data(ar1_data: np.ndarray) -> pd.Series:
    """AR(1) data as a Pandas Series with a DatetimeIndex."""
    dates = pd.date_range(start='2020-01-01', periods=len(ar1_data), freq='D')
    return pd.Series(ar1_data, index=dates)
