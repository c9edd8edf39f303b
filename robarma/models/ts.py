"""
Time-series helpers: autocovariance matrices and the causal representation.

The robust autocovariance matrix initializes the state covariance of the
filtered tau-estimator; the causal coefficients feed the scale correction of
the BIP-S estimator.
"""

import logging

import numpy as np
from scipy import linalg

from robarma.core.config import get_robust_config
from robarma.models import _numba_core as core
from robarma.robust.base import huber, median

logger = logging.getLogger("robarma.models.ts")


def autocovariances(x: np.ndarray, max_lag: int) -> np.ndarray:
    """
    Autocovariances gamma(0..max_lag) of an already centered series.

    gamma(h) = sum_t x[t] x[t+h] / (N - h), and 0 when N - h <= 0.
    """
    x = np.asarray(x, dtype=np.float64)
    nobs = x.shape[0]
    gamma = np.zeros(max_lag + 1)
    for h in range(min(max_lag, nobs - 1) + 1):
        gamma[h] = np.dot(x[:nobs - h], x[h:]) / (nobs - h)
    return gamma


def _toeplitz_block(gamma: np.ndarray, m: int, n: int) -> np.ndarray:
    return linalg.toeplitz(gamma[:m], gamma[:n])


def autocov_matrix(y, m: int, n: int) -> np.ndarray:
    """
    Sample autocovariance matrix of the mean-centered series.

    Args:
        y: Observed series
        m: Number of rows
        n: Number of columns

    Returns:
        np.ndarray: m x n matrix with entry (i, j) equal to gamma(|i - j|)
    """
    y = np.asarray(y, dtype=np.float64)
    gamma = autocovariances(y - y.mean(), max(m, n))
    return _toeplitz_block(gamma, m, n)


def robust_autocov_matrix(y, m: int, n: int) -> np.ndarray:
    """
    Autocovariance matrix of the median-centered, Huber-clipped series.

    The series is centered by its median and passed through the Huber psi
    (k = 1.345) without rescaling, so gross outliers cannot inflate the
    initial state covariance.
    """
    y = np.asarray(y, dtype=np.float64)
    clipped = huber(y - median(y))
    gamma = autocovariances(clipped, max(m, n))
    return _toeplitz_block(gamma, m, n)


def causal(phi, theta, n: int = None) -> np.ndarray:
    """
    Coefficients lambda_1..lambda_{n-1} of the causal representation.

    lambda_0 = 1 and lambda_k = sum_j phi_j lambda_{k-j} - theta_k.

    Args:
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        n: Number of terms including lambda_0, defaults to the configured
            ``causal_terms``

    Returns:
        np.ndarray: The n - 1 coefficients after lambda_0
    """
    if n is None:
        n = get_robust_config().causal_terms
    phi = np.ascontiguousarray(phi, dtype=np.float64)
    theta = np.ascontiguousarray(theta, dtype=np.float64)
    return core.causal_coefficients(phi, theta, int(n))


def bip_sigma(sigma: float, phi, theta, kappa: float = None, n: int = None) -> float:
    """
    Innovation scale used by the BIP-S residuals.

    sigma / (1 + kappa^2 * sum(lambda_k^2)) with lambda the causal
    coefficients of (phi, theta).
    """
    if kappa is None:
        kappa = get_robust_config().kappa
    lam = causal(phi, theta, n)
    return float(sigma / (1.0 + kappa * kappa * np.dot(lam, lam)))
