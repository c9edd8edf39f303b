"""
Simulation of ARMA(p,q) processes.

Provides the stationarity and invertibility checks, a seeded simulator that
discards a burn-in period, and a generator of Gaussian innovations
contaminated with additive outliers for robustness experiments.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from robarma.core.exceptions import ParameterError, SimulationError
from robarma.core.validation import validate_coefficients
from robarma.models import _numba_core as core

logger = logging.getLogger("robarma.models.simulate")


def _outside_unit_circle(poly: np.ndarray) -> bool:
    # poly holds ascending coefficients, np.roots wants them descending
    roots = np.roots(poly[::-1])
    return bool(np.all(np.abs(roots) > 1.0))


def stationary(phi: Sequence[float]) -> bool:
    """
    Whether all roots of 1 - sum(phi_k z^k) lie strictly outside the unit circle.

    An empty coefficient vector is stationary.
    """
    phi = validate_coefficients(phi, "phi")
    return _outside_unit_circle(np.r_[1.0, -phi])


def invertible(theta: Sequence[float]) -> bool:
    """
    Whether all roots of 1 + sum(theta_k z^k) lie strictly outside the unit circle.

    An empty coefficient vector is invertible.
    """
    theta = validate_coefficients(theta, "theta")
    return _outside_unit_circle(np.r_[1.0, theta])


def simulate(phi: Sequence[float] = (),
             theta: Sequence[float] = (),
             mu: float = 0.0,
             n: int = 100,
             burn_in: int = 100,
             seed: Optional[int] = 0,
             innovations: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Simulate a stationary, invertible ARMA(p,q) process.

    The recursion starts from zeros, runs over ``n + burn_in`` innovations
    and the last ``n`` values are returned.

    Args:
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        mu: Process mean
        n: Number of observations to return
        burn_in: Number of initial observations to discard
        seed: Seed of ``numpy.random.default_rng``; the same seed gives the
            same series. None draws fresh entropy
        innovations: Innovation vector of length ``n + burn_in``, or of length
            ``n`` in which case the burn-in is padded with standard normals

    Returns:
        np.ndarray: Simulated series of length n

    Raises:
        SimulationError: If phi is not stationary, theta is not invertible or
            the innovations have the wrong length
        ParameterError: If n or burn_in is invalid

    Examples:
        >>> from robarma import simulate
        >>> x = simulate(phi=[0.5], theta=[0.3], mu=1.0, n=50, seed=7)
        >>> x.shape
        (50,)
    """
    phi = validate_coefficients(phi, "phi")
    theta = validate_coefficients(theta, "theta")

    if int(n) < 1:
        raise ParameterError("n must be positive", param_name="n", param_value=n,
                             constraint="n >= 1")
    if int(burn_in) < 0:
        raise ParameterError("burn_in must be non-negative", param_name="burn_in",
                             param_value=burn_in, constraint="burn_in >= 0")
    n, burn_in = int(n), int(burn_in)

    if not stationary(phi):
        raise SimulationError(
            "AR coefficients are not stationary",
            param_name="phi",
            param_value=phi,
            n_periods=n,
            issue="roots of 1 - phi(z) inside or on the unit circle"
        )
    if not invertible(theta):
        raise SimulationError(
            "MA coefficients are not invertible",
            param_name="theta",
            param_value=theta,
            n_periods=n,
            issue="roots of 1 + theta(z) inside or on the unit circle"
        )

    total = n + burn_in
    rng = np.random.default_rng(seed)
    if innovations is None:
        e = rng.standard_normal(total)
    else:
        e = np.asarray(innovations, dtype=np.float64).ravel()
        if e.shape[0] == n and burn_in > 0:
            e = np.concatenate([rng.standard_normal(burn_in), e])
        elif e.shape[0] != total:
            raise SimulationError(
                f"innovations must have length {n} or {total}, got {e.shape[0]}",
                param_name="innovations",
                param_value=e.shape[0],
                n_periods=n,
                issue="wrong length"
            )

    logger.debug(f"Simulating ARMA({phi.shape[0]},{theta.shape[0]}) with n={n}, burn_in={burn_in}")
    x = core.arma_simulate(phi, theta, float(mu), np.ascontiguousarray(e))
    return x[burn_in:]


def generate_innovations_with_outliers(n: int,
                                       fraction: float = 0.1,
                                       magnitude: float = 5.0,
                                       seed: Optional[int] = None) -> np.ndarray:
    """
    Standard normal innovations with a share of additive outliers.

    ``round(fraction * n)`` distinct positions receive an additive shock of
    ``+magnitude`` or ``-magnitude`` with equal probability.

    Args:
        n: Number of innovations
        fraction: Share of contaminated positions, in [0, 1]
        magnitude: Size of the additive outliers
        seed: Seed of ``numpy.random.default_rng``

    Returns:
        np.ndarray: The contaminated innovations

    Raises:
        ParameterError: If n is not positive or fraction is outside [0, 1]
    """
    if int(n) < 1:
        raise ParameterError("n must be positive", param_name="n", param_value=n,
                             constraint="n >= 1")
    if not 0.0 <= fraction <= 1.0:
        raise ParameterError("fraction must lie in [0, 1]", param_name="fraction",
                             param_value=fraction, constraint="0 <= fraction <= 1")
    n = int(n)

    rng = np.random.default_rng(seed)
    e = rng.standard_normal(n)
    count = int(round(fraction * n))
    if count:
        positions = rng.choice(n, size=count, replace=False)
        signs = rng.choice(np.array([-1.0, 1.0]), size=count)
        e[positions] += magnitude * signs
    return e
