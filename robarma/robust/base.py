"""
Classical robust location and scale primitives.

Median, MAD and MADN, the Huber psi-function, the bisquare rho-function and
the iterative M-scale. Every function accepts scalars as well as array-likes;
arrays keep their shape. None of these functions raise on numerical
degeneracy: a zero starting scale yields a zero M-scale, and downstream costs
are expected to cope with it.
"""

import logging
from typing import Callable, Union

import numpy as np

from robarma.core.exceptions import ParameterError
from robarma.robust import _numba_core as core

logger = logging.getLogger("robarma.robust.base")

ArrayOrScalar = Union[float, np.ndarray]
RhoSpec = Union[str, Callable[[np.ndarray], np.ndarray]]

_RHO_KINDS = {
    "bisquare": core.RHO_BISQUARE,
    "bip": core.RHO_BIP1,
    "bip_rho1": core.RHO_BIP1,
    "bip_rho2": core.RHO_BIP2,
    "tau": core.RHO_TAU1,
    "tau_rho1": core.RHO_TAU1,
    "tau_rho2": core.RHO_TAU2,
}


def _as_vector(x) -> np.ndarray:
    return np.ascontiguousarray(np.asarray(x, dtype=np.float64).ravel())


def apply_elementwise(kernel_scalar, kernel_array, x, *args) -> ArrayOrScalar:
    """Evaluate a compiled kernel on a scalar or an array-like of any shape."""
    if np.ndim(x) == 0:
        return float(kernel_scalar(float(x), *args))
    arr = np.asarray(x, dtype=np.float64)
    return kernel_array(_as_vector(arr), *args).reshape(arr.shape)


def median(x) -> float:
    """Median; the mean of the two middle order statistics for even lengths."""
    return float(core.median(_as_vector(x)))


def mad(x) -> float:
    """Median absolute deviation about the median."""
    v = _as_vector(x)
    return float(core.median(np.abs(v - core.median(v))))


def madn(x) -> float:
    """Normalized MAD, consistent for the standard deviation at the normal."""
    return mad(x) / core.MADN_CONSTANT


def huber(x, k: float = core.HUBER_K) -> ArrayOrScalar:
    """Huber psi-function: identity on [-k, k], clipped to +-k outside."""
    return apply_elementwise(core.huber_scalar, core.huber_array, x, float(k))


def bisquare(x, k: float = core.BISQUARE_K) -> ArrayOrScalar:
    """
    Tukey bisquare rho-function normalized to a maximum of 1.

    The default ``k = 1.547645`` gives a 50% breakdown M-scale at
    consistency ``b = 0.5``; ``k = 4.685`` gives 95% efficiency for location.
    """
    return apply_elementwise(
        lambda v, kk: core.rho_scalar(v, core.RHO_BISQUARE, kk),
        lambda v, kk: core.rho_array(v, core.RHO_BISQUARE, kk),
        x, float(k)
    )


def _callable_scale(x: np.ndarray, b: float, rho: Callable, tol: float, max_iter: int) -> float:
    sigma = float(np.median(np.abs(x))) / core.MADN_CONSTANT
    if sigma == 0.0:
        return 0.0
    for _ in range(max_iter):
        sigma_next = float(np.sqrt(sigma ** 2 * np.mean(rho(x / sigma)) / b))
        err = abs(sigma_next - sigma) / sigma
        sigma = sigma_next
        if err < tol or sigma == 0.0:
            break
    return sigma


def scale(
    x,
    b: float = 0.5,
    rho: RhoSpec = "bisquare",
    tol: float = 1e-6,
    max_iter: int = 100,
    k: float = core.BISQUARE_K
) -> float:
    """
    M-scale estimate of (assumed centered) data.

    Solves ``mean(rho(x / sigma)) = b`` with the fixed-point iteration
    ``sigma <- sigma * sqrt(mean(rho(x / sigma)) / b)`` started at
    ``median(|x|) / 0.6745``.

    Args:
        x: Centered data or residuals
        b: Consistency target of the scale equation
        rho: One of ``"bisquare"``, ``"bip"`` (Muler rho1), ``"bip_rho2"``,
            ``"tau"`` (Bianco rho1), ``"tau_rho2"``, or a callable mapping an
            array to an array of the same shape
        tol: Relative change of sigma at which the iteration stops
        max_iter: Maximum number of iterations
        k: Tuning constant of the bisquare

    Returns:
        float: The M-scale, 0.0 when more than half of ``x`` is exactly zero

    Examples:
        >>> import numpy as np
        >>> from robarma.robust import scale
        >>> round(scale(np.zeros(5)), 3)
        0.0
    """
    v = _as_vector(x)
    if v.shape[0] == 0:
        return 0.0

    if callable(rho):
        return _callable_scale(v, float(b), rho, float(tol), int(max_iter))

    if rho not in _RHO_KINDS:
        raise ParameterError(
            f"Unknown rho-function for the M-scale: {rho}",
            param_name="rho",
            param_value=rho,
            constraint=f"One of {sorted(_RHO_KINDS)} or a callable"
        )
    kind = _RHO_KINDS[rho]

    return float(core.mscale(v, float(b), kind, float(k), float(tol), int(max_iter)))
