"""
Numba-accelerated kernels for the robust estimation engine.

This module holds the compiled scalar and vector kernels behind the public
functions of ``robarma.robust``: the bisquare and Huber functions, the Muler
rho/eta family used by the S, MM and BIP estimators, the Bianco rho/psi/w
family used by the filtered tau-estimator, and the iterative M-scale.

Every piecewise kernel branches on the magnitude of its argument only and
evaluates plain polynomial arithmetic on each piece. The polynomial pieces
agree in value and first derivative at the knots, so finite-difference
gradients of any cost built on these kernels are well behaved across piece
boundaries.
"""

import logging

import numpy as np
from numba import jit

logger = logging.getLogger("robarma.robust._numba_core")

# rho selectors understood by mscale
RHO_BISQUARE = 0
RHO_BIP1 = 1
RHO_BIP2 = 2
RHO_TAU1 = 3
RHO_TAU2 = 4

BISQUARE_K = 1.547645
HUBER_K = 1.345
BIP_RHO1_SCALE = 0.405
BIP_RHO_MAX = 3.25
TAU_C1 = 1.55
TAU_C2 = 2.8
MADN_CONSTANT = 0.6745


# ============================================================================
# Classical robust primitives
# ============================================================================

@jit(nopython=True, cache=True)
def bisquare_scalar(x: float, k: float) -> float:
    if abs(x) <= k:
        u = 1.0 - (x / k) ** 2
        return 1.0 - u * u * u
    return 1.0


@jit(nopython=True, cache=True)
def huber_scalar(x: float, k: float) -> float:
    if abs(x) <= k:
        return x
    if x > 0.0:
        return k
    return -k


@jit(nopython=True, cache=True)
def huber_array(x: np.ndarray, k: float) -> np.ndarray:
    out = np.empty(x.shape[0])
    for i in range(x.shape[0]):
        out[i] = huber_scalar(x[i], k)
    return out


# ============================================================================
# Muler et al. rho / eta family (S, MM, BIP-S, BIP-MM)
# ============================================================================

@jit(nopython=True, cache=True)
def bip_rho2_scalar(x: float) -> float:
    ax = abs(x)
    if ax <= 2.0:
        return 0.5 * x * x
    if ax <= 3.0:
        x2 = x * x
        x4 = x2 * x2
        return 0.002 * x4 * x4 - 0.052 * x4 * x2 + 0.432 * x4 - 0.972 * x2 + 1.792
    return BIP_RHO_MAX


@jit(nopython=True, cache=True)
def bip_rho1_scalar(x: float) -> float:
    return bip_rho2_scalar(x / BIP_RHO1_SCALE)


@jit(nopython=True, cache=True)
def bip_eta_scalar(x: float) -> float:
    ax = abs(x)
    if ax <= 2.0:
        return x
    if ax <= 3.0:
        x2 = x * x
        x3 = x2 * x
        x5 = x3 * x2
        return 0.016 * x5 * x2 - 0.312 * x5 + 1.728 * x3 - 1.944 * x
    return 0.0


# ============================================================================
# Bianco et al. rho / psi / w family (filtered tau)
# ============================================================================

@jit(nopython=True, cache=True)
def tau_rho1_scalar(x: float) -> float:
    if abs(x) <= TAU_C1:
        d2 = (x / TAU_C1) ** 2
        return 3.0 * d2 - 3.0 * d2 * d2 + d2 * d2 * d2
    return 1.0


@jit(nopython=True, cache=True)
def tau_rho2_scalar(x: float) -> float:
    if abs(x) <= TAU_C2:
        x2 = x * x
        return 0.14 * x2 + 0.012 * x2 * x2 - 0.0018 * x2 * x2 * x2
    return 1.0


@jit(nopython=True, cache=True)
def tau_psi_scalar(x: float) -> float:
    return huber_scalar(x, TAU_C1)


@jit(nopython=True, cache=True)
def tau_w_scalar(x: float) -> float:
    if x == 0.0:
        return 0.0
    return tau_psi_scalar(x) / x


# ============================================================================
# Dispatch and vector forms
# ============================================================================

@jit(nopython=True, cache=True)
def rho_scalar(x: float, kind: int, k: float) -> float:
    if kind == RHO_BISQUARE:
        return bisquare_scalar(x, k)
    if kind == RHO_BIP1:
        return bip_rho1_scalar(x)
    if kind == RHO_BIP2:
        return bip_rho2_scalar(x)
    if kind == RHO_TAU1:
        return tau_rho1_scalar(x)
    return tau_rho2_scalar(x)


@jit(nopython=True, cache=True)
def rho_array(x: np.ndarray, kind: int, k: float) -> np.ndarray:
    out = np.empty(x.shape[0])
    for i in range(x.shape[0]):
        out[i] = rho_scalar(x[i], kind, k)
    return out


@jit(nopython=True, cache=True)
def rho_sum(x: np.ndarray, kind: int, k: float, scale: float) -> float:
    """Sum of rho(x / scale) without allocating the scaled vector."""
    total = 0.0
    for i in range(x.shape[0]):
        total += rho_scalar(x[i] / scale, kind, k)
    return total


@jit(nopython=True, cache=True)
def bip_eta_array(x: np.ndarray) -> np.ndarray:
    out = np.empty(x.shape[0])
    for i in range(x.shape[0]):
        out[i] = bip_eta_scalar(x[i])
    return out


@jit(nopython=True, cache=True)
def tau_psi_array(x: np.ndarray) -> np.ndarray:
    out = np.empty(x.shape[0])
    for i in range(x.shape[0]):
        out[i] = tau_psi_scalar(x[i])
    return out


@jit(nopython=True, cache=True)
def tau_w_array(x: np.ndarray) -> np.ndarray:
    out = np.empty(x.shape[0])
    for i in range(x.shape[0]):
        out[i] = tau_w_scalar(x[i])
    return out


# ============================================================================
# Location and scale
# ============================================================================

@jit(nopython=True, cache=True)
def median(x: np.ndarray) -> float:
    s = np.sort(x)
    n = s.shape[0]
    if n % 2 == 0:
        return 0.5 * (s[n // 2 - 1] + s[n // 2])
    return s[n // 2]


@jit(nopython=True, cache=True)
def mscale(x: np.ndarray, b: float, kind: int, k: float, tol: float, max_iter: int) -> float:
    """
    M-scale of ``x`` by fixed-point iteration.

    Solves mean(rho(x / sigma)) = b starting from the normalized median
    absolute value. ``x`` is assumed to be centered.

    Args:
        x: Centered data or residuals
        b: Consistency target
        kind: rho selector (RHO_* constant)
        k: Tuning constant, used by the bisquare only
        tol: Relative change at which the iteration stops
        max_iter: Iteration cap

    Returns:
        float: The scale estimate, 0.0 when the starting value is 0
    """
    n = x.shape[0]
    sigma = median(np.abs(x)) / MADN_CONSTANT
    if sigma == 0.0 or n == 0:
        return 0.0

    for _ in range(max_iter):
        mean_rho = rho_sum(x, kind, k, sigma) / n
        sigma_next = np.sqrt(sigma * sigma * mean_rho / b)
        err = abs(sigma_next - sigma) / sigma
        sigma = sigma_next
        if err < tol or sigma == 0.0:
            break
    return sigma
