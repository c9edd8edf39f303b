"""
Numba-accelerated core functions for ARMA estimation.

This module provides the compiled loops every cost functional is built on:

- the classical ARMA residual recursion
- the bounded-innovation-propagation (BIP) residual recursion
- the Gaussian Kalman filter used by maximum likelihood
- the robust (bounded-influence) Kalman filter used by the filtered tau-estimator
- causal (psi-weight) coefficients of theta(B) / phi(B)
- the ARMA simulation recursion

All functions take plain float64 arrays and scalars so that they can be
called directly from the optimizer's objective without Python-level loops.
"""

import logging

import numpy as np
from numba import jit

from robarma.robust._numba_core import bip_eta_scalar, tau_psi_scalar, tau_w_scalar

logger = logging.getLogger("robarma.models._numba_core")


# ============================================================================
# Residual recursions
# ============================================================================

@jit(nopython=True, cache=True)
def arma_residuals(y: np.ndarray,
                   phi: np.ndarray,
                   theta: np.ndarray,
                   mu: float,
                   r: int) -> np.ndarray:
    """
    Classical ARMA residuals.

    e[0..r-1] = 0 and, for i >= r,
    e[i] = y[i] - mu (1 - sum(phi)) - sum_k phi[k] y[i-k] - sum_k theta[k] e[i-k].

    Args:
        y: Observed series
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        mu: Location
        r: max(p, q), number of leading residuals fixed at zero

    Returns:
        np.ndarray: Residuals, same length as ``y``
    """
    n = y.shape[0]
    p = phi.shape[0]
    q = theta.shape[0]
    e = np.zeros(n)
    drift = mu * (1.0 - np.sum(phi))

    for i in range(r, n):
        ar = 0.0
        for k in range(p):
            ar += phi[k] * y[i - k - 1]
        ma = 0.0
        for k in range(q):
            ma += theta[k] * e[i - k - 1]
        e[i] = y[i] - drift - ar - ma

    return e


@jit(nopython=True, cache=True)
def bip_arma_residuals(y: np.ndarray,
                       phi: np.ndarray,
                       theta: np.ndarray,
                       mu: float,
                       sigma: float,
                       r: int) -> np.ndarray:
    """
    Bounded-innovation-propagation ARMA residuals.

    Past observations are replaced by their cleaned reconstruction
    y[i-k] - e[i-k] + sigma * eta(e[i-k] / sigma), so a single outlier
    cannot propagate through the recursion. With ``sigma <= 0`` the eta
    terms vanish.

    Args:
        y: Observed series
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        mu: Location
        sigma: Residual scale used inside eta
        r: max(p, q)

    Returns:
        np.ndarray: Residuals, same length as ``y``
    """
    n = y.shape[0]
    p = phi.shape[0]
    q = theta.shape[0]
    e = np.zeros(n)
    drift = mu * (1.0 - np.sum(phi))
    gated = sigma > 0.0

    for i in range(r, n):
        ar = 0.0
        rp = 0.0
        for k in range(p):
            past = e[i - k - 1]
            ar += phi[k] * (y[i - k - 1] - past)
            if gated:
                rp += phi[k] * bip_eta_scalar(past / sigma)
        rq = 0.0
        if gated:
            for k in range(q):
                rq += theta[k] * bip_eta_scalar(e[i - k - 1] / sigma)
        e[i] = y[i] - drift - ar - sigma * rp - sigma * rq

    return e


# ============================================================================
# Kalman filters
# ============================================================================

@jit(nopython=True, cache=True)
def _predict(a: np.ndarray, P: np.ndarray, F: np.ndarray, H: np.ndarray,
             c: np.ndarray, sigma2: float):
    """a <- F a + c, P <- F P F' + sigma2 H H'."""
    r = a.shape[0]
    a_new = np.empty(r)
    for i in range(r):
        acc = c[i]
        for j in range(r):
            acc += F[i, j] * a[j]
        a_new[i] = acc

    FP = np.zeros((r, r))
    for i in range(r):
        for k in range(r):
            fik = F[i, k]
            if fik != 0.0:
                for j in range(r):
                    FP[i, j] += fik * P[k, j]

    P_new = np.empty((r, r))
    for i in range(r):
        for j in range(r):
            acc = sigma2 * H[i] * H[j]
            for k in range(r):
                acc += FP[i, k] * F[j, k]
            P_new[i, j] = acc

    return a_new, P_new


@jit(nopython=True, cache=True)
def kalman_filter(y: np.ndarray,
                  F: np.ndarray,
                  H: np.ndarray,
                  c: np.ndarray,
                  P0: np.ndarray,
                  sigma2: float,
                  eps: float):
    """
    Gaussian Kalman filter for the ARMA state-space form.

    For each observation: predict, then update with
    v = y[i] - a[0], f = P[0, 0] (floored at ``eps``),
    a <- a + P[:, 0] v / f, P <- P - P[:, 0] P[0, :] / f.

    Args:
        y: Observed series
        F: Transition matrix
        H: Innovation loading vector
        c: Drift vector
        P0: Initial state covariance
        sigma2: Innovation variance used in the prediction step
        eps: Floor for the innovation variance f

    Returns:
        Tuple of (f, v, w): innovation variances, innovations and
        standardized innovations v / sqrt(f)
    """
    n = y.shape[0]
    r = F.shape[0]
    f = np.ones(n)
    v = np.zeros(n)
    w = np.zeros(n)

    a = np.zeros(r)
    P = P0.copy()

    for i in range(n):
        a, P = _predict(a, P, F, H, c, sigma2)

        fi = P[0, 0]
        if not fi > eps:
            fi = eps
        vi = y[i] - a[0]

        f[i] = fi
        v[i] = vi
        w[i] = vi / np.sqrt(fi)

        m = P[:, 0].copy()
        for j in range(r):
            a[j] += m[j] * vi / fi
        for j in range(r):
            for k in range(r):
                P[j, k] -= m[j] * m[k] / fi

    return f, v, w


@jit(nopython=True, cache=True)
def robust_kalman_filter(y: np.ndarray,
                         F: np.ndarray,
                         H: np.ndarray,
                         c: np.ndarray,
                         P0: np.ndarray,
                         sigma: float,
                         eps: float):
    """
    Bounded-influence Kalman filter of the filtered tau-estimator.

    The state update replaces the Gaussian gain by the Bianco psi and w
    functions of the standardized prediction error:
    a <- a + (m / s) psi(u / s), P <- P - (m m' / s^2) w(u / s),
    with m = P[:, 0] and s = sqrt(m[0]). The first observation only seeds
    the recursion: u[0] = 0 and s[0] = sigma.

    Args:
        y: Observed series
        F: Transition matrix
        H: Innovation loading vector
        c: Drift vector
        P0: Initial state covariance (robust autocovariance)
        sigma: Innovation scale used in the prediction step
        eps: Floor for the prediction variance m[0]

    Returns:
        Tuple of (u, s): prediction errors and their scales
    """
    n = y.shape[0]
    r = F.shape[0]
    u = np.zeros(n)
    s = np.empty(n)
    s[0] = sigma

    a = np.zeros(r)
    P = P0.copy()
    sigma2 = sigma * sigma

    for i in range(1, n):
        a, P = _predict(a, P, F, H, c, sigma2)

        m = P[:, 0].copy()
        m0 = m[0]
        if not m0 > eps:
            m0 = eps
        si = np.sqrt(m0)
        ui = y[i] - a[0]

        s[i] = si
        u[i] = ui

        z = ui / si
        gain = tau_psi_scalar(z) / si
        weight = tau_w_scalar(z) / (si * si)
        for j in range(r):
            a[j] += m[j] * gain
        for j in range(r):
            for k in range(r):
                P[j, k] -= m[j] * m[k] * weight

    return u, s


# ============================================================================
# Causal representation and simulation
# ============================================================================

@jit(nopython=True, cache=True)
def causal_coefficients(phi: np.ndarray, theta: np.ndarray, n: int) -> np.ndarray:
    """
    Coefficients lambda_1..lambda_{n-1} of the causal representation.

    lambda_0 = 1, lambda_k = sum_j phi_j lambda_{k-j} - theta_k, with
    lambda_k = 0 for k < 0 and theta_k = 0 for k > q.
    """
    p = phi.shape[0]
    q = theta.shape[0]
    lam = np.zeros(n)
    lam[0] = 1.0

    for k in range(1, n):
        acc = 0.0
        for j in range(1, min(k, p) + 1):
            acc += phi[j - 1] * lam[k - j]
        if k <= q:
            acc -= theta[k - 1]
        lam[k] = acc

    return lam[1:]


@jit(nopython=True, cache=True)
def arma_simulate(phi: np.ndarray,
                  theta: np.ndarray,
                  mu: float,
                  innovations: np.ndarray) -> np.ndarray:
    """
    Run the ARMA recursion over a full innovation vector.

    x[0..r] = 0 and, for i > r,
    x[i] = mu (1 - sum(phi)) + e[i] + sum_k phi[k] x[i-k] + sum_k theta[k] e[i-k].
    """
    nn = innovations.shape[0]
    p = phi.shape[0]
    q = theta.shape[0]
    r = max(p, q)
    x = np.zeros(nn)
    drift = mu * (1.0 - np.sum(phi))

    for i in range(r + 1, nn):
        acc = drift + innovations[i]
        for k in range(p):
            acc += phi[k] * x[i - k - 1]
        for k in range(q):
            acc += theta[k] * innovations[i - k - 1]
        x[i] = acc

    return x
