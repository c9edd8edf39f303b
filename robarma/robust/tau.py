"""
Rho, psi and weight functions of the filtered tau-estimator (Bianco et al.).

``rho1`` (c = 1.55) defines the M-scale ``s``; ``rho2`` (c = 2.8) enters the
tau-scale ``tau2(u) = s(u)^2 * sum(rho2(u / s(u)))``. ``psi`` is a Huber-type
clip at 1.55 and ``w(x) = psi(x) / x`` (with ``w(0) = 0``) is the weight used
in the robust Kalman covariance update.
"""

import logging


from robarma.core.config import get_robust_config
from robarma.robust import _numba_core as core
from robarma.robust.base import _as_vector, apply_elementwise

logger = logging.getLogger("robarma.robust.tau")

C1 = core.TAU_C1
C2 = core.TAU_C2


def rho1(x):
    return apply_elementwise(
        core.tau_rho1_scalar,
        lambda v: core.rho_array(v, core.RHO_TAU1, 0.0),
        x
    )


def rho2(x):
    return apply_elementwise(
        core.tau_rho2_scalar,
        lambda v: core.rho_array(v, core.RHO_TAU2, 0.0),
        x
    )


def psi(x):
    """Bounded odd score, identity on [-1.55, 1.55]."""
    return apply_elementwise(core.tau_psi_scalar, core.tau_psi_array, x)


def w(x):
    """Weight psi(x) / x with w(0) = 0."""
    return apply_elementwise(core.tau_w_scalar, core.tau_w_array, x)


def s(u, tol: float = None, max_iter: int = None) -> float:
    """
    M-scale of residuals ``u`` with the Bianco rho1 at consistency 0.5.

    Args:
        u: Residual vector (assumed centered)
        tol: Fixed-point tolerance, defaults to the configured scale tolerance
        max_iter: Iteration cap, defaults to the configured cap

    Returns:
        float: The scale estimate
    """
    settings = get_robust_config()
    tol = settings.scale_tol if tol is None else tol
    max_iter = settings.scale_max_iter if max_iter is None else max_iter
    return float(core.mscale(_as_vector(u), 0.5, core.RHO_TAU1, 0.0, float(tol), int(max_iter)))


def tau2(u, tol: float = None, max_iter: int = None) -> float:
    """
    Squared tau-scale ``s(u)^2 * sum(rho2(u / s(u)))``.

    Returns 0 when the M-scale degenerates to 0.
    """
    v = _as_vector(u)
    sn = s(v, tol, max_iter)
    if sn == 0.0:
        return 0.0
    return float(sn * sn * core.rho_sum(v, core.RHO_TAU2, 0.0, sn))
