"""
Hannan-Rissanen two-stage least squares.

Stage 1 fits a long autoregression of order m = max(2p+1, 2q+1) to the
mean-centered series and keeps its residuals as proxies for the innovations.
Stage 2 regresses the centered series on p of its own lags and q lags of the
stage-1 residuals. Both regressions are solved through a Householder QR
decomposition.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np
from scipy import linalg
from statsmodels.tsa.tsatools import lagmat

from robarma.core.parameters import ARMAParameters
from robarma.core.results import ARMAFit, EstimationMethod, EstimationResult

if TYPE_CHECKING:
    from robarma.models.arma import ARMAModel

logger = logging.getLogger("robarma.estimators.hr")


def _qr_solve(X: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Least-squares coefficients of y on X.

    Rank-deficient designs (fewer rows than regressors, a negligible column
    or a vanishing pivot of R) get the minimum-norm solution, with
    negligible columns receiving a zero coefficient.
    """
    norms = np.linalg.norm(X, axis=0)
    tol = np.sqrt(np.finfo(np.float64).eps) * max(norms.max(initial=0.0), np.linalg.norm(y))
    negligible = norms <= tol
    if X.shape[0] >= X.shape[1] and not negligible.any():
        Q, R = linalg.qr(X, mode="economic")
        if np.abs(np.diag(R)).min(initial=np.inf) > tol:
            return linalg.solve_triangular(R, Q.T @ y)
    logger.debug(f"Rank-deficient {X.shape[0]}x{X.shape[1]} design, using minimum-norm solution")
    beta, _, _, _ = linalg.lstsq(np.where(negligible, 0.0, X), y)
    return beta


def hannan_rissanen_params(y: np.ndarray, p: int, q: int) -> ARMAParameters:
    """
    Hannan-Rissanen estimates for a raw series.

    Args:
        y: Observed series
        p: Autoregressive order
        q: Moving average order

    Returns:
        ARMAParameters: phi, theta and mu = mean(y)
    """
    mu = float(np.mean(y))
    yc = np.asarray(y, dtype=np.float64) - mu

    m = max(2 * p + 1, 2 * q + 1)
    lags, yy = lagmat(yc, m, trim="both", original="sep")
    yy = yy.ravel()
    ar = _qr_solve(lags, yy)
    ee = yy - lags @ ar

    rr = max(p + 1, q + 1)
    y_lags = lagmat(yy, rr, trim="both")[:, :p]
    e_lags = lagmat(ee, rr, trim="both")[:, :q]
    design = np.hstack([y_lags, e_lags])
    beta = _qr_solve(design, yy[rr:])

    return ARMAParameters(phi=beta[:p], theta=beta[p:p + q], mu=mu)


def hannan_rissanen(model: 'ARMAModel') -> ARMAFit:
    """
    Closed-form Hannan-Rissanen fit.

    Always reports convergence with a final cost of 0.

    Args:
        model: The ARMA model

    Returns:
        ARMAFit: Fit without initial values
    """
    params = hannan_rissanen_params(model.y, model.p, model.q)
    result = EstimationResult(
        method=EstimationMethod.HANNAN_RISSANEN,
        convergence=True,
        final_cost=0.0
    )
    logger.debug(f"Hannan-Rissanen estimates: {params.to_dict()}")
    return ARMAFit(model=model, params=params, result=result)
