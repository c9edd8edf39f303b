"""Innovation variance estimates from a fitted model."""

import numpy as np

from robarma.core.results import ARMAFit
from robarma.estimators.mle import MLECost


def sigma_mle(fit: ARMAFit) -> float:
    """
    Innovation variance implied by the Kalman filter at the fitted parameters.

    Returns:
        float: mean(v^2 / f) over the filtered innovations
    """
    f, v, _ = MLECost(fit.model).filter(fit.params)
    return float(np.mean(v * v / f))


def sigma_ols(fit: ARMAFit) -> float:
    """
    Innovation variance from the classical residuals at the fitted parameters.

    Returns:
        float: sum(e^2) / n
    """
    e = fit.model.residuals(fit.params)
    return float(np.dot(e, e) / fit.model.n)
