"""
Filtered tau-estimator.

Prediction errors come from a bounded-influence Kalman filter started at the
robust autocovariance matrix of the series. The innovation scale used by the
filter is fixed when the cost is built, so the cost is a deterministic
function of the parameters.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from robarma.core.parameters import ARMAParameters
from robarma.core.results import EstimationMethod
from robarma.estimators.base import TRUST_REGION, ARMACost
from robarma.models.state_space import StateSpace, state_dimension
from robarma.models.ts import robust_autocov_matrix
from robarma.robust import tau
from robarma.robust.base import median

logger = logging.getLogger("robarma.estimators.ftau")


class FilteredTauCost(ARMACost):
    """
    n log tau^2(u / s_hat) + sum log s_hat^2, with s_hat = s / sigma.

    Args:
        model: The ARMA model
        sigma: Innovation scale of the robust filter. Defaults to the
            Bianco M-scale of the median-centered series
    """

    method = EstimationMethod.FTAU
    minimizer = TRUST_REGION

    def __init__(self, model, sigma: Optional[float] = None) -> None:
        super().__init__(model)
        if sigma is None:
            sigma = tau.s(model.y - median(model.y))
        self.sigma = float(sigma)
        dim = state_dimension(model.p, model.q)
        self.P0 = robust_autocov_matrix(model.y, dim, dim)
        logger.debug(f"Filtered tau cost with sigma={self.sigma:.6f}")

    def filter(self, params: ARMAParameters) -> Tuple[np.ndarray, np.ndarray]:
        """Prediction errors and their scales at ``params``."""
        ss = StateSpace.from_params(params)
        return ss.robust_filter(self.model.y, self.P0, self.sigma)

    def cost(self, phi, theta, mu):
        u, s = self.filter(ARMAParameters(phi, theta, mu))
        s_hat = s / self.sigma
        return self.model.n * np.log(tau.tau2(u / s_hat)) + np.sum(np.log(s_hat * s_hat))
