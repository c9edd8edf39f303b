"""MM-estimator: bounded rho2 loss of classical residuals at a fixed scale."""

import numpy as np

from robarma.core.results import EstimationMethod
from robarma.estimators.base import TRUST_REGION, ARMACost
from robarma.models import _numba_core as core
from robarma.robust import _numba_core as rcore


class MMCost(ARMACost):
    """
    (1 / (n - p)) sum rho2(e / sigma).

    Args:
        model: The ARMA model
        sigma: Residual scale, usually the final cost of an S fit
    """

    method = EstimationMethod.MM
    minimizer = TRUST_REGION

    def __init__(self, model, sigma: float) -> None:
        super().__init__(model)
        self.sigma = float(sigma)

    def cost(self, phi, theta, mu):
        if not self.sigma > 0.0:
            return np.inf
        e = core.arma_residuals(self.model.y, phi, theta, mu, self.model.r)
        total = rcore.rho_sum(e, rcore.RHO_BIP2, 0.0, self.sigma)
        return total / (self.model.n - self.model.p)
