"""
BIP S-estimator.

Like the S-estimator but on bounded-innovation-propagation residuals. The
scale inside the BIP recursion is the robust scale of the series shrunk by
the causal coefficients of the candidate parameters.
"""

from robarma.core.config import get_robust_config
from robarma.core.results import EstimationMethod
from robarma.estimators.base import LINE_SEARCH, ARMACost
from robarma.models import _numba_core as core
from robarma.models.ts import bip_sigma
from robarma.robust import bip
from robarma.robust.base import scale


class BIPSCost(ARMACost):
    """M-scale of BIP residuals at sigma_BIP(phi, theta), Muler rho1, b = 3.25 / 2."""

    method = EstimationMethod.BS
    minimizer = LINE_SEARCH

    def __init__(self, model) -> None:
        super().__init__(model)
        self.settings = get_robust_config()

    def cost(self, phi, theta, mu):
        sigma = bip_sigma(self.model.sigma, phi, theta,
                          kappa=self.settings.kappa, n=self.settings.causal_terms)
        e = core.bip_arma_residuals(self.model.y, phi, theta, mu, sigma, self.model.r)
        return scale(e, b=bip.S_CONSISTENCY, rho="bip",
                     tol=self.settings.scale_tol, max_iter=self.settings.scale_max_iter)
