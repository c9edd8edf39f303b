"""S-estimator: minimize the M-scale of the classical residuals."""

from robarma.core.config import get_robust_config
from robarma.core.results import EstimationMethod
from robarma.estimators.base import LINE_SEARCH, ARMACost
from robarma.models import _numba_core as core
from robarma.robust import bip
from robarma.robust.base import scale


class SCost(ARMACost):
    """M-scale of classical residuals with Muler rho1 at b = 3.25 / 2."""

    method = EstimationMethod.S
    minimizer = LINE_SEARCH

    def __init__(self, model) -> None:
        super().__init__(model)
        self.settings = get_robust_config()

    def cost(self, phi, theta, mu):
        e = core.arma_residuals(self.model.y, phi, theta, mu, self.model.r)
        return scale(e, b=bip.S_CONSISTENCY, rho="bip",
                     tol=self.settings.scale_tol, max_iter=self.settings.scale_max_iter)
