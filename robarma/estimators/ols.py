"""Conditional least squares."""

import numpy as np

from robarma.core.results import EstimationMethod
from robarma.estimators.base import LINE_SEARCH, ARMACost
from robarma.models import _numba_core as core


class OLSCost(ARMACost):
    """Sum of squared classical residuals."""

    method = EstimationMethod.OLS
    minimizer = LINE_SEARCH

    def cost(self, phi, theta, mu):
        e = core.arma_residuals(self.model.y, phi, theta, mu, self.model.r)
        return np.dot(e, e)
