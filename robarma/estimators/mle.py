"""
Gaussian maximum likelihood through the Kalman filter.

The filter is started from the stationary state covariance and predicts with
unit innovation variance; the innovation variance is concentrated out, which
gives the cost n log(sum w^2) + sum log f.
"""

import logging
from typing import Tuple

import numpy as np

from robarma.core.parameters import ARMAParameters
from robarma.core.results import EstimationMethod
from robarma.estimators.base import TRUST_REGION, ARMACost
from robarma.models.state_space import StateSpace

logger = logging.getLogger("robarma.estimators.mle")


class MLECost(ARMACost):
    """Concentrated Gaussian negative log-likelihood (up to constants)."""

    method = EstimationMethod.MLE
    minimizer = TRUST_REGION

    def filter(self, params: ARMAParameters) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Run the Kalman filter at ``params``.

        Returns:
            Tuple of (f, v, w): innovation variances, innovations and
            standardized innovations
        """
        ss = StateSpace.from_params(params)
        return ss.kalman_filter(self.model.y)

    def cost(self, phi, theta, mu):
        f, _, w = self.filter(ARMAParameters(phi, theta, mu))
        return self.model.n * np.log(np.dot(w, w)) + np.sum(np.log(f))
