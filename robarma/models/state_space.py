"""
State-space representation of an ARMA(p,q) process.

With state dimension r = max(p, q + 1) the process is written as

    x[t+1] = F x[t] + c + H e[t+1],    y[t] = z' x[t]

where F carries phi in its first column and an identity block on its
super-diagonal, H = [1, theta_1, ..., theta_q, 0, ...], z = e_1 and
c = [mu (1 - sum(phi)), 0, ...]. ``StateSpace`` builds these matrices and
drives the compiled Gaussian and robust Kalman filters.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy import linalg

from robarma.core.config import get_robust_config
from robarma.core.parameters import ARMAParameters
from robarma.models import _numba_core as core

logger = logging.getLogger("robarma.models.state_space")


def state_dimension(p: int, q: int) -> int:
    return max(p, q + 1)


@dataclass(frozen=True)
class StateSpace:
    """
    System matrices of the ARMA state-space form.

    Attributes:
        F: Transition matrix (r x r)
        H: Innovation loading vector (r)
        c: Drift vector (r)
        z: Observation vector (r), the first unit vector
    """

    F: np.ndarray
    H: np.ndarray
    c: np.ndarray
    z: np.ndarray

    @classmethod
    def from_params(cls, params: ARMAParameters) -> 'StateSpace':
        """Build the system matrices for the given parameters."""
        p, q = params.p, params.q
        r = state_dimension(p, q)

        F = np.zeros((r, r))
        F[:p, 0] = params.phi
        F[:r - 1, 1:] += np.eye(r - 1)

        H = np.zeros(r)
        H[0] = 1.0
        H[1:q + 1] = params.theta

        c = np.zeros(r)
        c[0] = params.mu * (1.0 - params.phi.sum())

        z = np.zeros(r)
        z[0] = 1.0
        return cls(F=F, H=H, c=c, z=z)

    @property
    def dim(self) -> int:
        return self.F.shape[0]

    def stationary_covariance(self) -> np.ndarray:
        """
        Stationary state covariance P0 for unit innovation variance.

        Solves (I - F kron F) vec(P0) = vec(H H') in the least-squares sense,
        which also returns a finite matrix when F has unit-root eigenvalues.
        """
        r = self.dim
        lhs = np.eye(r * r) - np.kron(self.F, self.F)
        rhs = np.outer(self.H, self.H).ravel()
        vec_p, _, _, _ = linalg.lstsq(lhs, rhs)
        return vec_p.reshape(r, r)

    def kalman_filter(self, y: np.ndarray, P0: np.ndarray = None,
                      sigma2: float = 1.0) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Run the Gaussian Kalman filter.

        Args:
            y: Observed series
            P0: Initial state covariance, the stationary covariance if None
            sigma2: Innovation variance of the prediction step

        Returns:
            Tuple of (f, v, w): innovation variances, innovations and
            standardized innovations
        """
        if P0 is None:
            P0 = self.stationary_covariance()
        eps = get_robust_config().kalman_eps
        return core.kalman_filter(y, self.F, self.H, self.c,
                                  np.ascontiguousarray(P0), float(sigma2), float(eps))

    def robust_filter(self, y: np.ndarray, P0: np.ndarray,
                      sigma: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Run the bounded-influence Kalman filter.

        Returns:
            Tuple of (u, s): prediction errors and their scales
        """
        eps = get_robust_config().kalman_eps
        return core.robust_kalman_filter(y, self.F, self.H, self.c,
                                         np.ascontiguousarray(P0), float(sigma), float(eps))
