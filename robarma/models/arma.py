"""
ARMA(p,q) model container.

``ARMAModel`` binds an observed series to the model orders and precomputes
the robust location and scale that several estimators start from. It is
immutable: the series is stored as a read-only array and every cost
functional reads it without copying.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from robarma.core.exceptions import warn_numeric
from robarma.core.parameters import ARMAParameters, ParameterLayout
from robarma.core.validation import minimum_length, validate_orders, validate_series
from robarma.models import _numba_core as core
from robarma.robust.base import median, scale

logger = logging.getLogger("robarma.models.arma")


class ARMAModel:
    """
    An observed series together with ARMA orders.

    Args:
        y: Observed series, any one-dimensional array-like or Pandas Series
        p: Autoregressive order
        q: Moving average order

    Attributes:
        y: Read-only float64 copy of the series
        p: Autoregressive order
        q: Moving average order
        n: Length of the series
        r: max(p, q), the number of residuals fixed at zero
        mu: Median of the series
        sigma: Bisquare M-scale (b = 0.5) of the median-centered series
        index: Index of the input when it was a Pandas Series, else None

    Raises:
        ParameterError: If the orders are invalid
        DataError: If the series is not finite, not one-dimensional or too
            short for the Hannan-Rissanen regressions

    Examples:
        >>> from robarma import ARMAModel, simulate
        >>> model = ARMAModel(simulate(phi=[0.5], n=200), p=1, q=0)
        >>> model.num_params
        2
    """

    def __init__(self,
                 y: Union[np.ndarray, pd.Series, Sequence[float]],
                 p: int,
                 q: int) -> None:
        self.p, self.q = validate_orders(p, q)
        self.index: Optional[pd.Index] = y.index if isinstance(y, pd.Series) else None

        values = validate_series(y, min_length=minimum_length(self.p, self.q))
        values.setflags(write=False)
        self.y = values

        self.n = values.shape[0]
        self.r = max(self.p, self.q)
        self.layout = ParameterLayout(self.p, self.q)
        self.mu = median(values)
        self.sigma = scale(values - self.mu)

        if self.sigma == 0.0:
            logger.warning(
                f"Degenerate scale: more than half of the series equals its median ({self.mu})"
            )
            warn_numeric(
                "Robust scale of the series is zero",
                operation="ARMAModel",
                issue="degenerate scale",
                value=self.sigma
            )

        logger.debug(f"ARMA({self.p},{self.q}) model on {self.n} observations, "
                     f"mu={self.mu:.4f}, sigma={self.sigma:.4f}")

    @property
    def num_params(self) -> int:
        return self.layout.size

    def unpack(self, x: np.ndarray) -> ARMAParameters:
        """Packed [phi, theta, mu] vector to ARMAParameters."""
        return ARMAParameters.from_array(x, self.p, self.q)

    def residuals(self, params: ARMAParameters) -> np.ndarray:
        """Classical residuals of the series under ``params``."""
        return core.arma_residuals(self.y, params.phi, params.theta, params.mu, self.r)

    def bip_residuals(self, params: ARMAParameters, sigma: float) -> np.ndarray:
        """Bounded-innovation-propagation residuals at scale ``sigma``."""
        return core.bip_arma_residuals(self.y, params.phi, params.theta,
                                       params.mu, float(sigma), self.r)

    def __repr__(self) -> str:
        return f"ARMAModel(p={self.p}, q={self.q}, n={self.n})"
