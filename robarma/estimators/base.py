"""
Base class of the ARMA cost functionals.

Every estimator minimizes a scalar functional of the packed parameter vector
[phi, theta, mu]. Subclasses implement ``cost(phi, theta, mu)``; the base
class provides the packed-vector call used by the optimizer and
``evaluate`` for ``ARMAParameters``.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from robarma.core.parameters import ARMAParameters
from robarma.core.results import EstimationMethod

if TYPE_CHECKING:
    from robarma.models.arma import ARMAModel

logger = logging.getLogger("robarma.estimators.base")

LINE_SEARCH = "line_search"
TRUST_REGION = "trust_region"


class ARMACost:
    """
    Scalar cost functional of an ARMA model.

    Attributes:
        model: The model whose series the cost is evaluated on
        method: Estimation method the cost belongs to
        minimizer: ``"line_search"`` or ``"trust_region"``
    """

    method: EstimationMethod = None
    minimizer: str = TRUST_REGION

    def __init__(self, model: 'ARMAModel') -> None:
        self.model = model

    def cost(self, phi: np.ndarray, theta: np.ndarray, mu: float) -> float:
        raise NotImplementedError("Subclasses must implement cost")

    def evaluate(self, params: ARMAParameters) -> float:
        """Cost at the given parameters; may be non-finite."""
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return float(self.cost(params.phi, params.theta, params.mu))

    def __call__(self, x: np.ndarray) -> float:
        phi, theta, mu = self.model.layout.unpack(np.asarray(x, dtype=np.float64))
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return float(self.cost(phi, theta, mu))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model!r})"
