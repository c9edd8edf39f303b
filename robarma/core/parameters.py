'''
Parameter containers for ARMA(p,q) models.

``ARMAParameters`` holds the autoregressive coefficients, the moving average
coefficients and the location of the process. ``ParameterLayout`` describes how
the three blocks are packed into the single vector handed to the optimizer.
Packing all blocks into one vector with recorded offsets means that an empty
AR or MA block (p=0 or q=0) is just an empty slice and can never alias the
location parameter or the other block.
'''

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Union

import numpy as np

from robarma.core.exceptions import ParameterError


@dataclass(frozen=True)
class ParameterLayout:
    """Offsets of the phi, theta and mu blocks inside a packed vector.

    Attributes:
        p: Number of autoregressive coefficients
        q: Number of moving average coefficients
    """

    p: int
    q: int

    def __post_init__(self) -> None:
        if self.p < 0 or self.q < 0:
            raise ParameterError(
                f"Parameter block sizes must be non-negative, got p={self.p}, q={self.q}",
                param_name="p" if self.p < 0 else "q",
                param_value=self.p if self.p < 0 else self.q,
                constraint="Must be >= 0"
            )

    @property
    def size(self) -> int:
        return self.p + self.q + 1

    @property
    def phi(self) -> slice:
        return slice(0, self.p)

    @property
    def theta(self) -> slice:
        return slice(self.p, self.p + self.q)

    @property
    def mu(self) -> int:
        return self.p + self.q

    def pack(self, phi: np.ndarray, theta: np.ndarray, mu: float) -> np.ndarray:
        """Pack the three blocks into a fresh vector of length p+q+1."""
        x = np.empty(self.size, dtype=np.float64)
        x[self.phi] = phi
        x[self.theta] = theta
        x[self.mu] = mu
        return x

    def unpack(self, x: np.ndarray):
        """Split a packed vector into (phi, theta, mu) views."""
        if x.shape[0] != self.size:
            raise ParameterError(
                f"Packed vector has length {x.shape[0]}, expected {self.size}",
                param_name="x",
                param_value=x.shape[0],
                constraint=f"len(x) == p + q + 1 == {self.size}"
            )
        return x[self.phi], x[self.theta], float(x[self.mu])

    def names(self) -> List[str]:
        """Names of the packed coordinates, e.g. ['phi1', 'theta1', 'theta2', 'mu']."""
        return ([f"phi{i + 1}" for i in range(self.p)]
                + [f"theta{i + 1}" for i in range(self.q)]
                + ["mu"])


@dataclass
class ARMAParameters:
    """Parameters of an ARMA(p,q) model.

    Stationarity of phi and invertibility of theta are not enforced: the
    optimizer is free to traverse non-stationary regions during estimation.

    Attributes:
        phi: Autoregressive coefficients (length p)
        theta: Moving average coefficients (length q)
        mu: Location (process mean)
    """

    phi: np.ndarray
    theta: np.ndarray
    mu: float = 0.0

    def __post_init__(self) -> None:
        self.phi = np.atleast_1d(np.asarray(self.phi, dtype=np.float64)).copy()
        self.theta = np.atleast_1d(np.asarray(self.theta, dtype=np.float64)).copy()
        self.mu = float(self.mu)

        if self.phi.ndim != 1 or self.theta.ndim != 1:
            raise ParameterError(
                "phi and theta must be one-dimensional",
                param_name="phi" if self.phi.ndim != 1 else "theta",
                constraint="1-D array"
            )

    @property
    def p(self) -> int:
        return self.phi.shape[0]

    @property
    def q(self) -> int:
        return self.theta.shape[0]

    @property
    def layout(self) -> ParameterLayout:
        return ParameterLayout(self.p, self.q)

    def to_array(self) -> np.ndarray:
        """Pack as [phi, theta, mu]."""
        return self.layout.pack(self.phi, self.theta, self.mu)

    @classmethod
    def from_array(cls, array: Union[np.ndarray, Sequence[float]], p: int, q: int) -> 'ARMAParameters':
        """Create parameters from a packed [phi, theta, mu] vector.

        Args:
            array: Packed parameter vector of length p+q+1
            p: Number of autoregressive coefficients
            q: Number of moving average coefficients

        Returns:
            ARMAParameters: Parameter object owning copies of the blocks

        Raises:
            ParameterError: If the array length doesn't match p+q+1
        """
        phi, theta, mu = ParameterLayout(p, q).unpack(np.asarray(array, dtype=np.float64))
        return cls(phi=phi, theta=theta, mu=mu)

    def copy(self) -> 'ARMAParameters':
        return ARMAParameters(self.phi, self.theta, self.mu)

    def to_dict(self) -> Dict[str, Any]:
        return {"phi": self.phi.tolist(), "theta": self.theta.tolist(), "mu": self.mu}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ARMAParameters):
            return NotImplemented
        return (np.array_equal(self.phi, other.phi)
                and np.array_equal(self.theta, other.theta)
                and self.mu == other.mu)
