"""
Validation utilities for RobARMA inputs.

These helpers enforce the input-domain rules of the public entry points:
model orders must be non-negative integers with at least one of them
positive, the observed series must be a finite one-dimensional array, and it
must be long enough for both stages of the Hannan-Rissanen regression.
"""

import numbers
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from robarma.core.exceptions import DataError, ParameterError


def validate_order(value: object, name: str) -> int:
    """Validate a single ARMA order.

    Args:
        value: The order to validate
        name: Name of the order for error messages ("p" or "q")

    Returns:
        int: The validated order

    Raises:
        ParameterError: If the order is not a non-negative integer
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ParameterError(
            f"ARMA order {name} must be an integer, got {type(value).__name__}",
            param_name=name,
            param_value=value,
            constraint="Must be a non-negative integer"
        )
    if value < 0:
        raise ParameterError(
            f"ARMA order {name} must be non-negative, got {value}",
            param_name=name,
            param_value=value,
            constraint="Must be >= 0"
        )
    return int(value)


def validate_orders(p: object, q: object) -> Tuple[int, int]:
    """Validate the (p, q) pair.

    Raises:
        ParameterError: If either order is invalid or both are zero
    """
    p = validate_order(p, "p")
    q = validate_order(q, "q")
    if p + q < 1:
        raise ParameterError(
            "At least one of the ARMA orders p and q must be positive",
            param_name="p, q",
            param_value=(p, q),
            constraint="p + q >= 1"
        )
    return p, q


def minimum_length(p: int, q: int) -> int:
    """Shortest series for which an ARMA(p,q) model can be estimated.

    The Hannan-Rissanen long autoregression uses max(2p+1, 2q+1) lags and
    the second-stage regression drops another max(p+1, q+1) observations;
    both regressions must keep more rows than columns.
    """
    m = max(2 * p + 1, 2 * q + 1)
    rr = max(p + 1, q + 1)
    return max(p, q) + m + rr


def validate_series(
    data: Union[np.ndarray, pd.Series, Sequence[float]],
    min_length: int = 3,
    data_name: str = "y"
) -> np.ndarray:
    """Validate an observed series and return it as a float64 vector.

    Args:
        data: Observed series (array-like or Pandas Series)
        min_length: Minimum required length
        data_name: Name of the data for error messages

    Returns:
        np.ndarray: A contiguous float64 copy of the series

    Raises:
        DataError: If the data is not one-dimensional, too short or not finite
    """
    if data is None:
        raise DataError(f"{data_name} cannot be None", data_name=data_name, issue="missing data")

    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise DataError(
                f"{data_name} must be a single column, got {data.shape[1]} columns",
                data_name=data_name,
                issue="multivariate input"
            )
        data = data.iloc[:, 0]

    if isinstance(data, pd.Series):
        values = data.to_numpy(dtype=np.float64, na_value=np.nan)
    else:
        try:
            values = np.asarray(data, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise DataError(
                f"{data_name} must be numeric",
                data_name=data_name,
                issue=str(e)
            ) from e

    values = np.squeeze(values) if values.ndim > 1 else values
    if values.ndim != 1:
        raise DataError(
            f"{data_name} must be one-dimensional, got shape {np.shape(data)}",
            data_name=data_name,
            issue="wrong dimensionality"
        )

    if values.shape[0] < min_length:
        raise DataError(
            f"{data_name} is too short (length {values.shape[0]}), minimum required length is {min_length}",
            data_name=data_name,
            issue=f"insufficient length: {values.shape[0]} < {min_length}"
        )

    bad = np.flatnonzero(~np.isfinite(values))
    if bad.size:
        raise DataError(
            f"{data_name} contains {bad.size} non-finite value(s)",
            data_name=data_name,
            issue="contains NaN or infinite values",
            index=bad if bad.size > 1 else int(bad[0])
        )

    return np.ascontiguousarray(values, dtype=np.float64).copy()


def validate_coefficients(values: Optional[Sequence[float]], name: str) -> np.ndarray:
    """Coerce AR or MA coefficients to a finite float64 vector.

    Raises:
        ParameterError: If the coefficients are not a finite 1-D sequence
    """
    if values is None:
        return np.zeros(0, dtype=np.float64)
    coef = np.atleast_1d(np.asarray(values, dtype=np.float64))
    if coef.ndim != 1:
        raise ParameterError(
            f"{name} must be one-dimensional",
            param_name=name,
            param_value=coef.shape,
            constraint="1-D sequence"
        )
    if not np.all(np.isfinite(coef)):
        raise ParameterError(
            f"{name} must be finite",
            param_name=name,
            param_value=coef,
            constraint="finite values"
        )
    return coef
