'''
Custom exception and warning classes for RobARMA.

This module defines the exception hierarchy used throughout the package. Each
exception carries a primary message, optional details and a context dictionary
describing the offending parameter or value, so that failures raised from the
public entry points identify exactly what was wrong with the input.

Numerical trouble inside the estimators never surfaces as an exception: the
robust primitives never raise and optimizer non-convergence is reported on the
returned fit. The warning classes at the end of the module are the channel for
those soft failures.
'''

from typing import Any, Dict, Optional, Sequence, Union
import inspect
from pathlib import Path

import numpy as np


class RobARMAError(Exception):
    """Base exception class for all RobARMA errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the RobARMAError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        # Add caller information for better debugging
        frame = inspect.currentframe()
        if frame:
            try:
                frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame  # Avoid reference cycles

        super().__init__(full_message)


class ParameterError(RobARMAError):
    """Exception raised for invalid model orders or parameter values.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class DataError(RobARMAError):
    """Exception raised for an observed series that cannot be estimated on.

    This covers non-finite entries, wrong dimensionality and series that are
    too short for the requested ARMA order.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: The index or location where the issue was detected
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Sequence[int], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            if isinstance(index, np.ndarray) and index.size > 10:
                context_dict["Index"] = f"{index.size} positions, first at {index[0]}"
            else:
                context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class SimulationError(RobARMAError):
    """Exception raised when an ARMA process cannot be simulated.

    Raised for non-stationary AR coefficients, non-invertible MA coefficients
    and innovation vectors of the wrong length.

    Attributes:
        param_name: The offending parameter ("phi", "theta", "innovations")
        param_value: The offending value
        n_periods: The number of periods requested
        issue: Description of the issue that occurred during simulation
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 n_periods: Optional[int] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.n_periods = n_periods
        self.issue = issue

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if n_periods is not None:
            context_dict["Periods"] = n_periods
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class EstimationError(RobARMAError):
    """Exception raised when an estimation request cannot be carried out.

    Attributes:
        model_type: The estimator that was requested
        issue: Description of the issue
    """

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.issue = issue

        context_dict = context or {}
        if model_type:
            context_dict["Estimator"] = model_type
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class ConfigurationError(RobARMAError):
    """Exception raised for errors in configuration.

    Attributes:
        config_file: The configuration file path
        setting: The setting that caused the error
        value: The invalid setting value
        issue: Description of the issue with the configuration
    """

    def __init__(self,
                 message: str,
                 config_file: Optional[Union[str, Path]] = None,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.config_file = config_file
        self.setting = setting
        self.value = value
        self.issue = issue

        context_dict = context or {}
        if config_file:
            context_dict["Config File"] = str(config_file)
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class RobARMAWarning(Warning):
    """Base warning class for all RobARMA warnings.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


class ConvergenceWarning(RobARMAWarning):
    """Warning for an optimizer run that stopped without converging.

    Attributes:
        method: The estimation method that did not converge
        iterations: The number of iterations performed
        final_value: The cost at the returned parameters
    """

    def __init__(self,
                 message: str,
                 method: Optional[str] = None,
                 iterations: Optional[int] = None,
                 final_value: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.method = method
        self.iterations = iterations
        self.final_value = final_value

        context_dict = context or {}
        if method:
            context_dict["Method"] = method
        if iterations is not None:
            context_dict["Iterations"] = iterations
        if final_value is not None:
            context_dict["Final Value"] = final_value

        super().__init__(message, details, context_dict)


class NumericWarning(RobARMAWarning):
    """Warning for numerical issues that do not prevent computation.

    Attributes:
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


def warn_convergence(message: str,
                     method: Optional[str] = None,
                     iterations: Optional[int] = None,
                     final_value: Optional[float] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a ConvergenceWarning with consistent formatting.

    Args:
        message: The primary warning message
        method: The estimation method that did not converge
        iterations: The number of iterations performed
        final_value: The cost at the returned parameters
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """
    import warnings
    warnings.warn(
        ConvergenceWarning(message, method, iterations, final_value, details, context),
        stacklevel=2
    )


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting.

    Args:
        message: The primary warning message
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """
    import warnings
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context),
        stacklevel=2
    )
