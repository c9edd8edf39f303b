"""
RobARMA Core Module

Parameter containers, result objects, configuration, validation helpers and
the exception hierarchy shared by every estimator.
"""

import logging

logger = logging.getLogger("robarma.core")

from .exceptions import (
    RobARMAError,
    ParameterError,
    DataError,
    SimulationError,
    EstimationError,
    ConfigurationError,
    RobARMAWarning,
    ConvergenceWarning,
    NumericWarning,
    warn_convergence,
    warn_numeric,
)

from .parameters import ARMAParameters, ParameterLayout

from .results import ARMAFit, EstimationMethod, EstimationResult, compare_fits

from .validation import (
    validate_order,
    validate_orders,
    validate_series,
    validate_coefficients,
    minimum_length,
)

from .config import (
    get_config,
    set_config,
    reset_config,
    get_solver_config,
    get_robust_config,
    configure_logging,
    ConfigManager,
    SolverConfig,
    RobustConfig,
    LoggingConfig,
)

__all__ = [
    'RobARMAError',
    'ParameterError',
    'DataError',
    'SimulationError',
    'EstimationError',
    'ConfigurationError',
    'RobARMAWarning',
    'ConvergenceWarning',
    'NumericWarning',
    'warn_convergence',
    'warn_numeric',
    'ARMAParameters',
    'ParameterLayout',
    'ARMAFit',
    'EstimationMethod',
    'EstimationResult',
    'compare_fits',
    'validate_order',
    'validate_orders',
    'validate_series',
    'validate_coefficients',
    'minimum_length',
    'get_config',
    'set_config',
    'reset_config',
    'get_solver_config',
    'get_robust_config',
    'configure_logging',
    'ConfigManager',
    'SolverConfig',
    'RobustConfig',
    'LoggingConfig',
]
