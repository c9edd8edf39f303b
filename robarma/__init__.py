# robarma/__init__.py
"""
RobARMA - Robust estimation of ARMA models

Estimators for ARMA(p,q) models ranging from classical (Hannan-Rissanen,
conditional least squares, Gaussian maximum likelihood) to robust (S, MM,
BIP-S, BIP-MM and the filtered tau-estimator) that stay well behaved under
additive and innovation outliers.

Example:
    >>> from robarma import ARMAModel, simulate, mm
    >>> y = simulate(theta=[0.2, -0.4], mu=2.0, n=2000, seed=1)
    >>> fit = mm(ARMAModel(y, p=0, q=2))
    >>> print(fit)  # doctest: +SKIP
"""

import logging
from typing import Union

from .version import __version__, __title__, __description__, __license__

from .core.config import (
    configure_logging,
    get_config,
    initialize_config,
    reset_config,
    set_config,
)

initialize_config()
configure_logging()

from .core.exceptions import (
    RobARMAError,
    ParameterError,
    DataError,
    SimulationError,
    EstimationError,
    ConfigurationError,
    ConvergenceWarning,
    NumericWarning,
)
from .core.parameters import ARMAParameters
from .core.results import ARMAFit, EstimationMethod, EstimationResult, compare_fits
from .models import (
    ARMAModel,
    simulate,
    stationary,
    invertible,
    generate_innovations_with_outliers,
)
from .estimators import (
    hannan_rissanen,
    ols,
    mle,
    ftau,
    s,
    mm,
    bip_s,
    bip_mm,
    estimate,
    sigma_mle,
    sigma_ols,
)

logger = logging.getLogger("robarma")


def get_version() -> str:
    """
    Return the version of RobARMA.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for RobARMA.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.debug(f"Log level set to {logging.getLevelName(level)}")


__all__ = [
    'ARMAModel',
    'ARMAParameters',
    'ARMAFit',
    'EstimationResult',
    'EstimationMethod',
    'compare_fits',
    'hannan_rissanen',
    'ols',
    'mle',
    'ftau',
    's',
    'mm',
    'bip_s',
    'bip_mm',
    'estimate',
    'simulate',
    'stationary',
    'invertible',
    'generate_innovations_with_outliers',
    'sigma_mle',
    'sigma_ols',
    'get_config',
    'set_config',
    'reset_config',
    'set_log_level',
    'get_version',
    'RobARMAError',
    'ParameterError',
    'DataError',
    'SimulationError',
    'EstimationError',
    'ConfigurationError',
    'ConvergenceWarning',
    'NumericWarning',
    '__version__',
]
