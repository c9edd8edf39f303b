"""
RobARMA Models Module

The ARMA model container, its state-space form, autocovariance helpers and
process simulation.
"""

import logging

logger = logging.getLogger("robarma.models")

from .arma import ARMAModel
from .state_space import StateSpace, state_dimension
from .ts import autocov_matrix, robust_autocov_matrix, causal, bip_sigma
from .simulate import (
    stationary,
    invertible,
    simulate,
    generate_innovations_with_outliers,
)

__all__ = [
    'ARMAModel',
    'StateSpace',
    'state_dimension',
    'autocov_matrix',
    'robust_autocov_matrix',
    'causal',
    'bip_sigma',
    'stationary',
    'invertible',
    'simulate',
    'generate_innovations_with_outliers',
]
