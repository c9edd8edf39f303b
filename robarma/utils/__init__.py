"""
RobARMA Utilities Module

Numerical helpers shared by the estimators.
"""

import logging

logger = logging.getLogger("robarma.utils")

from .differentiation import gradient_2sided, default_step

__all__ = ['gradient_2sided', 'default_step']
