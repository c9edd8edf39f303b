"""
Robust statistics primitives for ARMA estimation.

- ``base``: median, MAD, MADN, Huber psi, bisquare and the M-scale
- ``bip``: Muler rho1, rho2 and eta (S, MM, BIP-S, BIP-MM)
- ``tau``: Bianco rho1, rho2, psi, w, s and tau2 (filtered tau)
"""

import logging

logger = logging.getLogger("robarma.robust")

from .base import median, mad, madn, huber, bisquare, scale
from . import bip
from . import tau

__all__ = [
    'median',
    'mad',
    'madn',
    'huber',
    'bisquare',
    'scale',
    'bip',
    'tau',
]
