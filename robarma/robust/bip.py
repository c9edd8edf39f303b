"""
Rho and eta functions of the MM-, S- and BIP-estimators of Muler et al.

``rho2`` is a bounded, twice continuously differentiable Tukey-like loss:
quadratic on [-2, 2], a degree-8 polynomial on 2 < |x| <= 3 and constant
3.25 beyond. ``rho1`` is ``rho2`` rescaled by 0.405 and is used for the
M-scale of the S-estimators. ``eta`` is the bounded, odd, redescending
function that gates past residuals in the bounded-innovation-propagation
(BIP) residual recurrence.
"""


from robarma.robust import _numba_core as core
from robarma.robust.base import apply_elementwise

# Maximum of rho1 and rho2; S-estimators use half of it as consistency target.
RHO_MAX = core.BIP_RHO_MAX
S_CONSISTENCY = RHO_MAX / 2


def rho2(x):
    """Muler rho2 for a scalar or an array."""
    return apply_elementwise(
        core.bip_rho2_scalar,
        lambda v: core.rho_array(v, core.RHO_BIP2, 0.0),
        x
    )


def rho1(x):
    """Muler rho1(x) = rho2(x / 0.405)."""
    return apply_elementwise(
        core.bip_rho1_scalar,
        lambda v: core.rho_array(v, core.RHO_BIP1, 0.0),
        x
    )


def eta(x):
    """BIP gating function; vanishes for |x| > 3."""
    return apply_elementwise(core.bip_eta_scalar, core.bip_eta_array, x)
