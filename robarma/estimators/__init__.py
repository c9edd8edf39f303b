"""
RobARMA Estimators Module

Public entry points of the ARMA estimators. Every function takes an
``ARMAModel`` and returns an ``ARMAFit``:

- ``hannan_rissanen``: closed-form two-stage least squares
- ``ols``, ``mle``, ``ftau``: classical and filtered-tau estimators started at
  Hannan-Rissanen
- ``s``, ``bip_s``: S and BIP-S estimators started at Hannan-Rissanen
- ``mm``: MM estimator started at the S fit, using its scale
- ``bip_mm``: MM and BIP-MM fits at the smaller of the S and BIP-S scales,
  returning the one with the smaller final cost

Non-convergence is never raised; it is reported on ``fit.convergence``.
"""

import logging
from typing import Callable, Dict, Optional, Union

from robarma.core.config import SolverConfig
from robarma.core.results import ARMAFit, EstimationMethod
from robarma.models.arma import ARMAModel

from .base import ARMACost
from .hr import hannan_rissanen, hannan_rissanen_params
from .ols import OLSCost
from .mle import MLECost
from .ftau import FilteredTauCost
from .s import SCost
from .mm import MMCost
from .bip_s import BIPSCost
from .bmm import BMMCost
from .solver import solve
from .sigma import sigma_mle, sigma_ols

logger = logging.getLogger("robarma.estimators")


def _fit(model: ARMAModel, initial: ARMAFit, cost: ARMACost,
         config: Optional[SolverConfig] = None) -> ARMAFit:
    return solve(model, initial, cost.method, cost, config=config, minimizer=cost.minimizer)


def _from_hr(model: ARMAModel, cost: ARMACost, config: Optional[SolverConfig]) -> ARMAFit:
    logger.info(f"Starting {cost.method} estimation of ARMA({model.p},{model.q}) on {model.n} observations")
    initial = hannan_rissanen(model)
    fit = _fit(model, initial, cost, config)
    logger.info(f"Finished {cost.method} estimation: convergence={fit.convergence}, "
                f"final cost={fit.final_cost:.6g}")
    return fit


def ols(model: ARMAModel, config: Optional[SolverConfig] = None) -> ARMAFit:
    """Conditional least squares started at Hannan-Rissanen."""
    return _from_hr(model, OLSCost(model), config)


def mle(model: ARMAModel, config: Optional[SolverConfig] = None) -> ARMAFit:
    """Gaussian maximum likelihood started at Hannan-Rissanen."""
    return _from_hr(model, MLECost(model), config)


def ftau(model: ARMAModel, sigma: Optional[float] = None,
         config: Optional[SolverConfig] = None) -> ARMAFit:
    """
    Filtered tau-estimator started at Hannan-Rissanen.

    Args:
        model: The ARMA model
        sigma: Innovation scale of the robust filter, defaults to the Bianco
            M-scale of the median-centered series
        config: Solver settings, defaults to the global configuration

    Returns:
        ARMAFit: The filtered-tau fit
    """
    return _from_hr(model, FilteredTauCost(model, sigma=sigma), config)


def s(model: ARMAModel, config: Optional[SolverConfig] = None) -> ARMAFit:
    """S-estimator started at Hannan-Rissanen."""
    return _from_hr(model, SCost(model), config)


def bip_s(model: ARMAModel, config: Optional[SolverConfig] = None) -> ARMAFit:
    """BIP S-estimator started at Hannan-Rissanen."""
    return _from_hr(model, BIPSCost(model), config)


def mm(model: ARMAModel, config: Optional[SolverConfig] = None) -> ARMAFit:
    """
    MM-estimator.

    Runs the S-estimator, then minimizes the MM loss from the S parameters
    at the S scale (the final cost of the S fit).

    Args:
        model: The ARMA model
        config: Solver settings, defaults to the global configuration

    Returns:
        ARMAFit: The MM fit, with the S fit as its initial stage
    """
    s_fit = s(model, config)
    sigma = s_fit.final_cost
    logger.debug(f"MM stage at sigma={sigma:.6g}")
    fit = _fit(model, s_fit, MMCost(model, sigma), config)
    logger.info(f"Finished MM estimation: convergence={fit.convergence}, final cost={fit.final_cost:.6g}")
    return fit


def bip_mm(model: ARMAModel, config: Optional[SolverConfig] = None) -> ARMAFit:
    """
    BIP-MM estimator.

    Runs the S and BIP-S estimators and takes the smaller of their scales.
    At that scale, an MM fit starts from the S parameters and a BIP-MM fit
    from the BIP-S parameters. The fit with the strictly smaller final cost
    is returned; ties go to BIP-MM.

    Args:
        model: The ARMA model
        config: Solver settings, defaults to the global configuration

    Returns:
        ARMAFit: The selected MM or BIP-MM fit
    """
    s_fit = s(model, config)
    bs_fit = bip_s(model, config)
    sigma = min(s_fit.final_cost, bs_fit.final_cost)
    logger.debug(f"S scale {s_fit.final_cost:.6g}, BIP-S scale {bs_fit.final_cost:.6g}, using {sigma:.6g}")

    mm_fit = _fit(model, s_fit, MMCost(model, sigma), config)
    bmm_fit = _fit(model, bs_fit, BMMCost(model, sigma), config)

    selected = mm_fit if mm_fit.final_cost < bmm_fit.final_cost else bmm_fit
    logger.info(f"BIP-MM selected {selected.method}: MM cost {mm_fit.final_cost:.6g}, "
                f"BIP-MM cost {bmm_fit.final_cost:.6g}")
    return selected


_ESTIMATORS: Dict[EstimationMethod, Callable[..., ARMAFit]] = {
    EstimationMethod.HANNAN_RISSANEN: lambda model, config=None: hannan_rissanen(model),
    EstimationMethod.OLS: ols,
    EstimationMethod.MLE: mle,
    EstimationMethod.FTAU: lambda model, config=None: ftau(model, config=config),
    EstimationMethod.S: s,
    EstimationMethod.BS: bip_s,
    EstimationMethod.MM: mm,
    EstimationMethod.BMM: bip_mm,
}


def estimate(model: ARMAModel,
             method: Union[str, EstimationMethod],
             config: Optional[SolverConfig] = None) -> ARMAFit:
    """
    Estimate a model with the named method.

    Args:
        model: The ARMA model
        method: An ``EstimationMethod``, its name or printed value, or one of
            the aliases ``"hr"``, ``"bip_s"`` and ``"bip_mm"``
        config: Solver settings, defaults to the global configuration

    Returns:
        ARMAFit: The fit

    Raises:
        EstimationError: If the method is not known
    """
    resolved = EstimationMethod.parse(method)
    return _ESTIMATORS[resolved](model, config=config)


__all__ = [
    'hannan_rissanen',
    'hannan_rissanen_params',
    'ols',
    'mle',
    'ftau',
    's',
    'mm',
    'bip_s',
    'bip_mm',
    'estimate',
    'solve',
    'sigma_mle',
    'sigma_ols',
    'ARMACost',
    'OLSCost',
    'MLECost',
    'FilteredTauCost',
    'SCost',
    'MMCost',
    'BIPSCost',
    'BMMCost',
]
