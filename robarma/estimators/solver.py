"""
Optimizer wrapper shared by every iterative estimator.

``solve`` packs the starting parameters into one vector laid out as
[phi, theta, mu], minimizes the cost with ``scipy.optimize.minimize`` using a
two-sided finite-difference gradient and re-evaluates the cost at the
returned point. A fit is converged only if the optimizer status says so and
that cost is finite.

Two minimizer families are used. Line search (L-BFGS-B by default) serves the
S-type costs, whose flat stretches stall a trust region at its starting
point. Trust region (trust-constr with a BFGS Hessian approximation) serves
the smooth likelihood and MM-type costs.
"""

import logging
from typing import TYPE_CHECKING, Optional, Union

import numpy as np
from scipy import optimize

from robarma.core.config import SolverConfig, get_solver_config
from robarma.core.exceptions import ParameterError, warn_convergence
from robarma.core.parameters import ARMAParameters
from robarma.core.results import ARMAFit, EstimationMethod, EstimationResult
from robarma.estimators.base import LINE_SEARCH, TRUST_REGION, ARMACost
from robarma.utils.differentiation import gradient_2sided

if TYPE_CHECKING:
    from robarma.models.arma import ARMAModel

logger = logging.getLogger("robarma.estimators.solver")

# scipy status codes that mean a tolerance was met
_TRUST_REGION_CONVERGED = (1, 2)
_LINE_SEARCH_CONVERGED = (0,)


def _format_report(method: EstimationMethod,
                   scipy_method: str,
                   result: optimize.OptimizeResult,
                   initial_cost: float,
                   final_cost: float) -> str:
    lines = [
        f"{'estimator':<22}{method}",
        f"{'optimizer':<22}{scipy_method}",
        f"{'status':<22}{result.status}",
        f"{'message':<22}{result.message}",
        f"{'iterations':<22}{getattr(result, 'nit', 0)}",
        f"{'function evaluations':<22}{getattr(result, 'nfev', 0)}",
        f"{'initial cost':<22}{initial_cost:.6g}",
        f"{'final cost':<22}{final_cost:.6g}",
    ]
    return "\n".join(lines)


def _penalized(cost: ARMACost, penalty: float):
    def objective(x: np.ndarray) -> float:
        value = cost(x)
        if not np.isfinite(value):
            return penalty
        return value
    return objective


def _minimize(objective, x0: np.ndarray, minimizer: str, config: SolverConfig):
    def jac(x: np.ndarray) -> np.ndarray:
        return gradient_2sided(objective, x, epsilon=config.finite_difference_step)

    if minimizer == LINE_SEARCH:
        scipy_method = config.line_search_method
        options = {"maxiter": config.max_iter, "gtol": config.gtol}
        if scipy_method == "L-BFGS-B":
            options["ftol"] = config.ftol
        result = optimize.minimize(objective, x0, method=scipy_method, jac=jac, options=options)
        converged = result.status in _LINE_SEARCH_CONVERGED and bool(result.success)
    elif minimizer == TRUST_REGION:
        scipy_method = config.trust_region_method
        options = {
            "maxiter": config.max_iter,
            "gtol": config.gtol,
            "xtol": config.xtol,
            "verbose": 2 if config.log_optimizer else 0,
        }
        result = optimize.minimize(objective, x0, method=scipy_method, jac=jac,
                                   hess=optimize.BFGS(), options=options)
        converged = result.status in _TRUST_REGION_CONVERGED
    else:
        raise ParameterError(
            f"Unknown minimizer: {minimizer}",
            param_name="minimizer",
            param_value=minimizer,
            constraint=f"One of {(LINE_SEARCH, TRUST_REGION)}"
        )
    return scipy_method, result, converged


def solve(model: 'ARMAModel',
          initial: Union[ARMAFit, ARMAParameters],
          method: EstimationMethod,
          cost: ARMACost,
          config: Optional[SolverConfig] = None,
          minimizer: str = TRUST_REGION) -> ARMAFit:
    """
    Minimize a cost functional starting from an initial fit.

    Args:
        model: The ARMA model
        initial: Fit (or bare parameters) to start from
        method: Estimation method recorded on the result
        cost: Cost functional of the packed parameter vector
        config: Solver settings, defaults to the global solver configuration
        minimizer: ``"line_search"`` or ``"trust_region"``

    Returns:
        ARMAFit: Final parameters and result, with the initial parameters and
        result attached

    Raises:
        ParameterError: If the minimizer is unknown or the initial parameters
            do not match the model orders

    Examples:
        >>> from robarma import ARMAModel, simulate
        >>> from robarma.estimators import hannan_rissanen
        >>> from robarma.estimators.ols import OLSCost
        >>> from robarma.core.results import EstimationMethod
        >>> model = ARMAModel(simulate(phi=[0.5], n=500), p=1, q=0)
        >>> fit = solve(model, hannan_rissanen(model), EstimationMethod.OLS,
        ...             OLSCost(model), minimizer="line_search")
        >>> fit.convergence
        True
    """
    config = config or get_solver_config()

    if isinstance(initial, ARMAFit):
        initial_params, initial_result = initial.params, initial.result
    else:
        initial_params, initial_result = initial, None

    if (initial_params.p, initial_params.q) != (model.p, model.q):
        raise ParameterError(
            f"Initial parameters are ARMA({initial_params.p},{initial_params.q}), "
            f"model is ARMA({model.p},{model.q})",
            param_name="initial",
            param_value=(initial_params.p, initial_params.q),
            constraint=f"(p, q) == ({model.p}, {model.q})"
        )

    x0 = model.layout.pack(initial_params.phi, initial_params.theta, initial_params.mu)
    objective = _penalized(cost, config.penalty)
    initial_cost = cost(x0)

    logger.debug(f"{method}: minimizing with {minimizer} from cost {initial_cost:.6g}")
    scipy_method, result, converged = _minimize(objective, x0, minimizer, config)

    params = model.unpack(result.x)
    final_cost = cost(result.x)
    # a penalty plateau can satisfy the gradient tolerance without a finite cost
    converged = converged and bool(np.isfinite(final_cost))
    report = _format_report(method, scipy_method, result, initial_cost, final_cost)

    if config.log_optimizer:
        logger.info(f"Optimizer report\n{report}")

    iterations = int(getattr(result, "nit", 0))
    if not converged:
        reason = result.message if np.isfinite(final_cost) else f"non-finite final cost {final_cost}"
        logger.warning(f"{method} estimation did not converge: {reason}")
        if config.warn_on_nonconvergence:
            warn_convergence(
                f"{method} estimation did not converge",
                method=str(method),
                iterations=iterations,
                final_value=final_cost,
                details=str(reason)
            )

    estimation_result = EstimationResult(
        method=method,
        convergence=bool(converged),
        final_cost=final_cost,
        report=report,
        iterations=iterations,
        function_evaluations=int(getattr(result, "nfev", 0))
    )
    return ARMAFit(
        model=model,
        params=params,
        result=estimation_result,
        initial_params=initial_params.copy(),
        initial_result=initial_result
    )
