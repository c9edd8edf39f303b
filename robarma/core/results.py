'''
Result containers for ARMA estimation.

``EstimationResult`` records how a single estimation stage ended (method,
convergence, cost at the returned parameters and the optimizer report).
``ARMAFit`` bundles the model it was computed from, the final parameters and
result, and optionally the parameters and result of the stage it was started
from, so every fit carries its own provenance.

The text rendering of both classes is a stable format that downstream users
parse; keep ``summary`` output unchanged when editing.
'''

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import pandas as pd

from robarma.core.exceptions import EstimationError
from robarma.core.parameters import ARMAParameters

if TYPE_CHECKING:
    from robarma.models.arma import ARMAModel


class EstimationMethod(Enum):
    """Supported estimation methods; the value is the printed name."""

    HANNAN_RISSANEN = "Hannan-Rissanen"
    OLS = "OLS"
    MLE = "MLE"
    FTAU = "FTAU"
    S = "S"
    BS = "BS"
    MM = "MM"
    BMM = "BMM"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, method: Union[str, 'EstimationMethod']) -> 'EstimationMethod':
        """Resolve a method from its enum member, name or printed value.

        ``"hr"``, ``"bip_s"`` and ``"bip_mm"`` are accepted as aliases.

        Raises:
            EstimationError: If the method is not known
        """
        if isinstance(method, cls):
            return method

        key = str(method).strip()
        aliases = {"HR": cls.HANNAN_RISSANEN, "BIP_S": cls.BS, "BIP_MM": cls.BMM}
        upper = key.upper().replace("-", "_")
        if upper in aliases:
            return aliases[upper]
        if upper in cls.__members__:
            return cls.__members__[upper]
        for member in cls:
            if member.value.lower() == key.lower():
                return member

        raise EstimationError(
            f"Unknown estimation method: {method}",
            model_type=key,
            issue=f"Must be one of {[m.name for m in cls]}"
        )


def _format_cost(value: float) -> str:
    return f"{value:.4f}"


def _format_number(value: float) -> str:
    return f"{value:>8.4f}"


@dataclass
class EstimationResult:
    """Outcome of one estimation stage.

    Attributes:
        method: Which estimation method was used
        convergence: True only if the optimizer declared convergence
        final_cost: Cost functional evaluated at the returned parameters
        report: Optimizer report, empty for closed-form estimators
        iterations: Optimizer iterations (0 for closed form)
        function_evaluations: Cost evaluations used by the optimizer
    """

    method: EstimationMethod
    convergence: bool
    final_cost: float
    report: str = ""
    iterations: int = 0
    function_evaluations: int = 0

    def summary(self) -> str:
        convergence = "TRUE" if self.convergence else "FALSE"
        lines = [
            f"{'estimation method':<20}{str(self.method):<18}".rstrip(),
            f"{'convergence':<20}{convergence:<18}".rstrip(),
            f"{'final cost':<20}{_format_cost(self.final_cost)}",
        ]
        return "\n".join(lines) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.name,
            "convergence": self.convergence,
            "final_cost": self.final_cost,
            "iterations": self.iterations,
            "function_evaluations": self.function_evaluations,
            "report": self.report,
        }

    def __str__(self) -> str:
        return self.summary()


def _format_params(params: ARMAParameters) -> List[str]:
    rows = []
    for label, values in (("phi", params.phi), ("theta", params.theta)):
        row = f"{label:<8}" + " ".join(_format_number(v) for v in values)
        rows.append(row.rstrip())
    rows.append(f"{'mu':<8}{_format_number(params.mu)}")
    return rows


@dataclass
class ARMAFit:
    """Result of fitting an ARMA(p,q) model.

    The fit keeps a reference to the model; it does not own it.

    Attributes:
        model: The model the fit was computed from
        params: Final parameter estimates
        result: Final estimation result
        initial_params: Parameters the optimizer started from, if any
        initial_result: Result of the stage that produced the initial params
    """

    model: 'ARMAModel' = field(repr=False)
    params: ARMAParameters
    result: EstimationResult
    initial_params: Optional[ARMAParameters] = None
    initial_result: Optional[EstimationResult] = None

    @property
    def method(self) -> EstimationMethod:
        return self.result.method

    @property
    def convergence(self) -> bool:
        return self.result.convergence

    @property
    def final_cost(self) -> float:
        return self.result.final_cost

    def summary(self) -> str:
        """Render the stable text summary of the fit.

        Returns:
            str: Result block, initial values (if any) and estimated parameters
        """
        lines = ["ARMA estimation summary", "", self.result.summary()]

        if self.initial_params is not None:
            lines += ["Initial values", ""]
            lines += _format_params(self.initial_params)
            lines.append("")

        lines += ["Estimated parameters", ""]
        lines += _format_params(self.params)
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.summary()

    def to_series(self) -> pd.Series:
        """Final parameters as a Series indexed phi1..phip, theta1..thetaq, mu."""
        layout = self.params.layout
        return pd.Series(self.params.to_array(), index=layout.names(), name=str(self.method))

    def residuals(self) -> pd.Series:
        """Classical residuals at the final parameters.

        Returns:
            pd.Series: Residuals indexed like the input series when the model
            was built from a Pandas Series, else by position
        """
        e = self.model.residuals(self.params)
        return pd.Series(e, index=self.model.index, name="residuals")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "p": self.model.p,
            "q": self.model.q,
            "params": self.params.to_dict(),
            "result": self.result.to_dict(),
            "initial_params": None if self.initial_params is None else self.initial_params.to_dict(),
            "initial_result": None if self.initial_result is None else self.initial_result.to_dict(),
        }


def compare_fits(fits: List[ARMAFit]) -> pd.DataFrame:
    """Tabulate several fits of the same model side by side.

    Args:
        fits: Fits of one model, e.g. from different estimators

    Returns:
        pd.DataFrame: One column per fit with parameters, final cost and
        convergence as rows
    """
    columns = {}
    for fit in fits:
        column: Dict[str, Any] = dict(fit.to_series())
        column["final_cost"] = fit.final_cost
        column["convergence"] = fit.convergence
        columns[str(fit.method)] = pd.Series(column, dtype=object)
    return pd.DataFrame(columns)
