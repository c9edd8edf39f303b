# tests/test_core.py

"""
Tests for the core infrastructure of RobARMA.

Covers the exception hierarchy, the configuration manager (defaults,
validation, environment overrides, logging setup), the parameter containers
and packed layout, input validation and the stable text format of fits.
"""

import logging

import numpy as np
import pandas as pd
import pytest

import robarma
from robarma.core.config import (
    ConfigManager,
    SolverConfig,
    configure_logging,
    get_config,
    get_robust_config,
    get_solver_config,
    reset_config,
    set_config,
)
from robarma.core.exceptions import (
    ConfigurationError,
    ConvergenceWarning,
    DataError,
    EstimationError,
    ParameterError,
    RobARMAError,
    SimulationError,
    warn_convergence,
)
from robarma.core.parameters import ARMAParameters, ParameterLayout
from robarma.core.results import ARMAFit, EstimationMethod, EstimationResult, compare_fits
from robarma.core.validation import minimum_length, validate_orders, validate_series
from robarma.utils.differentiation import gradient_2sided


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        for cls in (ParameterError, DataError, SimulationError, EstimationError, ConfigurationError):
            assert issubclass(cls, RobARMAError)

    def test_parameter_error_context(self):
        error = ParameterError("bad order", param_name="p", param_value=-1, constraint="Must be >= 0")
        assert error.param_name == "p"
        assert error.context["Parameter"] == "p"
        assert "bad order" in str(error)
        assert "Must be >= 0" in str(error)

    def test_simulation_error_names_parameter(self):
        error = SimulationError("not stationary", param_name="phi", param_value=[1.2])
        assert error.param_name == "phi"
        assert "phi" in str(error)

    def test_convergence_warning(self):
        with pytest.warns(ConvergenceWarning):
            warn_convergence("did not converge", method="MLE", iterations=3)


class TestConfiguration:
    """Tests for the configuration manager."""

    def test_defaults(self):
        assert get_config("solver", "max_iter") == 500
        assert get_config("solver", "line_search_method") == "L-BFGS-B"
        assert get_config("solver", "trust_region_method") == "trust-constr"
        assert get_config("robust", "kappa") == 0.8725
        assert get_config("logging", "log_level") == "WARNING"
        assert get_config("solver", "missing", default="x") == "x"

    def test_set_coerces_and_reset(self):
        set_config("solver", "max_iter", "200")
        assert get_config("solver", "max_iter") == 200
        assert get_solver_config().max_iter == 200
        reset_config("solver", "max_iter")
        assert get_config("solver", "max_iter") == 500

    def test_set_optional_float(self):
        set_config("solver", "finite_difference_step", "1e-5")
        assert get_config("solver", "finite_difference_step") == 1e-5
        set_config("solver", "finite_difference_step", None)
        assert get_config("solver", "finite_difference_step") is None

    def test_get_section_is_a_copy(self):
        settings = get_robust_config()
        settings.kappa = 2.0
        assert get_config("robust", "kappa") == 0.8725

    @pytest.mark.parametrize("section, option, value", [
        ("solver", "max_iter", 0),
        ("solver", "gtol", -1.0),
        ("solver", "line_search_method", "Nelder-Mead"),
        ("solver", "trust_region_method", "dogleg"),
        ("robust", "causal_terms", 0),
        ("logging", "log_level", "VERBOSE"),
        ("solver", "max_iter", 2.5),
    ])
    def test_invalid_values(self, section, option, value):
        with pytest.raises(ConfigurationError):
            set_config(section, option, value)

    def test_unknown_section_and_option(self):
        with pytest.raises(ConfigurationError):
            set_config("plotting", "style", "dark")
        with pytest.raises(ConfigurationError):
            set_config("solver", "no_such_option", 1)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ROBARMA_SOLVER_MAX_ITER", "200")
        monkeypatch.setenv("ROBARMA_SOLVER_LOG_OPTIMIZER", "true")
        monkeypatch.setenv("ROBARMA_ROBUST_KAPPA", "0.5")
        manager = ConfigManager()
        manager.initialize()
        assert manager.get("solver", "max_iter") == 200
        assert manager.get("solver", "log_optimizer") is True
        assert manager.get("robust", "kappa") == 0.5

    def test_invalid_environment_override(self, monkeypatch):
        monkeypatch.setenv("ROBARMA_SOLVER_MAX_ITER", "-3")
        manager = ConfigManager()
        with pytest.raises(ConfigurationError):
            manager.initialize()

    def test_modified_options(self):
        manager = ConfigManager()
        manager.set("robust", "kappa", 0.9)
        assert manager.get_modified_options() == ["robust.kappa"]
        manager.reset()
        assert manager.get_modified_options() == []
        assert manager.to_dict()["robust"]["kappa"] == 0.8725


class TestLogging:
    """Tests for the package logger setup."""

    def test_single_handler(self):
        configure_logging()
        configure_logging()
        assert len(logging.getLogger("robarma").handlers) == 1

    def test_set_log_level(self):
        robarma.set_log_level("DEBUG")
        assert logging.getLogger("robarma").level == logging.DEBUG
        robarma.set_log_level(logging.ERROR)
        assert logging.getLogger("robarma").level == logging.ERROR

    def test_log_level_from_config(self):
        set_config("logging", "log_level", "INFO")
        assert logging.getLogger("robarma").level == logging.INFO


class TestParameters:
    """Tests for ParameterLayout and ARMAParameters."""

    def test_layout_slices(self):
        layout = ParameterLayout(2, 1)
        assert layout.size == 4
        assert layout.phi == slice(0, 2)
        assert layout.theta == slice(2, 3)
        assert layout.mu == 3
        assert layout.names() == ["phi1", "phi2", "theta1", "mu"]

    @pytest.mark.parametrize("p, q", [(0, 2), (2, 0), (0, 1), (1, 0)])
    def test_empty_blocks_do_not_alias(self, p, q):
        layout = ParameterLayout(p, q)
        x = np.arange(layout.size, dtype=float)
        phi, theta, mu = layout.unpack(x)
        assert phi.shape == (p,)
        assert theta.shape == (q,)
        assert mu == float(layout.size - 1)
        np.testing.assert_array_equal(layout.pack(phi, theta, mu), x)

    def test_unpack_wrong_length(self):
        with pytest.raises(ParameterError):
            ParameterLayout(1, 1).unpack(np.zeros(2))

    def test_negative_block(self):
        with pytest.raises(ParameterError):
            ParameterLayout(-1, 1)

    def test_round_trip(self):
        params = ARMAParameters(phi=[0.7], theta=[0.2, -0.4], mu=2.0)
        x = params.to_array()
        np.testing.assert_array_equal(x, [0.7, 0.2, -0.4, 2.0])
        assert ARMAParameters.from_array(x, 1, 2) == params

    def test_from_array_owns_copies(self):
        x = np.array([0.5, 0.1, 1.0])
        params = ARMAParameters.from_array(x, 1, 1)
        x[0] = 9.0
        assert params.phi[0] == 0.5

    def test_coercion(self):
        params = ARMAParameters(phi=0.5, theta=[], mu=1)
        assert params.p == 1
        assert params.q == 0
        assert params.phi.dtype == np.float64
        assert isinstance(params.mu, float)
        assert params.to_dict() == {"phi": [0.5], "theta": [], "mu": 1.0}


class TestValidation:
    """Tests for order and series validation."""

    @pytest.mark.parametrize("p, q", [(-1, 1), (1, -1), (0, 0), (1.5, 0), (True, 1), ("1", 0)])
    def test_invalid_orders(self, p, q):
        with pytest.raises(ParameterError):
            validate_orders(p, q)

    def test_valid_orders(self):
        assert validate_orders(np.int64(2), 0) == (2, 0)

    def test_minimum_length(self):
        assert minimum_length(1, 0) == 1 + 3 + 2
        assert minimum_length(1, 2) == 2 + 5 + 3

    def test_series_errors(self):
        with pytest.raises(DataError):
            validate_series(None)
        with pytest.raises(DataError):
            validate_series(np.ones((3, 3)))
        with pytest.raises(DataError):
            validate_series([1.0, 2.0], min_length=3)
        with pytest.raises(DataError) as info:
            validate_series([1.0, np.nan, 2.0, 3.0])
        assert info.value.index == 1
        with pytest.raises(DataError):
            validate_series(pd.DataFrame(np.ones((5, 2))))

    def test_series_conversion(self):
        values = validate_series(pd.Series([1, 2, 3, 4]))
        assert values.dtype == np.float64
        np.testing.assert_array_equal(values, [1.0, 2.0, 3.0, 4.0])
        column = validate_series(pd.DataFrame({"y": [1.0, 2.0, 3.0]}))
        assert column.shape == (3,)


class TestResults:
    """Tests for EstimationMethod, EstimationResult and the fit text format."""

    def test_method_parse(self):
        assert EstimationMethod.parse("hr") is EstimationMethod.HANNAN_RISSANEN
        assert EstimationMethod.parse("Hannan-Rissanen") is EstimationMethod.HANNAN_RISSANEN
        assert EstimationMethod.parse("bip_s") is EstimationMethod.BS
        assert EstimationMethod.parse("bip-mm") is EstimationMethod.BMM
        assert EstimationMethod.parse("mle") is EstimationMethod.MLE
        assert EstimationMethod.parse(EstimationMethod.MM) is EstimationMethod.MM
        with pytest.raises(EstimationError):
            EstimationMethod.parse("lad")

    def test_summary_format(self):
        fit = ARMAFit(
            model=None,
            params=ARMAParameters(phi=[0.7012], theta=[0.1990, -0.3987], mu=2.0031),
            result=EstimationResult(EstimationMethod.MM, True, 1.2345),
            initial_params=ARMAParameters(phi=[0.7], theta=[0.2, -0.4], mu=2.0),
        )
        expected = (
            "ARMA estimation summary\n"
            "\n"
            "estimation method   MM\n"
            "convergence         TRUE\n"
            "final cost          1.2345\n"
            "\n"
            "Initial values\n"
            "\n"
            "phi       0.7000\n"
            "theta     0.2000  -0.4000\n"
            "mu        2.0000\n"
            "\n"
            "Estimated parameters\n"
            "\n"
            "phi       0.7012\n"
            "theta     0.1990  -0.3987\n"
            "mu        2.0031\n"
        )
        assert str(fit) == expected

    def test_summary_without_initial_values(self):
        fit = ARMAFit(
            model=None,
            params=ARMAParameters(phi=[], theta=[0.5], mu=0.0),
            result=EstimationResult(EstimationMethod.HANNAN_RISSANEN, False, 0.0),
        )
        text = fit.summary()
        assert "Initial values" not in text
        assert "estimation method   Hannan-Rissanen\n" in text
        assert "convergence         FALSE\n" in text
        assert "\nphi\n" in text

    def test_to_series_and_compare(self):
        result = EstimationResult(EstimationMethod.OLS, True, 3.0)
        fit = ARMAFit(model=None, params=ARMAParameters([0.5], [0.1], 1.0), result=result)
        series = fit.to_series()
        assert list(series.index) == ["phi1", "theta1", "mu"]
        assert series.name == "OLS"
        table = compare_fits([fit])
        assert table.loc["final_cost", "OLS"] == 3.0
        assert bool(table.loc["convergence", "OLS"])


class TestDifferentiation:
    """Tests for the two-sided numerical gradient."""

    def test_quadratic(self):
        grad = gradient_2sided(lambda x: x[0] ** 2 + 3 * x[1] ** 2, np.array([1.0, -2.0]))
        np.testing.assert_allclose(grad, [2.0, -12.0], rtol=1e-6)

    def test_explicit_step(self):
        grad = gradient_2sided(lambda x, a: a * np.sum(x ** 3), np.array([1.0]), epsilon=1e-4, args=(2.0,))
        np.testing.assert_allclose(grad, [6.0], rtol=1e-6)

    def test_invalid_input(self):
        with pytest.raises(ParameterError):
            gradient_2sided(np.sum, np.ones((2, 2)))
        with pytest.raises(ParameterError):
            gradient_2sided(np.sum, np.ones(2), epsilon=0.0)
