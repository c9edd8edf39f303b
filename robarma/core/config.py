'''
Configuration management for RobARMA.

Settings are grouped in dataclass sections and held by a single
``ConfigManager``. Values come from three layers, later layers winning:

1. Defaults built into the dataclasses below
2. Environment variables named ``ROBARMA_<SECTION>_<OPTION>``
3. Runtime modifications through ``set_config``

Optimizer output is controlled by ``SolverConfig.log_optimizer``, and
``robarma.estimators.solver.solve`` also accepts an explicit ``SolverConfig``
that bypasses the global manager entirely.
'''

import os
import logging
from dataclasses import dataclass, field, asdict, fields, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger("robarma.core.config")

CONFIG_ENV_PREFIX = "ROBARMA_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Gradient-based methods that do not need a Hessian
_LINE_SEARCH_METHODS = ("L-BFGS-B", "BFGS", "CG")
_TRUST_REGION_METHODS = ("trust-constr",)


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    SOLVER = "solver"
    ROBUST = "robust"
    LOGGING = "logging"


@dataclass
class SolverConfig:
    """
    Optimizer settings shared by every iterative estimator.

    Attributes:
        line_search_method: scipy method used by OLS, S and BIP-S
        trust_region_method: scipy method used by MLE, MM, BIP-MM and filtered-tau
        max_iter: Maximum number of optimizer iterations
        ftol: Relative function tolerance (line search)
        gtol: Gradient tolerance
        xtol: Step / trust radius tolerance (trust region)
        finite_difference_step: Step for numerical gradients, None for automatic
        penalty: Value substituted for non-finite costs during optimization
        log_optimizer: Whether to log optimizer reports and enable scipy output
        warn_on_nonconvergence: Whether to emit a ConvergenceWarning on failure
    """
    line_search_method: str = "L-BFGS-B"
    trust_region_method: str = "trust-constr"
    max_iter: int = 500
    ftol: float = 1e-9
    gtol: float = 1e-8
    xtol: float = 1e-8
    finite_difference_step: Optional[float] = None
    penalty: float = 1e10
    log_optimizer: bool = False
    warn_on_nonconvergence: bool = False


@dataclass
class RobustConfig:
    """
    Constants of the robust estimation engine.

    Attributes:
        scale_tol: Relative tolerance of the M-scale fixed point inside cost
            functionals; tighter than the 1e-6 default of ``scale`` because
            gradients are finite differences of the cost
        scale_max_iter: Iteration cap of the M-scale fixed point
        kalman_eps: Floor for the innovation variance in the Kalman update
        causal_terms: Number of causal coefficients used by the BIP scale
        kappa: Scaling constant of the BIP scale correction
    """
    scale_tol: float = 1e-10
    scale_max_iter: int = 500
    kalman_eps: float = 1e-10
    causal_terms: int = 100
    kappa: float = 0.8725


@dataclass
class LoggingConfig:
    """
    Logging settings for the package logger.

    Attributes:
        log_level: Level of the ``robarma`` logger
        log_format: Format string for log records
        console_logging: Whether to attach a console handler
    """
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    console_logging: bool = True


@dataclass
class RobARMAConfig:
    """Complete configuration, one attribute per section."""
    solver: SolverConfig = field(default_factory=SolverConfig)
    robust: RobustConfig = field(default_factory=RobustConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _coerce(value: Any, current: Any, setting: str) -> Any:
    """Convert ``value`` to the type of ``current``."""
    if current is None:
        # Optional[float] options
        if value is None or (isinstance(value, str) and value.lower() in ("", "none")):
            return None
        return float(value)
    value_type = type(current)
    if value_type is bool:
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1", "y")
        return bool(value)
    if value_type is int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{setting} expects an integer, got {value}")
        return int(value)
    if value_type is float:
        return float(value)
    return str(value)


class ConfigManager:
    """
    Configuration manager for RobARMA.

    Holds the current ``RobARMAConfig``, applies environment overrides on
    first use and validates every change.

    Attributes:
        _config: The current configuration object
        _initialized: Whether environment overrides have been applied
        _modified_keys: Options changed at runtime
    """

    def __init__(self):
        self._config = RobARMAConfig()
        self._initialized = False
        self._modified_keys = set()

    def initialize(self) -> None:
        """Apply environment overrides and validate, once."""
        if self._initialized:
            return

        self._apply_env_overrides()
        self._validate_config()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _apply_env_overrides(self) -> None:
        """Apply ``ROBARMA_<SECTION>_<OPTION>`` environment variables."""
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX):
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = _coerce(value, getattr(section_obj, option), f"{section}.{option}")
                setattr(section_obj, option, typed_value)
                logger.debug(f"Applied environment override: {env_var}={value}")
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")

    def _validate_config(self) -> None:
        for section in ConfigSection:
            section_obj = getattr(self._config, section.value)
            for f in fields(section_obj):
                self._validate_constraint(section.value, f.name, getattr(section_obj, f.name))

    def _validate_constraint(self, section: str, option: str, value: Any) -> None:
        """
        Check option-specific constraints.

        Raises:
            ConfigurationError: If the value violates its constraint
        """
        setting = f"{section}.{option}"
        issue = None

        if option in ("max_iter", "scale_max_iter", "causal_terms") and value < 1:
            issue = "Must be a positive integer"
        elif option in ("ftol", "gtol", "xtol", "scale_tol", "kalman_eps", "penalty", "kappa") and value <= 0:
            issue = "Must be positive"
        elif option == "finite_difference_step" and value is not None and value <= 0:
            issue = "Must be positive or None"
        elif option == "line_search_method" and value not in _LINE_SEARCH_METHODS:
            issue = f"Must be one of {list(_LINE_SEARCH_METHODS)}"
        elif option == "trust_region_method" and value not in _TRUST_REGION_METHODS:
            issue = f"Must be one of {list(_TRUST_REGION_METHODS)}"
        elif option == "log_level" and value not in _LOG_LEVELS:
            issue = f"Must be one of {list(_LOG_LEVELS)}"

        if issue is not None:
            raise ConfigurationError(
                f"Invalid value for configuration option {setting}",
                setting=setting,
                value=value,
                issue=issue
            )

    def _section(self, section: str) -> Any:
        if not hasattr(self._config, section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return getattr(self._config, section)

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        section_obj = getattr(self._config, section, None)
        if section_obj is None or not hasattr(section_obj, option):
            return default
        return getattr(section_obj, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Raises:
            ConfigurationError: If the section or option is unknown or the
                value is invalid
        """
        section_obj = self._section(section)

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        try:
            typed_value = _coerce(value, getattr(section_obj, option), f"{section}.{option}")
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        self._validate_constraint(section, option, typed_value)
        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")

        if section == ConfigSection.LOGGING.value:
            configure_logging(self._config.logging)

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = RobARMAConfig()
            self._modified_keys.clear()
            logger.debug("Reset all configuration to defaults")
            return

        section_obj = self._section(section)
        defaults = type(section_obj)()

        if option is None:
            setattr(self._config, section, defaults)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            return

        if not hasattr(defaults, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )
        setattr(section_obj, option, getattr(defaults, option))
        self._modified_keys.discard(f"{section}.{option}")

    def get_section(self, section: str) -> Any:
        """Return a copy of a configuration section."""
        return replace(self._section(section))

    def get_modified_options(self) -> List[str]:
        return sorted(self._modified_keys)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self._config)


_config_manager = ConfigManager()
_logging_configured = False


def configure_logging(settings: Optional[LoggingConfig] = None, force: bool = False) -> None:
    """
    Install the console handler on the ``robarma`` logger.

    The handler is attached only once; later calls only update the level
    and format unless ``force`` is given.

    Args:
        settings: Logging settings, defaults to the current configuration
        force: Re-create the handler even if it was already installed
    """
    global _logging_configured

    settings = settings or _config_manager._config.logging
    package_logger = logging.getLogger("robarma")
    package_logger.setLevel(getattr(logging, settings.log_level))

    if _logging_configured and not force:
        for handler in package_logger.handlers:
            handler.setFormatter(logging.Formatter(settings.log_format))
        return

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    if settings.console_logging:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.log_format))
        package_logger.addHandler(handler)

    _logging_configured = True


def initialize_config() -> None:
    """Initialize the configuration manager."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found or the
            value is invalid
    """
    if not _config_manager._initialized:
        initialize_config()
    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Args:
        section: The configuration section to reset, or None to reset all
        option: The option to reset, or None to reset the entire section
    """
    if not _config_manager._initialized:
        initialize_config()
    _config_manager.reset(section, option)


def get_solver_config() -> SolverConfig:
    """Return a copy of the current solver settings."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section(ConfigSection.SOLVER.value)


def get_robust_config() -> RobustConfig:
    """Return a copy of the current robust-engine settings."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section(ConfigSection.ROBUST.value)


def get_config_manager() -> ConfigManager:
    return _config_manager
