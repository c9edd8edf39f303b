# robarma/version.py
"""
RobARMA Version Information

Version number and package metadata, accessible programmatically via
robarma.__version__.

RobARMA follows semantic versioning (MAJOR.MINOR.PATCH):
- MAJOR: Incompatible API changes
- MINOR: Backwards-compatible functionality additions
- PATCH: Backwards-compatible bug fixes
"""

from typing import Tuple

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

__title__ = "RobARMA"
__description__ = "Robust estimation of ARMA models"
__license__ = "MIT"

__python_requires__ = ">=3.10"

__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
    "statsmodels": ">=0.14.0",
}


def get_version_info() -> Tuple[int, int, int]:
    """Return the version as a (major, minor, patch) tuple."""
    return (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH)
