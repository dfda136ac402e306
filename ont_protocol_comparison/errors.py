"""
Error types for the protocol comparison analysis.

Loading problems are fatal and raised as exceptions. Statistics whose
denominator is zero (or regressions without enough distinct points) are not
errors: they return ``UNDEFINED`` and callers check with ``is_undefined``.
"""

import math
from typing import Any

UNDEFINED = float("nan")


class ProtocolComparisonError(Exception):
    """Base class for all analysis errors."""


class InputNotFoundError(ProtocolComparisonError, FileNotFoundError):
    """A required input (directory, file, sheet or column) is missing."""


class MalformedInputError(ProtocolComparisonError, ValueError):
    """A field could not be parsed under its expected format."""


def is_undefined(value: Any) -> bool:
    """Return True if a statistic came back as the undefined sentinel."""
    try:
        return math.isnan(value)
    except TypeError:
        return value is None
