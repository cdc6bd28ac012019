"""Errors raised by the numeric core.

Insufficient data (too few points, a missing class, blank text) is not an
error: those cases return an explicit "no model" value instead.
"""


class PlaygroundError(Exception):
    """Base class for every error the algorithms raise."""


class DegenerateInputError(PlaygroundError, ArithmeticError):
    """Well-formed input whose result is mathematically undefined."""


class InvalidParameterError(PlaygroundError, ValueError):
    """Out-of-domain parameter or malformed point."""
