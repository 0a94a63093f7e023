"""
Exception types raised by the calibration and metric core.

A rep with too few points is not an error: its metric fields stay ``None``.
"""


class VolleyVisionError(Exception):
    """Base class for every error the core reports."""


class ConfigurationError(VolleyVisionError, ValueError):
    """Degenerate calibration input (vertical reference line, bad height)."""


class PreconditionError(VolleyVisionError, RuntimeError):
    """An operation was invoked in a state where it is not allowed."""


__all__ = ["VolleyVisionError", "ConfigurationError", "PreconditionError"]
