"""Exception hierarchy for the swing engine.

Absence of a result ("not a swing yet") is never an exception; these types
cover programmer errors at construction and signals that cannot be analysed.
"""

from __future__ import annotations

__all__ = ["ConfigurationError", "DegenerateSignalError", "SwingSenseError"]


class SwingSenseError(Exception):
    """Base class for all swingsense errors."""


class ConfigurationError(SwingSenseError, ValueError):
    """Raised at construction time for invalid engine configuration."""


class DegenerateSignalError(SwingSenseError):
    """A window is zero-variance or carries NaN/Inf and cannot be analysed."""
