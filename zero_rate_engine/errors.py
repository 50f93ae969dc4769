from __future__ import annotations


class ConfigurationError(ValueError):
    """Curve or convention set up in a way the engine cannot use."""


class DomainArgumentError(ValueError):
    """Argument outside the domain of a computation (e.g. periods_per_year < 1)."""
