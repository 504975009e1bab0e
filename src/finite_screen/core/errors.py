"""Custom exception types for finite-screen simulation."""


class FiniteScreenError(Exception):
    """Base exception for all finite-screen errors."""

    pass


class ConfigError(FiniteScreenError):
    """Configuration-related errors."""

    pass


class SamplingError(FiniteScreenError):
    """Angle sweep and sample-geometry errors."""

    pass


class InvalidParameter(FiniteScreenError, ValueError):
    """Simulation parameter outside the model's domain."""

    pass


class BackendError(FiniteScreenError):
    """Backend and device-related errors."""

    pass


class ExportError(FiniteScreenError):
    """Result and script export errors."""

    pass


__all__ = [
    "FiniteScreenError",
    "ConfigError",
    "SamplingError",
    "InvalidParameter",
    "BackendError",
    "ExportError",
]
