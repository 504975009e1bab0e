"""Core module with types, units, config, sampling, and utilities."""

__all__ = [
    "types",
    "units",
    "errors",
    "logging",
    "config",
    "sampling",
]
