"""Command line interface for finite-screen simulation."""

from .main import build_parser, main

__all__ = ["build_parser", "main"]
