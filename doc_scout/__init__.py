# doc_scout/__init__.py
"""
DocScout package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from .cli import cli  # экспорт для pytest

__all__ = ["__version__", "cli"]
