"""Custom exceptions for the :mod:`sr3collate` package."""
from __future__ import annotations


class Sr3CollateError(Exception):
    """Base exception for SR3 collation errors."""


class ConfigurationError(Sr3CollateError, ValueError):
    """Invalid configuration file, override or call parameter."""


class ExtractionError(Sr3CollateError, RuntimeError):
    """Fatal extraction failure: nothing could be assembled."""


class ArchiveReadError(Sr3CollateError, RuntimeError):
    """The archive reader could not be constructed or opened."""


__all__ = [
    "Sr3CollateError",
    "ConfigurationError",
    "ExtractionError",
    "ArchiveReadError",
]
