"""Structured warning classes for the :mod:`sr3collate` package."""
from __future__ import annotations


class CollateWarning(UserWarning):
    """Base warning class for recoverable collation conditions."""


class ComponentTableWarning(CollateWarning):
    """Component lookup table missing; variables are not renamed."""


class TimeAxisWarning(CollateWarning):
    """Master time table missing or not alignable to the step axis."""


class ShapeWarning(CollateWarning):
    """Entry missing from the archive or vector length mismatch."""


class StrideWarning(CollateWarning):
    """Requested stride clamped to the number of available steps."""


class MetadataWarning(CollateWarning):
    """Optional metadata missing or inconsistent (well names, identifiers)."""


__all__ = [
    "CollateWarning",
    "ComponentTableWarning",
    "TimeAxisWarning",
    "ShapeWarning",
    "StrideWarning",
    "MetadataWarning",
]
