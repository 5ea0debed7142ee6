"""Collected diagnostics for degraded-mode extraction.

Recoverable conditions (missing component table, clamped stride, length
mismatches, ...) are never raised.  They are appended to a
:class:`DiagnosticLog` that travels with the extraction result, emitted as a
structured :mod:`sr3collate.warnings` category and logged.  Tests can assert
on :meth:`DiagnosticLog.codes` instead of parsing log text.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

import pandas as pd

from .warnings import CollateWarning

logger = logging.getLogger(__name__)

# Diagnostic codes
COMPONENT_TABLE_MISSING = "component_table_missing"
TIME_TABLE_MISSING = "time_table_missing"
TIME_ALIGNMENT_FAILED = "time_alignment_failed"
ENTRY_MISSING = "entry_missing"
VECTOR_LENGTH_MISMATCH = "vector_length_mismatch"
STRIDE_CLAMPED = "stride_clamped"
STRIDE_ADVICE = "stride_advice"
SERIES_LENGTH_MISMATCH = "series_length_mismatch"
WELL_NAMES_MISSING = "well_names_missing"
IDENTIFIER_COLLISION = "identifier_collision"


@dataclass(frozen=True)
class Diagnostic:
    """Single recoverable condition observed during extraction."""

    code: str
    message: str
    level: str = "warning"
    context: Dict[str, Any] = field(default_factory=dict)

    def as_record(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "level": self.level,
            "message": self.message,
            "context": dict(self.context),
        }


class DiagnosticLog:
    """Ordered collection of :class:`Diagnostic` records.

    Parameters
    ----------
    emit_warnings:
        When true each warning-level record is also issued through
        :func:`warnings.warn` with its structured category.
    """

    def __init__(self, *, emit_warnings: bool = True, log: Optional[logging.Logger] = None) -> None:
        self.records: List[Diagnostic] = []
        self.emit_warnings = emit_warnings
        self._logger = log or logger

    def warn(
        self,
        code: str,
        message: str,
        category: Type[Warning] = CollateWarning,
        **context: Any,
    ) -> Diagnostic:
        record = Diagnostic(code=code, message=message, level="warning", context=context)
        self.records.append(record)
        self._logger.warning("%s: %s", code, message)
        if self.emit_warnings:
            warnings.warn(message, category, stacklevel=3)
        return record

    def info(self, code: str, message: str, **context: Any) -> Diagnostic:
        record = Diagnostic(code=code, message=message, level="info", context=context)
        self.records.append(record)
        self._logger.info("%s: %s", code, message)
        return record

    def codes(self) -> List[str]:
        return [record.code for record in self.records]

    def has(self, code: str) -> bool:
        return any(record.code == code for record in self.records)

    def count(self, code: str) -> int:
        return sum(1 for record in self.records if record.code == code)

    def to_records(self) -> List[Dict[str, Any]]:
        return [record.as_record() for record in self.records]

    def to_frame(self) -> pd.DataFrame:
        """Return the diagnostics as a table with one row per record."""

        columns = ["code", "level", "message", "context"]
        if not self.records:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(self.to_records(), columns=columns)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


__all__ = [
    "Diagnostic",
    "DiagnosticLog",
    "COMPONENT_TABLE_MISSING",
    "TIME_TABLE_MISSING",
    "TIME_ALIGNMENT_FAILED",
    "ENTRY_MISSING",
    "VECTOR_LENGTH_MISMATCH",
    "STRIDE_CLAMPED",
    "STRIDE_ADVICE",
    "SERIES_LENGTH_MISMATCH",
    "WELL_NAMES_MISSING",
    "IDENTIFIER_COLLISION",
]
