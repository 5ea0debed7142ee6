"""Dense matrix assembly for spatial properties.

Each variable becomes a ``[rows x steps]`` float matrix.  The row count is
not declared anywhere in the archive: it is taken from the first vector
that can be read for the variable (entries are visited by ascending step
column, so the probe does not depend on archive path order).  Assembly
then runs in two passes:

1. discovery - resolve every entry to ``(variable, column)`` and fix each
   variable's row count;
2. fill - allocate ``NaN`` matrices and copy vectors into their columns.

Vectors whose length differs from the established row count are
reconciled by copying the first ``min(rows, len)`` values.  A shorter
vector leaves the tail as ``NaN``; a longer vector loses its excess
values.  The truncation is a deliberate lossy policy and is counted in
the diagnostics.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .axis import TimestepAxis
from .catalog import VariableCatalog
from .diagnostics import ENTRY_MISSING, VECTOR_LENGTH_MISMATCH, DiagnosticLog
from .errors import ExtractionError
from .paths import PathToken
from .warnings import ShapeWarning

logger = logging.getLogger(__name__)

# (variable_token, step_token, vector or None when the archive lookup failed)
Entry = Tuple[str, str, Optional[np.ndarray]]

_MAX_LISTED = 10


@dataclass(frozen=True)
class _Placed:
    variable: int
    column: int
    vector: np.ndarray


def fetch_entries(tokens: Sequence[PathToken], archive) -> List[Entry]:
    """Look up each classified spatial path in ``archive``.

    Lookup failures become ``None`` vectors; the assembler skips them.
    """

    entries: List[Entry] = []
    for token in tokens:
        try:
            vector = archive.get(token.path)
        except (KeyError, OSError, ValueError, TypeError) as exc:
            logger.debug("Lookup of %s failed: %s", token.path, exc)
            vector = None
        entries.append((token.variable_token, token.step_token or "", vector))
    return entries


def _as_vector(value) -> Optional[np.ndarray]:
    try:
        return np.asarray(value, dtype=float).reshape(-1)
    except (TypeError, ValueError):
        return None


def _place_entries(
    entries: Iterable[Entry],
    axis: TimestepAxis,
    catalog: VariableCatalog,
    diagnostics: DiagnosticLog,
) -> List[_Placed]:
    placed: List[_Placed] = []
    missing: List[str] = []
    for variable_token, step_token, raw in entries:
        variable = catalog.position(variable_token)
        column = axis.column(step_token)
        if variable is None or column is None:
            continue
        vector = None if raw is None else _as_vector(raw)
        if vector is None:
            missing.append(f"{step_token}/{variable_token}")
            continue
        placed.append(_Placed(variable=variable, column=column, vector=vector))
    if missing:
        diagnostics.warn(
            ENTRY_MISSING,
            f"{len(missing)} spatial entries could not be read and were skipped "
            f"(first: {missing[:_MAX_LISTED]})",
            ShapeWarning,
            count=len(missing),
            entries=missing[:_MAX_LISTED],
        )
    placed.sort(key=lambda item: (item.variable, item.column))
    return placed


def discover_row_counts(placed: Sequence[_Placed], n_variables: int) -> List[int]:
    """Row count per variable from its first non-empty vector; 0 when none was read."""

    rows = [0] * n_variables
    for item in placed:
        if rows[item.variable] == 0 and item.vector.size > 0:
            rows[item.variable] = int(item.vector.size)
    return rows


def assemble(
    entries: Iterable[Entry],
    axis: TimestepAxis,
    catalog: VariableCatalog,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Dict[str, np.ndarray]:
    """Build ``{identifier: matrix}`` in catalog order.

    Raises
    ------
    ExtractionError
        When ``entries`` is empty: there is nothing to assemble.
    """

    entries = list(entries)
    if not entries:
        raise ExtractionError("No spatial property entries to assemble")
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    placed = _place_entries(entries, axis, catalog, diagnostics)
    row_counts = discover_row_counts(placed, len(catalog))

    n_cols = len(axis)
    matrices = [np.full((rows, n_cols), np.nan, dtype=float) for rows in row_counts]
    mismatched: Dict[int, int] = {}
    for item in placed:
        target = matrices[item.variable]
        n_rows = target.shape[0]
        if item.vector.size == n_rows:
            target[:, item.column] = item.vector
            continue
        m = min(n_rows, item.vector.size)
        target[:m, item.column] = item.vector[:m]
        mismatched[item.variable] = mismatched.get(item.variable, 0) + 1

    for variable, count in mismatched.items():
        identifier = catalog.identifiers[variable]
        diagnostics.warn(
            VECTOR_LENGTH_MISMATCH,
            f"{identifier}: {count} vectors differ from the {row_counts[variable]} rows "
            "established by the first vector; truncated or padded with NaN",
            ShapeWarning,
            variable=identifier,
            rows=row_counts[variable],
            count=count,
        )

    return {identifier: matrix for identifier, matrix in zip(catalog.identifiers, matrices)}


__all__ = ["Entry", "assemble", "discover_row_counts", "fetch_entries"]
