"""Output helper utilities.

Thin wrappers around :mod:`pandas` to persist extraction results.  Parquet
(through ``pyarrow``) is the default table format, CSV the alternative,
JSON is used for run metadata.  Destination directories are created when
necessary.
"""
from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping

import numpy as np
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from ..extract import SpatialResult, WellResult

TableFormat = Literal["parquet", "csv"]


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_table(
    df: pd.DataFrame,
    path: Path,
    *,
    fmt: TableFormat = "parquet",
    compression: str = "snappy",
) -> Path:
    """Write ``df`` to ``path`` (suffix replaced to match ``fmt``)."""

    if fmt == "parquet":
        target = path.with_suffix(".parquet")
        _ensure_parent(target)
        table = pa.Table.from_pandas(df, preserve_index=False)
        pq.write_table(table, target, compression=compression)
        return target
    if fmt == "csv":
        target = path.with_suffix(".csv")
        _ensure_parent(target)
        df.to_csv(target, index=False)
        return target
    raise ValueError(f"Unsupported table format: {fmt}")


def _index_column(columns: List[str], name: str = "cell") -> str:
    # step tokens may be any path segment, including the index name
    while name in columns:
        name = "_" + name
    return name


def _time_columns(n: int, days: np.ndarray, dates: pd.DatetimeIndex) -> Dict[str, Any]:
    if days.size == n and len(dates) == n:
        return {"day": days, "date": dates}
    return {"day": np.full(n, np.nan), "date": pd.DatetimeIndex([pd.NaT] * n)}


def write_spatial_tables(
    result: SpatialResult,
    outdir: Path,
    *,
    fmt: TableFormat = "parquet",
    compression: str = "snappy",
) -> List[Path]:
    """One ``rows x timesteps`` table per variable plus axis and catalog tables."""

    base = Path(outdir) / "spatial"
    written: List[Path] = []
    columns = list(result.timesteps.tokens)
    cell = _index_column(columns)
    for identifier, matrix in result.data.items():
        df = pd.DataFrame(matrix, columns=columns)
        df.insert(0, cell, np.arange(1, matrix.shape[0] + 1, dtype=np.int64))
        written.append(write_table(df, base / identifier, fmt=fmt, compression=compression))

    n = len(result.timesteps)
    steps = pd.DataFrame(
        {
            "column": np.arange(n, dtype=np.int64),
            "step_token": columns,
            "step_value": result.timesteps.values,
            **_time_columns(n, result.days, result.dates),
        }
    )
    written.append(write_table(steps, base / "_timesteps", fmt=fmt, compression=compression))
    written.append(write_table(result.catalog.to_frame(), base / "_variables", fmt=fmt, compression=compression))
    written.append(write_table(result.paths_table, base / "_paths", fmt=fmt, compression=compression))
    return written


def write_well_tables(
    result: WellResult,
    outdir: Path,
    *,
    fmt: TableFormat = "parquet",
    compression: str = "snappy",
) -> List[Path]:
    """One long table per well: ``day``, ``date`` and a column per variable."""

    base = Path(outdir) / "wells"
    written: List[Path] = []
    for well_id, series in result.data.items():
        n = max((values.size for values in series.values()), default=0)
        frame: Dict[str, Any] = _time_columns(n, result.days, result.dates)
        frame.update(series)
        written.append(write_table(pd.DataFrame(frame), base / well_id, fmt=fmt, compression=compression))
    return written


def _json_default(value: Any) -> Any:
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        result = float(value)
        return None if not math.isfinite(result) else result
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (Path, pd.Timestamp)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serialisable")


def write_metadata(payload: Mapping[str, Any], path: Path) -> Path:
    """Persist the run metadata as indented JSON."""

    _ensure_parent(path)
    text = json.dumps(payload, indent=2, sort_keys=True, default=_json_default, allow_nan=True)
    path.write_text(text + "\n", encoding="utf-8")
    return path


__all__ = ["write_table", "write_spatial_tables", "write_well_tables", "write_metadata"]
