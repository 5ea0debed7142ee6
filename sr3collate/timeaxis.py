"""Alignment of step tokens and well series to the master time table.

``/General/MasterTimeTable`` holds one row per simulation report including
the initial state in row 0.  Each row carries the elapsed time in days and a
packed calendar date ``YYYYMMDD.fraction`` where the fraction is a fraction
of a day.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd

from . import constants
from .axis import TimestepAxis, step_numbers
from .diagnostics import (
    STRIDE_ADVICE,
    STRIDE_CLAMPED,
    TIME_ALIGNMENT_FAILED,
    TIME_TABLE_MISSING,
    DiagnosticLog,
)
from .errors import ConfigurationError
from .warnings import StrideWarning, TimeAxisWarning

logger = logging.getLogger(__name__)

MS_PER_DAY = 86_400_000


@dataclass(frozen=True)
class MasterTimeTable:
    """Offset-in-days and packed-date columns, one row per report (row 0 = initial state)."""

    offset_days: np.ndarray
    packed_dates: np.ndarray

    def __post_init__(self) -> None:
        if self.offset_days.shape != self.packed_dates.shape:
            raise ValueError(
                f"MasterTimeTable columns differ in length: {self.offset_days.shape} vs {self.packed_dates.shape}"
            )

    def __len__(self) -> int:
        return int(self.offset_days.size)

    @property
    def n_steps(self) -> int:
        """Number of simulated steps, excluding the initial state."""

        return max(len(self) - 1, 0)

    @classmethod
    def from_columns(cls, offset_days: Sequence[float], packed_dates: Sequence[float]) -> "MasterTimeTable":
        return cls(
            offset_days=np.asarray(offset_days, dtype=float).reshape(-1),
            packed_dates=np.asarray(packed_dates, dtype=float).reshape(-1),
        )

    @classmethod
    def from_records(cls, records: Any) -> "MasterTimeTable":
        """Build from the compound HDF5 dataset (fields ``Offset in days`` and ``Date``)."""

        names = records.dtype.names or ()
        missing = [
            name for name in (constants.TIME_OFFSET_FIELD, constants.TIME_DATE_FIELD) if name not in names
        ]
        if missing:
            raise ValueError(f"MasterTimeTable is missing fields: {', '.join(missing)}")
        return cls.from_columns(records[constants.TIME_OFFSET_FIELD], records[constants.TIME_DATE_FIELD])


@dataclass(frozen=True)
class StepAlignment:
    days: np.ndarray
    dates: pd.DatetimeIndex

    @classmethod
    def empty(cls) -> "StepAlignment":
        return cls(days=np.empty(0, dtype=float), dates=pd.DatetimeIndex([], dtype="datetime64[ns]"))


@dataclass(frozen=True)
class SeriesAlignment:
    """Stride-decimated selection of the step axis."""

    indices: np.ndarray
    days: np.ndarray
    dates: pd.DatetimeIndex
    stride: int
    n_steps: int

    def limit(self, n_steps: int) -> "SeriesAlignment":
        """Drop selected indices at or beyond ``n_steps``."""

        keep = self.indices < n_steps
        if self.days.size == self.indices.size:
            days = self.days[keep]
            dates = self.dates[keep]
        else:
            days, dates = self.days, self.dates
        return SeriesAlignment(
            indices=self.indices[keep],
            days=days,
            dates=dates,
            stride=self.stride,
            n_steps=min(self.n_steps, n_steps),
        )


def decode_packed_dates(values: Sequence[float]) -> pd.DatetimeIndex:
    """Decode ``YYYYMMDD.fraction`` values into timestamps.

    The integer part is the calendar date and the fraction is the elapsed
    fraction of that day.  The fraction is rounded to whole milliseconds,
    which is below the resolution a float64 packed date carries.
    Non-finite or undecodable values become ``NaT``.

    >>> decode_packed_dates([20240315.25])[0]
    Timestamp('2024-03-15 06:00:00')
    """

    arr = np.asarray(values, dtype=float).reshape(-1)
    out = pd.Series(pd.NaT, index=range(arr.size), dtype="datetime64[ns]")
    finite = np.isfinite(arr) & (arr >= 0.0)
    if finite.any():
        int_part = np.floor(arr[finite])
        frac = arr[finite] - int_part
        day_text = pd.Series(int_part.astype(np.int64)).astype(str)
        calendar = pd.to_datetime(day_text, format="%Y%m%d", errors="coerce")
        offset = pd.to_timedelta(np.round(frac * MS_PER_DAY).astype(np.int64), unit="ms")
        out.loc[np.flatnonzero(finite)] = (calendar + offset).to_numpy()
    return pd.DatetimeIndex(out)


def align_steps(
    axis: TimestepAxis,
    table: Optional[MasterTimeTable],
    diagnostics: Optional[DiagnosticLog] = None,
) -> StepAlignment:
    """Map spatial step tokens to days and dates.

    Step ``n`` reads row ``n + 1`` of the table.  A missing table, a
    non-integer token or an out-of-range row fails the whole alignment:
    a diagnostic is recorded and empty axes are returned.
    """

    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    if table is None:
        diagnostics.warn(
            TIME_TABLE_MISSING,
            "Master time table unavailable; spatial time axis left empty",
            TimeAxisWarning,
        )
        return StepAlignment.empty()
    try:
        steps = np.asarray(step_numbers(axis), dtype=np.int64)
    except (ValueError, OverflowError) as exc:
        diagnostics.warn(
            TIME_ALIGNMENT_FAILED,
            f"Step tokens are not integers ({exc}); spatial time axis left empty",
            TimeAxisWarning,
        )
        return StepAlignment.empty()
    rows = steps + 1
    bad = (steps < 0) | (rows >= len(table))
    if bad.any():
        offending = [axis.tokens[i] for i in np.flatnonzero(bad)]
        diagnostics.warn(
            TIME_ALIGNMENT_FAILED,
            f"Steps {offending} fall outside the master time table ({len(table)} rows); "
            "spatial time axis left empty",
            TimeAxisWarning,
            steps=offending,
            table_rows=len(table),
        )
        return StepAlignment.empty()
    return StepAlignment(days=table.offset_days[rows].copy(), dates=decode_packed_dates(table.packed_dates[rows]))


def series_indices(n_steps: int, stride: int) -> np.ndarray:
    return np.arange(0, max(n_steps, 0), stride, dtype=np.int64)


def align_series(
    table: Optional[MasterTimeTable],
    stride: int,
    diagnostics: Optional[DiagnosticLog] = None,
    *,
    n_steps_hint: Optional[int] = None,
) -> SeriesAlignment:
    """Select every ``stride``-th step of the master table, skipping the initial state.

    A stride larger than the number of steps is clamped so that exactly one
    sample (index 0) is selected.  Without a table the step count comes from
    ``n_steps_hint`` and the day/date axes stay empty.
    """

    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    stride = int(stride)
    if stride < 1:
        raise ConfigurationError(f"stride must be a positive integer, got {stride}")

    if table is None:
        diagnostics.warn(
            TIME_TABLE_MISSING,
            "Master time table unavailable; well time axis left empty",
            TimeAxisWarning,
        )
        n_steps = int(n_steps_hint or 0)
    else:
        n_steps = table.n_steps

    if n_steps >= 1 and stride > n_steps:
        diagnostics.warn(
            STRIDE_CLAMPED,
            f"Stride ({stride}) is greater than total number of steps ({n_steps}); using stride = {n_steps}",
            StrideWarning,
            requested=stride,
            n_steps=n_steps,
        )
        stride = n_steps
    if stride == 1 and n_steps >= constants.STRIDE_ADVICE_THRESHOLD:
        diagnostics.info(
            STRIDE_ADVICE,
            f"Total timesteps = {n_steps}; consider a stride > 1 (e.g. 10, 50, 100) for faster extraction",
            n_steps=n_steps,
        )

    indices = series_indices(n_steps, stride)
    if table is None:
        return SeriesAlignment(
            indices=indices,
            days=np.empty(0, dtype=float),
            dates=pd.DatetimeIndex([], dtype="datetime64[ns]"),
            stride=stride,
            n_steps=n_steps,
        )
    rows = indices + 1
    return SeriesAlignment(
        indices=indices,
        days=table.offset_days[rows].copy(),
        dates=decode_packed_dates(table.packed_dates[rows]),
        stride=stride,
        n_steps=n_steps,
    )


__all__ = [
    "MasterTimeTable",
    "StepAlignment",
    "SeriesAlignment",
    "decode_packed_dates",
    "align_steps",
    "align_series",
    "series_indices",
]
