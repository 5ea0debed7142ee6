from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sr3collate.diagnostics import DiagnosticLog  # noqa: E402
from sr3collate.io.archive import MappingArchive  # noqa: E402
from sr3collate.timeaxis import MasterTimeTable  # noqa: E402

COMPONENTS = ["H2O", "CO2"]


def make_time_table(n_rows: int, *, start: str = "2024-01-01") -> MasterTimeTable:
    """Daily reports: row ``i`` is ``i`` days after ``start``, packed as ``YYYYMMDD.0``."""

    base = pd.Timestamp(start)
    offsets = np.arange(n_rows, dtype=float)
    dates = [float((base + pd.Timedelta(days=i)).strftime("%Y%m%d")) for i in range(n_rows)]
    return MasterTimeTable.from_columns(offsets, dates)


def make_well_cube(n_wells: int, n_vars: int, n_steps: int) -> np.ndarray:
    """``cube[w, v, s] = 1000 w + 100 v + s``."""

    w = np.arange(n_wells)[:, None, None]
    v = np.arange(n_vars)[None, :, None]
    s = np.arange(n_steps)[None, None, :]
    return (1000.0 * w + 100.0 * v + s).astype(float)


def spatial_paths() -> dict:
    return {
        "/General/Notes": np.array([1.0]),
        "/SpatialProperties/000000/PRES": np.array([100.0, 101.0, 102.0]),
        "/SpatialProperties/000000/X1": np.array([0.1, 0.2, 0.3]),
        "/SpatialProperties/000000/X2": np.array([0.9, 0.8, 0.7]),
        "/SpatialProperties/000001": np.array([0.0]),
        "/SpatialProperties/000001/PRES": np.array([110.0, 111.0, 112.0]),
        "/SpatialProperties/000002/PRES": np.array([120.0, 121.0]),
        "/SpatialProperties/000002/X2": np.array([0.5, 0.5, 0.5]),
    }


@pytest.fixture
def diagnostics() -> DiagnosticLog:
    return DiagnosticLog(emit_warnings=False)


@pytest.fixture
def spatial_archive() -> MappingArchive:
    return MappingArchive(
        spatial_paths(),
        component_names=COMPONENTS,
        time_table=make_time_table(4),
    )


@pytest.fixture
def well_archive() -> MappingArchive:
    return MappingArchive(
        {"/TimeSeries/WELLS/Data": np.zeros(1)},
        component_names=COMPONENTS,
        time_table=make_time_table(51),
        well_origins=["P1", "I-1"],
        well_variables=["BHP", "X1", "X2"],
        well_cube=make_well_cube(2, 3, 50),
    )


@pytest.fixture
def time_table_factory():
    return make_time_table


@pytest.fixture
def well_cube_factory():
    return make_well_cube


def write_sr3(path: Path, *, wells: bool = True, components: bool = True) -> Path:
    """Write a small HDF5 file with the SR3 group layout."""

    h5py = pytest.importorskip("h5py")
    table = make_time_table(51)
    with h5py.File(path, "w") as handle:
        handle.create_dataset("/SpatialProperties/000000/PRES", data=np.array([100.0, 101.0, 102.0]))
        handle.create_dataset("/SpatialProperties/000000/X1", data=np.array([0.1, 0.2, 0.3]))
        handle.create_dataset("/SpatialProperties/000001/PRES", data=np.array([110.0, 111.0, 112.0]))
        handle.create_dataset("/SpatialProperties/000002/PRES", data=np.array([120.0, 121.0]))
        handle.create_dataset("/SpatialProperties/000002/X2", data=np.array([0.5, 0.5, 0.5]))
        if components:
            names = np.array(
                [(name.encode(), 18.0 + i) for i, name in enumerate(COMPONENTS)],
                dtype=[("Name", "S8"), ("Molar mass", "f8")],
            )
            handle.create_dataset("/General/ComponentTable", data=names)
        records = np.zeros(len(table), dtype=[("Index", "i4"), ("Offset in days", "f8"), ("Date", "f8")])
        records["Index"] = np.arange(len(table))
        records["Offset in days"] = table.offset_days
        records["Date"] = table.packed_dates
        handle.create_dataset("/General/MasterTimeTable", data=records)
        if wells:
            handle.create_dataset("/TimeSeries/WELLS/Origins", data=np.array([b"P1", b"I-1"], dtype="S8"))
            handle.create_dataset("/TimeSeries/WELLS/Variables", data=np.array([b"BHP", b"X1", b"X2"], dtype="S8"))
            # stored as (step, variable, well)
            cube = np.transpose(make_well_cube(2, 3, 50), (2, 1, 0))
            handle.create_dataset("/TimeSeries/WELLS/Data", data=np.ascontiguousarray(cube))
    return path


@pytest.fixture
def sr3_factory(tmp_path: Path):
    def _factory(name: str = "case.sr3", **kwargs) -> Path:
        return write_sr3(tmp_path / name, **kwargs)

    return _factory
