"""Extraction entry points: spatial matrices and well series from an archive."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from . import constants
from .assemble import assemble, fetch_entries
from .axis import TimestepAxis, index_steps
from .catalog import VariableCatalog
from .diagnostics import COMPONENT_TABLE_MISSING, DiagnosticLog
from .errors import ExtractionError
from .io.archive import ArchiveReader
from .naming import CollisionPolicy, ComponentResolver
from .paths import classify_paths
from .timeaxis import MasterTimeTable, align_series, align_steps
from .warnings import ComponentTableWarning
from .wells import extract_well_series

logger = logging.getLogger(__name__)


@dataclass
class SpatialResult:
    """Dense spatial matrices plus the axes and catalogs they are indexed by."""

    data: Dict[str, np.ndarray]
    timesteps: TimestepAxis
    catalog: VariableCatalog
    paths_table: pd.DataFrame
    rejected_paths: List[str]
    days: np.ndarray
    dates: pd.DatetimeIndex
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    @property
    def meta(self) -> Dict[str, Any]:
        return {
            "timesteps_str": list(self.timesteps.tokens),
            "timesteps_num": self.timesteps.values.tolist(),
            "var_original": list(self.catalog.originals),
            "var_fields": list(self.catalog.identifiers),
            "n_paths": int(len(self.paths_table)),
            "n_rejected": len(self.rejected_paths),
            "shapes": {key: list(value.shape) for key, value in self.data.items()},
            "diagnostics": self.diagnostics.to_records(),
        }


@dataclass
class WellResult:
    """Per-well series with their sampled day and date axes."""

    data: Dict[str, Dict[str, np.ndarray]]
    days: np.ndarray
    dates: pd.DatetimeIndex
    meta: Dict[str, Any]
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)


def load_component_resolver(archive: ArchiveReader, diagnostics: DiagnosticLog) -> ComponentResolver:
    """Build the component resolver, degrading to no renaming when the table is unreadable."""

    try:
        names = archive.get_component_table()
    except (KeyError, OSError, ValueError, TypeError) as exc:
        logger.debug("Component table lookup raised: %s", exc)
        names = None
    if names is None:
        diagnostics.warn(
            COMPONENT_TABLE_MISSING,
            f"Could not read {constants.COMPONENT_TABLE_PATH}; variables keep their sanitised names",
            ComponentTableWarning,
        )
    return ComponentResolver.build(names)


def _master_time_table(archive: ArchiveReader) -> Optional[MasterTimeTable]:
    try:
        return archive.get_master_time_table()
    except (KeyError, OSError, ValueError, TypeError) as exc:
        logger.debug("Master time table lookup raised: %s", exc)
        return None


def extract_spatial(
    archive: ArchiveReader,
    *,
    section: str = constants.SPATIAL_SECTION,
    policy: CollisionPolicy = "suffix",
    diagnostics: Optional[DiagnosticLog] = None,
) -> SpatialResult:
    """Gather every ``/<section>/<step>/<var>`` dataset into ``[rows x steps]`` matrices.

    Raises
    ------
    ExtractionError
        When the archive holds no path in the spatial section.
    """

    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    classification = classify_paths(archive.list_paths(), spatial_section=section)
    if not classification.spatial:
        raise ExtractionError(f"No /{section}/ paths found in the archive")

    resolver = load_component_resolver(archive, diagnostics)
    axis = index_steps(tok.step_token for tok in classification.spatial)
    catalog = VariableCatalog.build(
        (tok.variable_token for tok in classification.spatial),
        resolver,
        policy=policy,
        diagnostics=diagnostics,
    )
    entries = fetch_entries(classification.spatial, archive)
    data = assemble(entries, axis, catalog, diagnostics)
    alignment = align_steps(axis, _master_time_table(archive), diagnostics)

    logger.info(
        "Assembled %d spatial variables over %d timesteps from %d paths (%d rejected)",
        len(catalog),
        len(axis),
        len(classification.spatial),
        len(classification.rejected),
    )
    return SpatialResult(
        data=data,
        timesteps=axis,
        catalog=catalog,
        paths_table=classification.paths_table(),
        rejected_paths=list(classification.rejected),
        days=alignment.days,
        dates=alignment.dates,
        diagnostics=diagnostics,
    )


def extract_wells(
    archive: ArchiveReader,
    stride: int = 1,
    *,
    policy: CollisionPolicy = "suffix",
    diagnostics: Optional[DiagnosticLog] = None,
) -> WellResult:
    """Extract well series sampled every ``stride`` steps.

    Raises
    ------
    ExtractionError
        When the archive holds no well data or no well variable names.
    """

    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    cube = archive.get_well_cube()
    if cube is None:
        raise ExtractionError(f"No well data found at {constants.WELL_DATA_PATH}")
    cube = np.asarray(cube, dtype=float)
    if cube.ndim != 3:
        raise ExtractionError(f"Well data must be three-dimensional, got shape {cube.shape}")

    resolver = load_component_resolver(archive, diagnostics)
    alignment = align_series(_master_time_table(archive), stride, diagnostics, n_steps_hint=cube.shape[2])
    series = extract_well_series(
        cube,
        archive.get_well_origins(),
        archive.get_well_variable_names(),
        alignment,
        resolver,
        policy=policy,
        diagnostics=diagnostics,
    )
    used = series.alignment
    meta = {
        "var_original": list(series.variable_names),
        "var_fields": list(series.variable_ids),
        "renamed": dict(series.renamed),
        "stride": int(used.stride),
        "n_wells": len(series.well_ids),
        "n_vars": len(series.variable_ids),
        "n_steps_full": int(series.n_steps_full),
        "n_steps_used": series.n_steps_used,
        "well_names": list(series.well_names),
        "well_fields": list(series.well_ids),
        "diagnostics": diagnostics.to_records(),
    }
    return WellResult(data=series.data, days=used.days, dates=used.dates, meta=meta, diagnostics=diagnostics)


__all__ = [
    "SpatialResult",
    "WellResult",
    "extract_spatial",
    "extract_wells",
    "load_component_resolver",
]
