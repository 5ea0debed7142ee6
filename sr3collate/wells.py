"""Per-well time series from the ``[well, variable, step]`` well cube."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from . import constants
from .diagnostics import SERIES_LENGTH_MISMATCH, WELL_NAMES_MISSING, DiagnosticLog
from .errors import ExtractionError
from .naming import (
    CollisionPolicy,
    ComponentResolver,
    IdentifierRegistry,
    decode_label,
    sanitize,
    unique_identifiers,
)
from .timeaxis import SeriesAlignment
from .warnings import MetadataWarning, TimeAxisWarning

logger = logging.getLogger(__name__)


@dataclass
class WellSeries:
    data: Dict[str, Dict[str, np.ndarray]]
    well_names: List[str]
    well_ids: List[str]
    variable_names: List[str]
    variable_ids: List[str]
    alignment: SeriesAlignment
    n_steps_full: int
    renamed: Dict[str, str] = field(default_factory=dict)

    @property
    def n_steps_used(self) -> int:
        return int(self.alignment.indices.size)


def _resolve_well_names(
    well_names: Optional[Sequence[Any]],
    n_wells: int,
    diagnostics: DiagnosticLog,
) -> List[str]:
    names = None if well_names is None else [decode_label(name) for name in well_names]
    if names is not None and len(names) == n_wells:
        return names
    if names is None:
        reason = "well origins unavailable"
    else:
        reason = f"{len(names)} well origins for {n_wells} wells"
    diagnostics.warn(
        WELL_NAMES_MISSING,
        f"{reason}; using {constants.SYNTHETIC_WELL_PREFIX}1..{constants.SYNTHETIC_WELL_PREFIX}{n_wells}",
        MetadataWarning,
        n_wells=n_wells,
    )
    return [f"{constants.SYNTHETIC_WELL_PREFIX}{idx}" for idx in range(1, n_wells + 1)]


def _resolve_variable_names(
    variable_names: Optional[Sequence[Any]],
    n_vars: int,
) -> List[str]:
    if variable_names is None:
        raise ExtractionError("Well variable names are unavailable")
    names = [decode_label(name) for name in variable_names]
    if len(names) != n_vars:
        raise ExtractionError(
            f"{len(names)} well variable names do not match the {n_vars} variables in the well data"
        )
    return names


def rename_with_components(
    identifiers: Sequence[str],
    resolver: ComponentResolver,
    *,
    policy: CollisionPolicy = "suffix",
    diagnostics: Optional[DiagnosticLog] = None,
    labels: Optional[Sequence[str]] = None,
) -> List[str]:
    """Replace trailing component indices (``X2`` -> ``X_CO2``) and make the result unique.

    ``identifiers`` must be plain sanitised names, not yet disambiguated.
    Names left unchanged by the rename claim their identifier first, in
    order; renamed ones follow, so a rename never displaces an original.
    """

    labels = list(identifiers) if labels is None else list(labels)
    renamed = [resolver.rename_identifier(identifier) for identifier in identifiers]
    registry = IdentifierRegistry(policy, diagnostics=diagnostics, kind="well variable")
    result: List[Optional[str]] = [None] * len(renamed)
    for first_pass in (True, False):
        for pos, (old, new) in enumerate(zip(identifiers, renamed)):
            if (old == new) is first_pass:
                result[pos] = registry.claim(new, labels[pos])
    return [identifier for identifier in result if identifier is not None]


def extract_well_series(
    cube: np.ndarray,
    well_names: Optional[Sequence[Any]],
    variable_names: Optional[Sequence[Any]],
    alignment: SeriesAlignment,
    resolver: Optional[ComponentResolver] = None,
    *,
    policy: CollisionPolicy = "suffix",
    diagnostics: Optional[DiagnosticLog] = None,
) -> WellSeries:
    """Slice ``cube[well, variable, step]`` into ``{well_id: {variable_id: series}}``."""

    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    resolver = resolver if resolver is not None else ComponentResolver(None)
    cube = np.asarray(cube, dtype=float)
    if cube.ndim != 3:
        raise ExtractionError(f"Well data must be three-dimensional, got shape {cube.shape}")
    n_wells, n_vars, n_steps_full = cube.shape

    if n_steps_full != alignment.n_steps:
        diagnostics.warn(
            SERIES_LENGTH_MISMATCH,
            f"Time length mismatch: MasterTimeTable={alignment.n_steps}, WellData={n_steps_full}",
            TimeAxisWarning,
            master_steps=alignment.n_steps,
            well_steps=n_steps_full,
        )
        alignment = alignment.limit(min(alignment.n_steps, n_steps_full))

    names = _resolve_well_names(well_names, n_wells, diagnostics)
    well_ids = unique_identifiers(names, policy, diagnostics=diagnostics, kind="well")
    var_names = _resolve_variable_names(variable_names, n_vars)
    plain_ids = [sanitize(name) for name in var_names]
    var_ids = rename_with_components(
        plain_ids, resolver, policy=policy, diagnostics=diagnostics, labels=var_names
    )

    indices = alignment.indices
    data: Dict[str, Dict[str, np.ndarray]] = {}
    for w, well_id in enumerate(well_ids):
        data[well_id] = {var_id: cube[w, v, indices].copy() for v, var_id in enumerate(var_ids)}

    logger.info(
        "Extracted %d wells x %d variables, %d of %d steps (stride %d)",
        n_wells,
        n_vars,
        indices.size,
        n_steps_full,
        alignment.stride,
    )
    return WellSeries(
        data=data,
        well_names=names,
        well_ids=well_ids,
        variable_names=var_names,
        variable_ids=var_ids,
        alignment=alignment,
        n_steps_full=n_steps_full,
        renamed={
            name: var_id
            for name, plain, var_id in zip(var_names, plain_ids, var_ids)
            if resolver.rename_identifier(plain) != plain
        },
    )


__all__ = ["WellSeries", "extract_well_series", "rename_with_components"]
