"""Classification of archive dataset paths.

Spatial datasets live at ``/SpatialProperties/<step>/<variable>``; anything
shallower (``/SpatialProperties/000000`` group markers, for example) is
rejected without raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

import pandas as pd

from . import constants


class Section(str, Enum):
    SPATIAL = "spatial"
    WELL_SERIES = "well_series"
    OTHER = "other"


@dataclass(frozen=True)
class PathToken:
    path: str
    section: Section
    variable_token: str
    step_token: Optional[str] = None


@dataclass
class Classification:
    """Result of classifying every archive path once."""

    spatial: List[PathToken] = field(default_factory=list)
    well_series: List[PathToken] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)

    def paths_table(self) -> pd.DataFrame:
        """One row per classified spatial path."""

        return pd.DataFrame(
            {
                "path": [tok.path for tok in self.spatial],
                "step_token": [tok.step_token for tok in self.spatial],
                "variable_token": [tok.variable_token for tok in self.spatial],
            },
            columns=["path", "step_token", "variable_token"],
        )


def classify(path: str, *, spatial_section: str = constants.SPATIAL_SECTION) -> Optional[PathToken]:
    """Parse ``path`` into a :class:`PathToken` or return ``None`` when it does not qualify."""

    parts = path.split(constants.PATH_SEPARATOR)
    if len(parts) < 2:
        return None
    section = parts[1]
    if section == spatial_section:
        if len(parts) < 4:
            return None
        step_token = parts[2].strip()
        variable_token = parts[3].strip()
        if not step_token or not variable_token:
            return None
        return PathToken(path=path, section=Section.SPATIAL, variable_token=variable_token, step_token=step_token)
    if section == constants.TIMESERIES_SECTION and len(parts) >= 4 and parts[2] == constants.WELLS_GROUP:
        variable_token = parts[-1].strip()
        if not variable_token:
            return None
        return PathToken(path=path, section=Section.WELL_SERIES, variable_token=variable_token)
    return None


def classify_paths(
    paths: Iterable[str],
    *,
    spatial_section: str = constants.SPATIAL_SECTION,
) -> Classification:
    """Classify ``paths`` in the order given, keeping rejected paths for accounting."""

    result = Classification()
    for path in paths:
        token = classify(path, spatial_section=spatial_section)
        if token is None:
            result.rejected.append(path)
        elif token.section is Section.SPATIAL:
            result.spatial.append(token)
        else:
            result.well_series.append(token)
    return result


__all__ = ["Section", "PathToken", "Classification", "classify", "classify_paths"]
