"""Archive layout constants and identifier conventions.

The dataset paths below follow the CMG SR3 layout.  Group names are kept
without leading slashes; :mod:`sr3collate.paths` splits on
:data:`PATH_SEPARATOR` so that ``/SpatialProperties/000010/PRES`` yields
``["", "SpatialProperties", "000010", "PRES"]``.
"""
from __future__ import annotations

PATH_SEPARATOR: str = "/"

# Section markers (first segment after the root)
SPATIAL_SECTION: str = "SpatialProperties"
TIMESERIES_SECTION: str = "TimeSeries"
WELLS_GROUP: str = "WELLS"

# Metadata datasets
COMPONENT_TABLE_PATH: str = "/General/ComponentTable"
COMPONENT_NAME_FIELD: str = "Name"
MASTER_TIME_TABLE_PATH: str = "/General/MasterTimeTable"
TIME_OFFSET_FIELD: str = "Offset in days"
TIME_DATE_FIELD: str = "Date"
WELL_ORIGINS_PATH: str = "/TimeSeries/WELLS/Origins"
WELL_VARIABLES_PATH: str = "/TimeSeries/WELLS/Variables"
WELL_DATA_PATH: str = "/TimeSeries/WELLS/Data"

# Identifier grammar
PLACEHOLDER_IDENTIFIER: str = "VAR"
DIGIT_PREFIX: str = "V_"
SYNTHETIC_WELL_PREFIX: str = "WELL"

# Step count above which a full-resolution well extraction is reported as heavy
STRIDE_ADVICE_THRESHOLD: int = 1000

__all__ = [
    "PATH_SEPARATOR",
    "SPATIAL_SECTION",
    "TIMESERIES_SECTION",
    "WELLS_GROUP",
    "COMPONENT_TABLE_PATH",
    "COMPONENT_NAME_FIELD",
    "MASTER_TIME_TABLE_PATH",
    "TIME_OFFSET_FIELD",
    "TIME_DATE_FIELD",
    "WELL_ORIGINS_PATH",
    "WELL_VARIABLES_PATH",
    "WELL_DATA_PATH",
    "PLACEHOLDER_IDENTIFIER",
    "DIGIT_PREFIX",
    "SYNTHETIC_WELL_PREFIX",
    "STRIDE_ADVICE_THRESHOLD",
]
