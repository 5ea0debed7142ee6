"""Collate SR3 simulation archives into dense, analysis-ready tables."""
__version__ = "0.1.0"

from . import constants
from .errors import ArchiveReadError, ConfigurationError, ExtractionError, Sr3CollateError
from .extract import SpatialResult, WellResult, extract_spatial, extract_wells
from .naming import ComponentResolver, sanitize

__all__ = [
    "__version__",
    "constants",
    "Sr3CollateError",
    "ConfigurationError",
    "ExtractionError",
    "ArchiveReadError",
    "SpatialResult",
    "WellResult",
    "extract_spatial",
    "extract_wells",
    "ComponentResolver",
    "sanitize",
]
