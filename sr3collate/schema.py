"""Configuration schema for SR3 extraction runs.

The Pydantic models mirror the YAML layout accepted by
:func:`sr3collate.config.load_config`::

    input: CASE1.sr3
    outdir: out/case1
    spatial:
      enabled: true
    wells:
      enabled: true
      stride: 100
    naming:
      collision: suffix
    io:
      format: parquet
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from . import constants
from .errors import ConfigurationError


class SpatialConfig(BaseModel):
    """Spatial property matrices (``/SpatialProperties/<step>/<var>``)."""

    enabled: bool = True
    section: str = Field(
        constants.SPATIAL_SECTION,
        description="First path segment that marks spatial datasets",
    )


class WellConfig(BaseModel):
    """Well time series (``/TimeSeries/WELLS``)."""

    enabled: bool = True
    stride: int = Field(1, ge=1, description="Import every Nth timestep")


class NamingConfig(BaseModel):
    collision: Literal["suffix", "error"] = Field(
        "suffix",
        description="What to do when two labels sanitise to the same identifier",
    )


class OutputConfig(BaseModel):
    format: Literal["parquet", "csv"] = "parquet"
    compression: str = Field("snappy", description="Parquet compression codec")
    quiet: bool = Field(False, description="Suppress INFO logging")


class ExtractConfig(BaseModel):
    """Top-level configuration object."""

    input: Path
    outdir: Path = Path("out")
    spatial: SpatialConfig = Field(default_factory=SpatialConfig)
    wells: WellConfig = Field(default_factory=WellConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    io: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def _require_some_output(self) -> "ExtractConfig":
        if not self.spatial.enabled and not self.wells.enabled:
            raise ConfigurationError("At least one of spatial.enabled or wells.enabled must be true")
        return self


__all__ = ["SpatialConfig", "WellConfig", "NamingConfig", "OutputConfig", "ExtractConfig"]
