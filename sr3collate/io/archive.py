"""Archive reader interface and the in-memory implementation.

The collation engine only talks to an :class:`ArchiveReader`.  Path
iteration order of the underlying store is unspecified; everything that
depends on order is derived from sorted or first-seen rules downstream.
Optional metadata accessors return ``None`` when the dataset is absent
instead of raising.
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from ..naming import decode_label
from ..timeaxis import MasterTimeTable


@runtime_checkable
class ArchiveReader(Protocol):
    def list_paths(self) -> List[str]:
        ...

    def get(self, path: str) -> Optional[np.ndarray]:
        ...

    def get_component_table(self) -> Optional[List[str]]:
        ...

    def get_master_time_table(self) -> Optional[MasterTimeTable]:
        ...

    def get_well_origins(self) -> Optional[List[str]]:
        ...

    def get_well_variable_names(self) -> Optional[List[str]]:
        ...

    def get_well_cube(self) -> Optional[np.ndarray]:
        ...


def _labels(values: Optional[Sequence[Any]]) -> Optional[List[str]]:
    if values is None:
        return None
    return [decode_label(value) for value in np.asarray(values).reshape(-1)]


class MappingArchive:
    """Archive backed by a plain ``path -> array`` mapping.

    The well cube is given in ``[well, variable, step]`` order.
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        *,
        component_names: Optional[Sequence[Any]] = None,
        time_table: Optional[MasterTimeTable] = None,
        well_origins: Optional[Sequence[Any]] = None,
        well_variables: Optional[Sequence[Any]] = None,
        well_cube: Optional[Any] = None,
    ) -> None:
        self._data = dict(data)
        self._component_names = _labels(component_names)
        self._time_table = time_table
        self._well_origins = _labels(well_origins)
        self._well_variables = _labels(well_variables)
        self._well_cube = None if well_cube is None else np.asarray(well_cube, dtype=float)

    def list_paths(self) -> List[str]:
        return sorted(self._data)

    def get(self, path: str) -> Optional[np.ndarray]:
        value = self._data.get(path)
        if value is None:
            return None
        return np.asarray(value)

    def get_component_table(self) -> Optional[List[str]]:
        return None if self._component_names is None else list(self._component_names)

    def get_master_time_table(self) -> Optional[MasterTimeTable]:
        return self._time_table

    def get_well_origins(self) -> Optional[List[str]]:
        return None if self._well_origins is None else list(self._well_origins)

    def get_well_variable_names(self) -> Optional[List[str]]:
        return None if self._well_variables is None else list(self._well_variables)

    def get_well_cube(self) -> Optional[np.ndarray]:
        return self._well_cube


__all__ = ["ArchiveReader", "MappingArchive"]
