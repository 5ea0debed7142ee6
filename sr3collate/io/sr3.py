"""HDF5-backed reader for CMG ``.sr3`` restart archives."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

import numpy as np

from .. import constants
from ..errors import ArchiveReadError
from ..naming import decode_label
from ..timeaxis import MasterTimeTable

logger = logging.getLogger(__name__)


class Sr3Archive:
    """Read datasets from an SR3 file through :mod:`h5py`.

    Use as a context manager; the file stays open until :meth:`close`.

    Example::

        with Sr3Archive("CASE1.sr3") as archive:
            result = extract_spatial(archive)
    """

    def __init__(self, path: str | Path) -> None:
        try:
            import h5py
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise ArchiveReadError("h5py is required to read SR3 archives") from exc

        self.path = Path(path)
        if not self.path.exists():
            raise ArchiveReadError(f"SR3 file does not exist: {self.path}")
        try:
            self._handle = h5py.File(self.path, "r")
        except OSError as exc:
            raise ArchiveReadError(f"Failed to open SR3 file {self.path}: {exc}") from exc
        self._h5py = h5py
        self._paths: Optional[List[str]] = None

    def __enter__(self) -> "Sr3Archive":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _dataset(self, path: str) -> Optional[np.ndarray]:
        if self._handle is None:
            raise ArchiveReadError(f"SR3 file {self.path} is closed")
        try:
            node = self._handle[path]
        except KeyError:
            return None
        if not isinstance(node, self._h5py.Dataset):
            return None
        try:
            return node[()]
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Failed to read dataset %s from %s: %s", path, self.path, exc)
            return None

    def list_paths(self) -> List[str]:
        if self._paths is None:
            found: List[str] = []

            def _visit(name: str, node: Any) -> None:
                if isinstance(node, self._h5py.Dataset):
                    found.append(constants.PATH_SEPARATOR + name)

            self._handle.visititems(_visit)
            self._paths = sorted(found)
        return list(self._paths)

    def get(self, path: str) -> Optional[np.ndarray]:
        value = self._dataset(path)
        if value is None:
            return None
        return np.asarray(value)

    def _labels(self, path: str, field_name: Optional[str] = None) -> Optional[List[str]]:
        raw = self._dataset(path)
        if raw is None:
            return None
        raw = np.asarray(raw)
        if raw.dtype.names:
            if field_name is None or field_name not in raw.dtype.names:
                logger.warning("%s has no %r field", path, field_name)
                return None
            raw = raw[field_name]
        return [decode_label(value) for value in raw.reshape(-1)]

    def get_component_table(self) -> Optional[List[str]]:
        return self._labels(constants.COMPONENT_TABLE_PATH, constants.COMPONENT_NAME_FIELD)

    def get_master_time_table(self) -> Optional[MasterTimeTable]:
        raw = self._dataset(constants.MASTER_TIME_TABLE_PATH)
        if raw is None:
            return None
        try:
            return MasterTimeTable.from_records(np.asarray(raw))
        except (TypeError, ValueError) as exc:
            logger.warning("Unreadable master time table in %s: %s", self.path, exc)
            return None

    def get_well_origins(self) -> Optional[List[str]]:
        return self._labels(constants.WELL_ORIGINS_PATH)

    def get_well_variable_names(self) -> Optional[List[str]]:
        return self._labels(constants.WELL_VARIABLES_PATH)

    def get_well_cube(self) -> Optional[np.ndarray]:
        """Well data as ``[well, variable, step]``.

        The file stores ``(step, variable, well)`` in C order.
        """

        raw = self._dataset(constants.WELL_DATA_PATH)
        if raw is None:
            return None
        cube = np.asarray(raw, dtype=float)
        if cube.ndim != 3:
            logger.warning("%s has %d dimensions, expected 3", constants.WELL_DATA_PATH, cube.ndim)
            return None
        return np.transpose(cube, (2, 1, 0))


__all__ = ["Sr3Archive"]
