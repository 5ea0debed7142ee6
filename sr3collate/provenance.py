"""Runtime provenance for extraction runs.

Collected into the metadata JSON next to the extracted tables.  Collectors
must not raise: a field that cannot be determined is recorded as ``None``.
"""

from __future__ import annotations

import datetime as dt
import hashlib
import platform
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Sequence

from . import __version__

_DEFAULT_PACKAGE_DISTS: tuple[str, ...] = (
    "numpy",
    "pandas",
    "pyarrow",
    "h5py",
    "pydantic",
    "ruamel.yaml",
)


def _utc_timestamp_iso() -> str:
    stamp = dt.datetime.now(dt.timezone.utc).replace(microsecond=0).isoformat()
    return stamp.replace("+00:00", "Z")


def _safe_package_version(dist_name: str) -> str | None:
    try:
        return metadata.version(dist_name)
    except metadata.PackageNotFoundError:
        return None


def _safe_sha256(
    path: Path,
    *,
    max_bytes: int | None = None,
    chunk_bytes: int = 1024 * 1024,
) -> str | None:
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return None
    if max_bytes is not None and size_bytes > max_bytes:
        return None
    hasher = hashlib.sha256()
    try:
        with path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(chunk_bytes), b""):
                hasher.update(chunk)
    except OSError:
        return None
    return hasher.hexdigest()


def describe_input(path: str | Path, *, max_bytes: int = 2 * 1024**3) -> dict[str, Any]:
    """Path, size and SHA-256 of the archive that was read."""

    resolved = Path(path).expanduser()
    try:
        resolved = resolved.resolve()
    except OSError:
        pass
    exists = resolved.exists()
    size_bytes = None
    if exists:
        try:
            size_bytes = resolved.stat().st_size
        except OSError:
            size_bytes = None
    return {
        "path": str(resolved),
        "exists": exists,
        "size_bytes": size_bytes,
        "sha256": _safe_sha256(resolved, max_bytes=max_bytes) if exists else None,
    }


def gather_runtime_provenance(
    *,
    input_path: str | Path | None = None,
    package_dists: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Return a JSON-serialisable runtime provenance snapshot."""

    packages: dict[str, str | None] = {}
    for dist in package_dists or _DEFAULT_PACKAGE_DISTS:
        packages[dist] = _safe_package_version(dist)

    return {
        "timestamp_utc": _utc_timestamp_iso(),
        "sr3collate": __version__,
        "argv": list(sys.argv),
        "python": {
            "version": platform.python_version(),
            "executable": sys.executable,
        },
        "platform": {
            "system": platform.system(),
            "machine": platform.machine(),
        },
        "packages": packages,
        "input": describe_input(input_path) if input_path is not None else None,
    }


__all__ = ["describe_input", "gather_runtime_provenance"]
