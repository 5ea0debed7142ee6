"""Command line entry point: extract spatial and well tables from an SR3 file."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import build_config, load_config
from .diagnostics import DiagnosticLog
from .errors import ExtractionError, Sr3CollateError
from .extract import extract_spatial, extract_wells
from .io.sr3 import Sr3Archive
from .io import writer
from .provenance import gather_runtime_provenance
from .schema import ExtractConfig

logger = logging.getLogger(__name__)


def run_extraction(cfg: ExtractConfig) -> Dict[str, Any]:
    """Run the configured extraction and write tables plus ``metadata.json``.

    A missing spatial section is fatal when spatial output is requested.
    Missing well data only skips the well tables while spatial output is
    being written; otherwise it is fatal too.
    """

    outdir = Path(cfg.outdir)
    fmt = cfg.io.format
    summary: Dict[str, Any] = {
        "config": cfg.model_dump(mode="json"),
        "provenance": gather_runtime_provenance(input_path=cfg.input),
    }
    written: List[Path] = []
    with Sr3Archive(cfg.input) as archive:
        if cfg.spatial.enabled:
            spatial = extract_spatial(
                archive,
                section=cfg.spatial.section,
                policy=cfg.naming.collision,
                diagnostics=DiagnosticLog(emit_warnings=False),
            )
            written += writer.write_spatial_tables(spatial, outdir, fmt=fmt, compression=cfg.io.compression)
            summary["spatial"] = spatial.meta
        if cfg.wells.enabled:
            try:
                wells = extract_wells(
                    archive,
                    cfg.wells.stride,
                    policy=cfg.naming.collision,
                    diagnostics=DiagnosticLog(emit_warnings=False),
                )
            except ExtractionError as exc:
                if not cfg.spatial.enabled:
                    raise
                logger.warning("Skipping well tables: %s", exc)
                summary["wells"] = {"skipped": str(exc)}
            else:
                written += writer.write_well_tables(wells, outdir, fmt=fmt, compression=cfg.io.compression)
                summary["wells"] = wells.meta
    summary["outputs"] = [str(path) for path in written]
    writer.write_metadata(summary, outdir / "metadata.json")
    logger.info("Wrote %d tables to %s", len(written), outdir)
    return summary


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sr3collate",
        description="Collate SR3 spatial properties and well series into dense tables",
    )
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument("--input", type=Path, help="SR3 file (overrides the config input)")
    parser.add_argument("--outdir", type=Path, help="Output directory (overrides the config outdir)")
    parser.add_argument("--stride", type=int, help="Import every Nth well timestep")
    parser.add_argument("--no-spatial", action="store_true", help="Skip spatial property matrices")
    parser.add_argument("--no-wells", action="store_true", help="Skip well time series")
    parser.add_argument("--format", choices=["parquet", "csv"], help="Table output format")
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        metavar="PATH=VALUE",
        help="Apply configuration overrides using dotted paths; e.g. --override wells.stride=10",
    )
    parser.add_argument(
        "--quiet",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Suppress INFO logs",
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> ExtractConfig:
    overrides = list(args.override)
    if args.input is not None:
        overrides.append(f"input={args.input.resolve()}")
    if args.outdir is not None:
        overrides.append(f"outdir={args.outdir}")
    if args.stride is not None:
        overrides.append(f"wells.stride={args.stride}")
    if args.no_spatial:
        overrides.append("spatial.enabled=false")
    if args.no_wells:
        overrides.append("wells.enabled=false")
    if args.format is not None:
        overrides.append(f"io.format={args.format}")
    if args.quiet is not None:
        overrides.append(f"io.quiet={str(args.quiet).lower()}")
    if args.config is not None:
        return load_config(args.config, overrides)
    if args.input is None:
        raise Sr3CollateError("Either --config or --input is required")
    return build_config({}, overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        cfg = _resolve_config(args)
    except Sr3CollateError as exc:
        logger.error("%s", exc)
        return 2
    if cfg.io.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    try:
        run_extraction(cfg)
    except Sr3CollateError as exc:
        logger.error("%s", exc)
        logger.debug("Detailed traceback:", exc_info=exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - standard CLI entrypoint
    sys.exit(main())
