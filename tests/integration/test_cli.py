from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from sr3collate.cli import main

pytest.importorskip("h5py")
pytest.importorskip("pyarrow")


def _metadata(outdir: Path) -> dict:
    return json.loads((outdir / "metadata.json").read_text(encoding="utf-8"))


def test_cli_writes_csv_tables(sr3_factory, tmp_path: Path) -> None:
    source = sr3_factory()
    outdir = tmp_path / "out"
    code = main(["--input", str(source), "--outdir", str(outdir), "--format", "csv", "--stride", "10", "--quiet"])
    assert code == 0

    pres = pd.read_csv(outdir / "spatial" / "PRES.csv")
    assert list(pres.columns) == ["cell", "000000", "000001", "000002"]
    assert pres["cell"].tolist() == [1, 2, 3]
    assert np.isnan(pres.loc[2, "000002"])
    for name in ("X_H2O", "X_CO2", "_timesteps", "_variables", "_paths"):
        assert (outdir / "spatial" / f"{name}.csv").exists()

    well = pd.read_csv(outdir / "wells" / "I_1.csv")
    assert list(well.columns) == ["day", "date", "BHP", "X_H2O", "X_CO2"]
    assert well["day"].tolist() == [1.0, 11.0, 21.0, 31.0, 41.0]
    assert well["BHP"].tolist() == [1000.0, 1010.0, 1020.0, 1030.0, 1040.0]

    meta = _metadata(outdir)
    assert meta["spatial"]["var_fields"] == ["PRES", "X_H2O", "X_CO2"]
    assert meta["wells"]["stride"] == 10
    assert meta["wells"]["n_steps_used"] == 5
    assert meta["provenance"]["input"]["sha256"]
    assert meta["config"]["io"]["format"] == "csv"
    assert len(meta["outputs"]) == 8


def test_cli_writes_parquet_by_default(sr3_factory, tmp_path: Path) -> None:
    outdir = tmp_path / "out"
    assert main(["--input", str(sr3_factory()), "--outdir", str(outdir), "--no-wells"]) == 0
    steps = pd.read_parquet(outdir / "spatial" / "_timesteps.parquet")
    assert steps["step_token"].tolist() == ["000000", "000001", "000002"]
    assert steps["day"].tolist() == [1.0, 2.0, 3.0]
    assert steps["date"].iloc[0] == pd.Timestamp("2024-01-02")
    variables = pd.read_parquet(outdir / "spatial" / "_variables.parquet")
    assert variables["original"].tolist() == ["PRES", "X1", "X2"]
    assert not (outdir / "wells").exists()


def test_cli_reads_yaml_config(sr3_factory, tmp_path: Path) -> None:
    sr3_factory("case.sr3")
    config_path = tmp_path / "extract.yml"
    config_path.write_text(
        "input: case.sr3\nspatial:\n  enabled: false\nwells:\n  stride: 25\nio:\n  format: csv\n",
        encoding="utf-8",
    )
    outdir = tmp_path / "from_yaml"
    assert main(["--config", str(config_path), "--outdir", str(outdir)]) == 0
    assert not (outdir / "spatial").exists()
    well = pd.read_csv(outdir / "wells" / "P1.csv")
    assert well["BHP"].tolist() == [0.0, 25.0]


def test_cli_override_flag(sr3_factory, tmp_path: Path) -> None:
    outdir = tmp_path / "out"
    code = main(
        [
            "--input",
            str(sr3_factory()),
            "--outdir",
            str(outdir),
            "--override",
            "spatial.enabled=false",
            "--override",
            "wells.stride=50",
        ]
    )
    assert code == 0
    assert _metadata(outdir)["wells"]["n_steps_used"] == 1


def test_cli_skips_missing_wells_when_spatial_enabled(sr3_factory, tmp_path: Path) -> None:
    source = sr3_factory(wells=False)
    outdir = tmp_path / "out"
    assert main(["--input", str(source), "--outdir", str(outdir), "--format", "csv"]) == 0
    meta = _metadata(outdir)
    assert "No well data" in meta["wells"]["skipped"]
    assert (outdir / "spatial" / "PRES.csv").exists()


def test_cli_missing_wells_is_fatal_without_spatial(sr3_factory, tmp_path: Path) -> None:
    source = sr3_factory(wells=False)
    assert main(["--input", str(source), "--outdir", str(tmp_path / "out"), "--no-spatial"]) == 1


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--config", "does-not-exist.yml"],
        ["--input", "case.sr3", "--no-spatial", "--no-wells"],
        ["--input", "case.sr3", "--stride", "0"],
    ],
)
def test_cli_configuration_errors(argv) -> None:
    assert main(argv) == 2


def test_cli_missing_input_file(tmp_path: Path) -> None:
    assert main(["--input", str(tmp_path / "absent.sr3"), "--outdir", str(tmp_path / "out")]) == 1
