from __future__ import annotations

from pathlib import Path

import pytest

from sr3collate.config import apply_overrides_dict, build_config, load_config, parse_override_value
from sr3collate.errors import ConfigurationError


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("False", False),
        ("null", None),
        ("10", 10),
        ("1.5", 1.5),
        ("'abc'", "abc"),
        ("csv", "csv"),
    ],
)
def test_parse_override_value(raw: str, expected) -> None:
    assert parse_override_value(raw) == expected


def test_apply_overrides_creates_nested_mappings() -> None:
    payload = apply_overrides_dict({}, ["wells.stride=5", "io.format=csv"])
    assert payload == {"wells": {"stride": 5}, "io": {"format": "csv"}}


@pytest.mark.parametrize("override", ["wells.stride", "=3"])
def test_apply_overrides_rejects_malformed(override: str) -> None:
    with pytest.raises(ConfigurationError):
        apply_overrides_dict({}, [override])


def test_apply_overrides_cannot_traverse_scalars() -> None:
    with pytest.raises(ConfigurationError, match="non-mapping"):
        apply_overrides_dict({"wells": 3}, ["wells.stride.value=1"])


def test_build_config_defaults() -> None:
    cfg = build_config({"input": "case.sr3"})
    assert cfg.spatial.enabled and cfg.wells.enabled
    assert cfg.wells.stride == 1
    assert cfg.naming.collision == "suffix"
    assert cfg.io.format == "parquet"
    assert cfg.outdir == Path("out")


def test_build_config_applies_overrides() -> None:
    cfg = build_config({"input": "case.sr3"}, ["wells.stride=10", "io.format=csv", "naming.collision=error"])
    assert cfg.wells.stride == 10
    assert cfg.io.format == "csv"
    assert cfg.naming.collision == "error"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"input": "case.sr3", "wells": {"stride": 0}},
        {"input": "case.sr3", "io": {"format": "xlsx"}},
        {"input": "case.sr3", "naming": {"collision": "ignore"}},
    ],
)
def test_build_config_rejects_invalid(payload) -> None:
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        build_config(payload)


def test_build_config_requires_an_output() -> None:
    with pytest.raises(ConfigurationError, match="At least one"):
        build_config({"input": "case.sr3"}, ["spatial.enabled=false", "wells.enabled=false"])


def test_load_config_resolves_input_next_to_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "extract.yml"
    config_path.write_text("input: case.sr3\nwells:\n  stride: 5\n", encoding="utf-8")
    cfg = load_config(config_path, overrides=["io.format=csv"])
    assert cfg.input == config_path.resolve().parent / "case.sr3"
    assert cfg.wells.stride == 5
    assert cfg.io.format == "csv"


def test_load_config_keeps_absolute_input(tmp_path: Path) -> None:
    target = tmp_path / "data" / "case.sr3"
    config_path = tmp_path / "extract.yml"
    config_path.write_text(f"input: {target}\n", encoding="utf-8")
    assert load_config(config_path).input == target


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Config not found"):
        load_config(tmp_path / "absent.yml")


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    config_path = tmp_path / "list.yml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must be a mapping"):
        load_config(config_path)
