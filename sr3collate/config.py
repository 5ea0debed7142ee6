"""Loading and overriding extraction configuration."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError

from .errors import ConfigurationError
from .schema import ExtractConfig

logger = logging.getLogger(__name__)


def parse_override_value(raw: str) -> Any:
    """Parse a CLI override value into a Python object."""

    text = raw.strip()
    lower = text.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"none", "null"}:
        return None
    try:
        return int(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            pass
    if (text.startswith('"') and text.endswith('"')) or (text.startswith("'") and text.endswith("'")):
        return text[1:-1]
    return text


def apply_overrides_dict(payload: Dict[str, Any], overrides: Sequence[str]) -> Dict[str, Any]:
    """Apply dotted-path ``PATH=VALUE`` overrides to a configuration dictionary."""

    if not overrides:
        return payload
    for item in overrides:
        key, sep, value_str = item.partition("=")
        if not sep:
            raise ConfigurationError(f"Invalid override '{item}'; expected path=value")
        parts = [segment for segment in key.strip().split(".") if segment]
        if not parts:
            raise ConfigurationError(f"Invalid override '{item}'; empty path")
        target: Any = payload
        for segment in parts[:-1]:
            if not isinstance(target, dict):
                raise ConfigurationError(
                    f"Cannot traverse into non-mapping for override '{item}' at '{segment}'"
                )
            if segment not in target or target[segment] is None:
                target[segment] = {}
            target = target[segment]
        if not isinstance(target, dict):
            raise ConfigurationError(f"Cannot set override '{item}'; target is not a mapping")
        target[parts[-1]] = parse_override_value(value_str)
    return payload


def build_config(data: Dict[str, Any], overrides: Optional[Sequence[str]] = None) -> ExtractConfig:
    """Validate a configuration mapping, applying ``overrides`` first."""

    if overrides:
        data = apply_overrides_dict(data, overrides)
    try:
        return ExtractConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def load_config(path: Path, overrides: Optional[Sequence[str]] = None) -> ExtractConfig:
    """Load a YAML configuration file into an :class:`ExtractConfig` instance.

    A relative ``input`` is resolved against the directory of the YAML file.
    """

    from ruamel.yaml import YAML

    yaml = YAML(typ="safe")
    source_path = Path(path).resolve()
    if not source_path.exists():
        raise ConfigurationError(f"Config not found: {source_path}")
    with source_path.open("r", encoding="utf-8") as fh:
        data = yaml.load(fh)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {source_path}")
    cfg = build_config(data, overrides)
    if not cfg.input.is_absolute():
        cfg.input = source_path.parent / cfg.input
    logger.debug("Loaded configuration from %s", source_path)
    return cfg


__all__ = ["parse_override_value", "apply_overrides_dict", "build_config", "load_config"]
