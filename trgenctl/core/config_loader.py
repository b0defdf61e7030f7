"""Config loading and validation for YAML-based trgenctl settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from trgenctl.core.errors import ConfigLoadError, ConfigValidationError
from trgenctl.core.model import BitOrder, DeviceConfig

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedConfig:
    config: DeviceConfig
    sources: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("trgenctl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def user_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "trgenctl/config.yaml"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: Path | Traversable) -> None:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def build_config(doc: dict[str, Any]) -> DeviceConfig:
    defaults = DeviceConfig()
    return DeviceConfig(
        host=str(doc.get("host", defaults.host)),
        port=int(doc.get("port", defaults.port)),
        timeout_s=float(doc.get("timeout_s", defaults.timeout_s)),
        pulse_width_us=int(doc.get("pulse_width_us", defaults.pulse_width_us)),
        bit_order=BitOrder(doc.get("bit_order", defaults.bit_order.value)),
    )


def load_config(path: Path | None = None) -> LoadedConfig:
    """Merge packaged defaults with the user config file.

    Args:
        path: Explicit config file. Must exist when given; otherwise the XDG
            location is used if present.
    """
    packaged = resources.files("trgenctl.defaults").joinpath("config.yaml")
    doc = _read_yaml(packaged)
    _validate(doc, packaged)
    sources = [str(packaged)]

    user_path = path or user_config_path()
    if path is not None and not path.is_file():
        raise ConfigLoadError(f"Config file {path} does not exist")
    if user_path.is_file():
        user_doc = _read_yaml(user_path)
        _validate(user_doc, user_path)
        LOGGER.debug("Loaded user config %s: %s", user_path, sorted(user_doc))
        doc.update(user_doc)
        sources.append(str(user_path))

    return LoadedConfig(config=build_config(doc), sources=tuple(sources))
