"""Configuration loading and validation for YAML-based scsiwalk config files."""

from __future__ import annotations

import functools
import json
import logging
import os
from collections.abc import Hashable
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import validators
from jsonschema.exceptions import best_match

from scsiwalk.core.errors import ConfigLoadError, ConfigValidationError, FamilySelectionError
from scsiwalk.core.model import Config, TransportConfig, WalkConfig
from scsiwalk.core.walker import select_families


LOGGER = logging.getLogger(__name__)
CONFIG_FILENAMES = ("config.yaml", "config.yml")
SCHEMA_NAME = "config.schema.json"


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses to let a later key override an earlier one."""


def _construct_unique_mapping(loader: UniqueKeyLoader, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
    loader.flatten_mapping(node)
    first_seen: dict[Any, yaml.Mark] = {}
    for key_node, _ in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if not isinstance(key, Hashable):
            continue
        if key in first_seen:
            raise ConfigValidationError(
                f"Duplicate key '{key}' on line {key_node.start_mark.line + 1} "
                f"(first set on line {first_seen[key].line + 1})"
            )
        first_seen[key] = key_node.start_mark
    return loader.construct_mapping(node, deep=deep)


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_unique_mapping,
)


@functools.lru_cache(maxsize=1)
def _schema_validator() -> Any:
    schema_file = resources.files("scsiwalk.schemas").joinpath(SCHEMA_NAME)
    schema = json.loads(schema_file.read_text(encoding="utf-8"))
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _config_dir() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "scsiwalk"


def default_config_path() -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = _config_dir() / name
        if candidate.is_file():
            return candidate
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
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


def build_config(doc: dict[str, Any], source: Path | None = None) -> Config:
    error = best_match(_schema_validator().iter_errors(doc))
    if error is not None:
        path = ".".join(str(p) for p in error.absolute_path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source or '<config>'}{where}: {error.message}")

    transport_doc = doc.get("transport", {})
    defaults = TransportConfig()
    transport = TransportConfig(
        timeout_ms=int(transport_doc.get("timeout_ms", defaults.timeout_ms)),
        sense_buffer_len=int(transport_doc.get("sense_buffer_len", defaults.sense_buffer_len)),
        debug=bool(transport_doc.get("debug", defaults.debug)),
    )

    families: tuple[str, ...] | None = None
    if "families" in doc.get("walk", {}):
        try:
            selected = select_families(doc["walk"]["families"])
        except FamilySelectionError as exc:
            raise ConfigValidationError(f"{source or '<config>'} (walk.families): {exc}") from exc
        families = tuple(family.tag for family in selected)

    return Config(
        transport=transport,
        walk=WalkConfig(families=families),
        source=str(source) if source else None,
    )


def load_config(path: str | Path | None = None) -> Config:
    """Load the explicit config file, else the user config, else defaults."""
    if path is not None:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigLoadError(f"Config file {config_path} does not exist")
    else:
        config_path = default_config_path()
        if config_path is None:
            LOGGER.debug("No config file found in %s, using defaults", _config_dir())
            return Config()

    LOGGER.debug("Loading config from %s", config_path)
    return build_config(_read_yaml(config_path), config_path)
