"""Load ledger run configurations from YAML.

A user file only needs the sections it changes; everything else comes from
the packaged ``defaults.yaml``. Lists (``accounts``, ``scenario``) replace
the default list outright.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import ConfigurationError
from .schema import Config

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(yaml_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        yaml_path: Path to a YAML file layered over the defaults
            (defaults.yaml alone if None)

    Returns:
        Config object

    Raises:
        ConfigurationError: If the file is not a YAML mapping
        pydantic.ValidationError: If the merged values fail validation
    """
    data = _read_yaml(DEFAULTS_PATH)
    if yaml_path is not None:
        logger.debug("loading config overrides from %s", yaml_path)
        data = _merge(data, _read_yaml(yaml_path))
    return Config.from_dict(data)


def config_from_dict(data: Dict[str, Any], merge_defaults: bool = False) -> Config:
    """
    Create config from dictionary.

    Args:
        data: Configuration dictionary
        merge_defaults: Layer ``data`` over defaults.yaml instead of
            requiring every section

    Returns:
        Config object
    """
    if merge_defaults:
        data = _merge(_read_yaml(DEFAULTS_PATH), data)
    return Config.from_dict(data)
