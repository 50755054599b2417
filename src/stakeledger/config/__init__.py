"""Configuration schema and loading."""

from .loader import config_from_dict, load_config
from .schema import Action, Config

__all__ = ["Config", "Action", "load_config", "config_from_dict"]
