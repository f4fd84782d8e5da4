"""
Configuration loader for the plugin set.

The configuration is stored in a YAML file with two optional
sections: `plugins`, which switches whole plugin groups on or off,
and `tools`, which carries per-tool settings keyed by tool name.
Every setting has a default, so an empty mapping is a valid config.
"""

import os
from typing import Any, Dict

import yaml


def load_app_config(path: str) -> Dict[str, Any]:
    """
    Load the plugin configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A dictionary representing the configuration.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the top-level configuration is not a mapping.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("Top-level configuration must be a mapping/dictionary.")

    return data


def _section(cfg: Dict[str, Any], section: str, name: str) -> Dict[str, Any]:
    value = ((cfg or {}).get(section) or {}).get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration for {section}.{name} must be a mapping.")
    return value


def get_plugin_config(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return _section(cfg, "plugins", name)


def get_tool_config(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return _section(cfg, "tools", name)
