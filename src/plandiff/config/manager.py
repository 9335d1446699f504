"""Layered configuration manager (defaults, user, project, explicit file)."""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from .paths import get_default_config_path, get_user_config_path, get_project_config_path
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("config.manager")


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read one YAML config file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed mapping (empty for an empty file)

    Raises:
        ConfigError: If the file is missing, unreadable, invalid YAML or not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Error reading config file {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load the full config tree.

    Packaged defaults are overridden by the user config, then the project
    config, then ``config_path``. A broken user or project config is skipped
    with a warning; a broken explicit config raises.

    Args:
        config_path: Optional explicit config file (highest precedence)

    Returns:
        Merged configuration dictionary

    Raises:
        ConfigError: If the defaults or the explicit config cannot be loaded
    """
    config = load_yaml_file(get_default_config_path())

    for optional_path in (get_user_config_path(), get_project_config_path()):
        if optional_path is None or not optional_path.exists():
            continue
        try:
            _deep_merge(config, load_yaml_file(optional_path))
            logger.info(f"Loaded config from {optional_path}")
        except ConfigError as e:
            logger.warning(f"Could not load config from {optional_path}: {e}")

    if config_path is not None:
        _deep_merge(config, load_yaml_file(config_path))
        logger.info(f"Loaded config from {config_path}")

    return config


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
