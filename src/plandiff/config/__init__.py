"""Configuration module: load the danger policy, performance limits and grouping settings."""

from pathlib import Path
from typing import Optional, Union
from pydantic import ValidationError
from ..utils.errors import ConfigError
from ..utils.logging import get_logger
from .manager import load_config, load_yaml_file
from .models import AnalysisConfig, DangerPolicy, GroupingConfig, PerformanceLimits
from .paths import get_default_config_path, get_user_config_path, get_project_config_path

logger = get_logger("config")


def load_analysis_config(config_path: Optional[Union[str, Path]] = None) -> AnalysisConfig:
    """
    Load and validate the analysis configuration.

    Args:
        config_path: Optional explicit config file layered over defaults, user and project configs

    Returns:
        Frozen AnalysisConfig

    Raises:
        ConfigError: If a config file cannot be loaded or fails validation
    """
    data = load_config(config_path)
    try:
        config = AnalysisConfig.from_dict(data)
    except (ValidationError, TypeError, AttributeError) as e:
        raise ConfigError(f"Invalid configuration: {e}")

    logger.debug(
        f"Configuration: {len(config.danger_policy.sensitive_resources)} sensitive resources, "
        f"{len(config.danger_policy.sensitive_properties)} sensitive properties, "
        f"grouping={'on' if config.grouping.enabled else 'off'} (threshold {config.grouping.threshold})"
    )
    return config


__all__ = [
    "AnalysisConfig",
    "DangerPolicy",
    "GroupingConfig",
    "PerformanceLimits",
    "load_analysis_config",
    "load_config",
    "load_yaml_file",
    "get_default_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
