"""Config path resolution for the layered config system."""

from pathlib import Path
from typing import Optional


def get_default_config_path() -> Path:
    """Packaged defaults: plandiff/config/defaults.yaml"""
    return Path(__file__).parent / "defaults.yaml"


def get_user_config_path() -> Path:
    """Get user config path: ~/.plandiff/config.yaml"""
    return Path.home() / ".plandiff" / "config.yaml"


def get_project_config_path() -> Optional[Path]:
    """Get project config path: .plandiff/config.yaml (from current working directory)"""
    project_config = Path.cwd() / ".plandiff" / "config.yaml"
    if project_config.exists():
        return project_config
    return None
