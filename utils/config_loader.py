"""
Configuration loading utilities.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def load_config(config_path: str = 'config.yaml') -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary (empty if the file is missing or unreadable)
    """
    config_file = Path(config_path)

    if not config_file.exists():
        logger.info(f"Config file not found: {config_file} - using defaults")
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config {config_file}: {e}")
        return {}

    if not isinstance(config, dict):
        logger.error(f"Config {config_file} must contain a mapping, got {type(config).__name__}")
        return {}

    return config


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """
    Get configuration value using dot-notation path.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., 'analysis.sample_interval_minutes')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return default if value is None else value
