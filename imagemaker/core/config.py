"""
Configuration management utilities for the ImageMaker package.

This module provides functions for loading, validating, and accessing configuration settings.
It handles default configurations, user-specific overrides, and runtime overrides.

Configuration Hierarchy:
1. Default configuration (imagemaker/core/default_config.json) - Base settings for all installations
2. User configuration (~/.imagemaker/config.json, or the file named by IMAGEMAKER_CONFIG) -
   User-specific overrides that persist across runs
3. Runtime overrides - Temporary changes made during program execution via set_config_value()

Environment variables are read after any ``.env`` file in the working directory has been
loaded, so IMAGEMAKER_CONFIG may be set there as well.

The configuration only describes where disks live and how images are rendered. Which disk
a pipeline writes to is decided when the pipeline is built, not stored here.
"""

import os
import copy
import json
from typing import Dict, Any, Optional

import jsonschema
from dotenv import load_dotenv

from imagemaker.core.error_handler import ConfigurationError
from imagemaker.schemas import load_schema

# Load environment variables from .env file if it exists
load_dotenv()

# Default configuration paths
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default_config.json")
USER_CONFIG_PATH = os.path.expanduser("~/.imagemaker/config.json")
CONFIG_ENV_VAR = "IMAGEMAKER_CONFIG"

# Configuration cache
_config_cache = {}

def get_user_config_path() -> str:
    """
    Get the path of the user configuration file.

    Returns:
        str: Path named by IMAGEMAKER_CONFIG, or the default user path
    """
    return os.environ.get(CONFIG_ENV_VAR) or USER_CONFIG_PATH

def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Get the configuration dictionary, loading it if necessary.

    Args:
        reload (bool): Force reload the configuration even if cached

    Returns:
        Dict[str, Any]: The configuration dictionary
    """
    global _config_cache

    if not _config_cache or reload:
        _config_cache = load_config()

    return _config_cache

def load_config(user_config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from default and user-specific files.

    The configuration is loaded in a hierarchical manner:
    1. Load the default configuration from DEFAULT_CONFIG_PATH
    2. If a user configuration exists, load and deep merge it with the
       default configuration, allowing partial overrides
    3. Validate the merged result against the ``config`` schema

    Args:
        user_config_path (str, optional): User configuration file to merge.
            Defaults to get_user_config_path().

    Returns:
        Dict[str, Any]: The merged configuration dictionary

    Raises:
        ConfigurationError: If a file cannot be parsed or the result violates the schema
    """
    config = {}

    if os.path.exists(DEFAULT_CONFIG_PATH):
        config.update(_read_json(DEFAULT_CONFIG_PATH))

    user_config_path = user_config_path or get_user_config_path()
    if os.path.exists(user_config_path):
        deep_merge(config, _read_json(user_config_path))

    validate_config(config)
    return config

def _read_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            message=f"Invalid JSON in configuration file {path}: {e.msg}",
            component="config"
        ) from e

def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate a configuration dictionary against the configuration schema.

    Args:
        config (Dict[str, Any]): Configuration to validate

    Raises:
        ConfigurationError: If the configuration does not conform to the schema
    """
    try:
        jsonschema.validate(instance=config, schema=load_schema("config"))
    except jsonschema.exceptions.ValidationError as e:
        key_path = ".".join(str(part) for part in e.absolute_path) or "<root>"
        raise ConfigurationError(
            message=f"Invalid value for {key_path}: {e.message}",
            component="config"
        ) from e

def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """
    Recursively merge override dictionary into base dictionary.

    The merge behavior is as follows:
    - If a key exists in both dictionaries and both values are dictionaries,
      recursively merge those dictionaries
    - Otherwise, the value from the override dictionary takes precedence

    Args:
        base (Dict[str, Any]): Base dictionary to be updated
        override (Dict[str, Any]): Dictionary with values to override
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value

def save_user_config(config: Dict[str, Any]) -> None:
    """
    Save user configuration to the user config file.

    The entire configuration is saved, but when loaded it is merged with the
    default configuration again.

    Args:
        config (Dict[str, Any]): Configuration dictionary to save
    """
    user_config_path = get_user_config_path()
    os.makedirs(os.path.dirname(user_config_path), exist_ok=True)

    with open(user_config_path, 'w') as f:
        json.dump(config, f, indent=2)

    global _config_cache
    _config_cache = load_config()

def get_config_value(key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value by key.

    Dot notation reaches nested values, so 'images.jpeg_quality' reads
    config['images']['jpeg_quality'].

    Examples:
        >>> get_config_value('placeholders.font_size', 12)
        12

        >>> get_config_value('nonexistent.key', 'default-value')
        'default-value'

    Args:
        key (str): The configuration key (can use dot notation for nested keys)
        default (Any): Default value if key is not found

    Returns:
        Any: The configuration value or default
    """
    current = get_config()

    for part in key.split('.'):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default

    return current

def set_config_value(key: str, value: Any, save: bool = True) -> None:
    """
    Set a specific configuration value by key.

    Intermediate dictionaries are created as needed. With save=False the change
    only lives in the current process.

    Examples:
        >>> set_config_value('images.jpeg_quality', 80, save=False)

    Args:
        key (str): The configuration key (can use dot notation for nested keys)
        value (Any): The value to set
        save (bool): Whether to save the updated configuration to disk

    Raises:
        ConfigurationError: If the updated configuration violates the schema
    """
    config = copy.deepcopy(get_config())

    parts = key.split('.')
    current = config
    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value

    validate_config(config)

    global _config_cache
    _config_cache = config

    if save:
        save_user_config(config)

def reset_config() -> None:
    """
    Drop the cached configuration so the next access reloads it from disk.
    """
    global _config_cache
    _config_cache = {}
