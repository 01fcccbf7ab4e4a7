"""
Configuration loader with YAML and environment variable support.

Priority (highest to lowest):
1. Environment variables: CNI_INTROSPECT_SERVER__PORT=9000
2. User config: --config-dir path / ~/.cni-introspect/config.yaml
3. Built-in defaults: cni_introspect/config/defaults/settings.yaml
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from cni_introspect.config.models import IntrospectionConfig
from cni_introspect.utils import get_logger

logger = get_logger(__name__)


# Default config locations
DEFAULT_CONFIG_DIR = Path.home() / ".cni-introspect"
PACKAGE_DEFAULTS_DIR = Path(__file__).parent / "defaults"

# Environment variable prefix
ENV_PREFIX = "CNI_INTROSPECT_"
ENV_DELIMITER = "__"


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Values from 'override' take precedence over 'base'.
    Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or malformed."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            content = yaml.safe_load(f)
            return content if isinstance(content, dict) else {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return {}


def _get_env_overrides() -> dict[str, Any]:
    """
    Extract configuration overrides from environment variables.

    CNI_INTROSPECT_SERVER__PORT=9000 -> {"server": {"port": 9000}}
    CNI_INTROSPECT_BACKOFF__MAXIMUM=30 -> {"backoff": {"maximum": 30}}
    """
    overrides: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        key_path = key[len(ENV_PREFIX) :].lower().split(ENV_DELIMITER)
        if not all(key_path):
            logger.warning(f"Ignoring malformed config variable {key}")
            continue

        current = overrides
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[key_path[-1]] = _parse_env_value(value)

    return overrides


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate Python type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def load_config(config_dir: Optional[str | Path] = None) -> IntrospectionConfig:
    """
    Load configuration from multiple sources.

    Args:
        config_dir: Optional path to configuration directory.
                   If not provided, uses ~/.cni-introspect/

    Returns:
        IntrospectionConfig: Validated configuration object

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    config_data = _load_yaml_file(PACKAGE_DEFAULTS_DIR / "settings.yaml")

    user_config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
    user_config = _load_yaml_file(user_config_dir / "config.yaml")
    config_data = _deep_merge(config_data, user_config)

    config_data = _deep_merge(config_data, _get_env_overrides())

    return IntrospectionConfig.model_validate(config_data)
