"""
Configuration system for the introspection server.

Exports:
    IntrospectionConfig: Main configuration container
    load_config: Load configuration from YAML/env
"""

from cni_introspect.config.models import (
    DEFAULT_INTROSPECTION_PORT,
    BackoffSettings,
    IntrospectionConfig,
    ServerSettings,
)
from cni_introspect.config.loader import load_config

__all__ = [
    "DEFAULT_INTROSPECTION_PORT",
    "BackoffSettings",
    "IntrospectionConfig",
    "ServerSettings",
    "load_config",
]
