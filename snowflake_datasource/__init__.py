"""Snowflake data source: connection descriptors, query tags and health checks."""

from __future__ import annotations

__version__ = "0.1.0"

from .config import ConfigDecodeError, ConnectionSettingsError, PluginConfig, decode_config, get_config
from .connections import Credentials, credentials_from_settings, get_connection_string
from .datasource import SnowflakeDatasource
from .health import check_health, create_and_validate_connection_string
from .models import (
    CheckHealthRequest,
    CheckHealthResult,
    DataSourceInstanceSettings,
    HealthStatus,
    PluginContext,
    User,
)
from .query_tag import QueryTagEncodeError, query_tag_from_context

__all__ = [
    "CheckHealthRequest",
    "CheckHealthResult",
    "ConfigDecodeError",
    "ConnectionSettingsError",
    "Credentials",
    "DataSourceInstanceSettings",
    "HealthStatus",
    "PluginConfig",
    "PluginContext",
    "QueryTagEncodeError",
    "SnowflakeDatasource",
    "User",
    "__version__",
    "check_health",
    "create_and_validate_connection_string",
    "credentials_from_settings",
    "decode_config",
    "get_config",
    "get_connection_string",
    "query_tag_from_context",
]
