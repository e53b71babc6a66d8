"""Request and result types exchanged with the plugin host."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping


class HealthStatus(str, Enum):
    """Outcome of a data source health check."""

    UNKNOWN = "UNKNOWN"
    OK = "OK"
    ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class User:
    """Signed-in user issuing a request; all fields may be empty."""

    name: str = ""
    login: str = ""
    email: str = ""
    role: str = ""


@dataclass(frozen=True, slots=True)
class DataSourceInstanceSettings:
    """Per data source settings as stored by the host.

    ``json_data`` holds the raw, unvalidated configuration document and
    ``decrypted_secure_json_data`` the already decrypted secrets.
    """

    uid: str = ""
    name: str = ""
    json_data: bytes = b""
    decrypted_secure_json_data: Mapping[str, str] = field(default_factory=dict, repr=False)
    updated: datetime | None = None


@dataclass(frozen=True, slots=True)
class PluginContext:
    """Caller context attached to every host request."""

    org_id: int = 0
    user: User | None = None
    data_source_instance_settings: DataSourceInstanceSettings = field(
        default_factory=DataSourceInstanceSettings
    )


@dataclass(frozen=True, slots=True)
class CheckHealthRequest:
    """Health check request sent by the host."""

    plugin_context: PluginContext = field(default_factory=PluginContext)


@dataclass(frozen=True, slots=True)
class CheckHealthResult:
    """Structured, user-facing health check outcome."""

    status: HealthStatus
    message: str


__all__ = [
    "CheckHealthRequest",
    "CheckHealthResult",
    "DataSourceInstanceSettings",
    "HealthStatus",
    "PluginContext",
    "User",
]
