"""Data source configuration decoding helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .models import DataSourceInstanceSettings


class ConnectionSettingsError(ValueError):
    """Base class for user-correctable data source settings errors."""


class ConfigDecodeError(ConnectionSettingsError):
    """Raised when the stored configuration document cannot be decoded."""


class SettingsFileError(ConnectionSettingsError):
    """Raised when a CLI settings file cannot be read or validated."""


class PluginConfig(BaseModel):
    """Non-secret data source configuration (the host's ``jsonData``).

    Document keys match field aliases case-insensitively, an exact match
    taking precedence; the last key mapping to a field wins. A ``null``
    document decodes to the defaults.
    """

    model_config = ConfigDict(frozen=True)

    account: str = ""
    username: str = ""
    role: str = ""
    warehouse: str = ""
    database: str = ""
    schema_name: str = Field(default="", alias="schema")
    extra_config: str = Field(default="", alias="extraConfig")

    @model_validator(mode="before")
    @classmethod
    def _canonical_keys(cls, data: object) -> object:
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data
        aliases = _config_aliases()
        folded = {alias.casefold(): alias for alias in aliases}
        canonical: dict[str, object] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                continue
            name = key if key in aliases else folded.get(key.casefold())
            if name is not None:
                canonical[name] = value
        return canonical

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value


def _config_aliases() -> frozenset[str]:
    return frozenset(field.alias or name for name, field in PluginConfig.model_fields.items())


def decode_config(raw: bytes | str) -> PluginConfig:
    """Decode a JSON configuration document into a :class:`PluginConfig`.

    Parse failures keep the decoder's own message so the host can show it
    verbatim. Invalid UTF-8 is replaced with U+FFFD rather than rejected.
    Missing fields default to the empty string.
    """

    text = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else raw
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigDecodeError(str(exc)) from exc
    try:
        return PluginConfig.model_validate(document)
    except ValidationError as exc:
        raise ConfigDecodeError(_validation_message(exc)) from exc


def get_config(settings: DataSourceInstanceSettings) -> PluginConfig:
    """Decode the configuration stored on the data source settings."""

    return decode_config(settings.json_data)


def _validation_message(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


class SettingsFile(BaseModel):
    """Shape of the TOML settings file accepted by the CLI."""

    uid: str = "cli"
    name: str = ""
    json_data: dict[str, Any] = Field(default_factory=dict)
    secure_json_data: dict[str, str] = Field(default_factory=dict, repr=False)

    def to_instance_settings(
        self, secret_overrides: Mapping[str, str] | None = None
    ) -> DataSourceInstanceSettings:
        """Build host settings, storing ``json_data`` as a JSON document."""

        secrets = dict(self.secure_json_data)
        for key, value in (secret_overrides or {}).items():
            if value:
                secrets[key] = value
        return DataSourceInstanceSettings(
            uid=self.uid,
            name=self.name,
            json_data=json.dumps(self.json_data).encode("utf-8"),
            decrypted_secure_json_data=secrets,
        )


def load_settings_file(path: Path) -> SettingsFile:
    """Read and validate a CLI settings file."""

    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise SettingsFileError(f"Could not read settings file '{path}': {exc}") from exc
    try:
        return SettingsFile.model_validate(raw)
    except ValidationError as exc:
        raise SettingsFileError(f"Invalid settings file '{path}': {_validation_message(exc)}") from exc


__all__ = [
    "ConfigDecodeError",
    "ConnectionSettingsError",
    "PluginConfig",
    "SettingsFile",
    "SettingsFileError",
    "decode_config",
    "get_config",
    "load_settings_file",
]
