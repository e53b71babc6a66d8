"""Connection descriptor assembly for the Snowflake driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote, urlencode

from .config import PluginConfig
from .models import DataSourceInstanceSettings

PASSWORD_KEY = "password"
PRIVATE_KEY_KEY = "privateKey"

QUERY_TAG_PARAM = "QUERY_TAG"
AUTHENTICATOR_PARAM = "authenticator"
PRIVATE_KEY_PARAM = "privateKey"
KEY_PAIR_AUTHENTICATOR = "SNOWFLAKE_JWT"

# Sub-delims RFC 3986 allows in userinfo; ':' is excluded since it splits user from password.
_USERINFO_SAFE = "$&+,;="


@dataclass(frozen=True, slots=True)
class Credentials:
    """Decrypted secrets for a data source."""

    password: str = field(default="", repr=False)
    private_key: str = field(default="", repr=False)

    @property
    def empty(self) -> bool:
        return not self.password and not self.private_key

    @property
    def uses_key_pair(self) -> bool:
        return bool(self.private_key)


def credentials_from_settings(settings: DataSourceInstanceSettings) -> Credentials:
    """Pick the password and private key out of the decrypted secure data."""

    secrets = settings.decrypted_secure_json_data
    return Credentials(
        password=secrets.get(PASSWORD_KEY) or "",
        private_key=secrets.get(PRIVATE_KEY_KEY) or "",
    )


def get_connection_string(
    config: PluginConfig,
    password: str,
    private_key: str,
    query_tag: str,
) -> str:
    """Assemble ``userinfo@account?params&extraConfig``.

    A non-empty ``private_key`` selects key-pair authentication and drops the
    password. Parameters are form encoded and sorted by key. The userinfo
    part uses the narrower userinfo escaping, so ``$`` or ``&`` in a password
    stay literal. ``account`` and ``extraConfig`` are written as given.
    """

    params: dict[str, str] = {
        "role": config.role,
        "warehouse": config.warehouse,
        "database": config.database,
        "schema": config.schema_name,
    }
    if query_tag:
        params[QUERY_TAG_PARAM] = query_tag

    if private_key:
        params[AUTHENTICATOR_PARAM] = KEY_PAIR_AUTHENTICATOR
        params[PRIVATE_KEY_PARAM] = private_key
        userinfo = _escape_userinfo(config.username)
    else:
        userinfo = f"{_escape_userinfo(config.username)}:{_escape_userinfo(password)}"

    encoded = urlencode(sorted(params.items()))
    return f"{userinfo}@{config.account}?{encoded}&{config.extra_config}"


def _escape_userinfo(value: str) -> str:
    return quote(value, safe=_USERINFO_SAFE)


__all__ = [
    "AUTHENTICATOR_PARAM",
    "Credentials",
    "KEY_PAIR_AUTHENTICATOR",
    "PASSWORD_KEY",
    "PRIVATE_KEY_KEY",
    "PRIVATE_KEY_PARAM",
    "QUERY_TAG_PARAM",
    "credentials_from_settings",
    "get_connection_string",
]
