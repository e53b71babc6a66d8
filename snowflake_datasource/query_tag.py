"""QUERY_TAG payloads identifying who issued a query.

The tag is a compact JSON document applied to the Snowflake session
(https://docs.snowflake.com/en/sql-reference/parameters.html#query-tag) so
that queries can be audited by organization and user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from .models import PluginContext, User

JOB_LABEL = "Grafana"

# Characters the host's JSON encoder writes as \u escapes.
_JSON_HTML_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


class QueryTagEncodeError(RuntimeError):
    """Raised when a query tag cannot be serialized; always a bug."""


@dataclass(frozen=True, slots=True)
class BackendRequester:
    """Request without an end user, such as alert evaluation."""


@dataclass(frozen=True, slots=True)
class AnonymousRequester:
    """End-user request carrying nothing but a role."""

    role: str = ""


@dataclass(frozen=True, slots=True)
class NamedRequester:
    """Request from a signed-in user."""

    name: str = ""
    login: str = ""
    email: str = ""
    role: str = ""


Requester = BackendRequester | AnonymousRequester | NamedRequester


def requester_from_user(user: User | None) -> Requester:
    """Classify the identity behind a request."""

    if user is None:
        return BackendRequester()
    if not (user.name or user.login or user.email):
        return AnonymousRequester(role=user.role)
    return NamedRequester(name=user.name, login=user.login, email=user.email, role=user.role)


class QueryTag(BaseModel):
    """Serialized QUERY_TAG document; declaration order is the key order."""

    job: str
    org_id: int
    user_login: str = ""
    user_name: str = ""
    user_email: str = ""
    user_role: str = ""
    is_backend: bool = False
    is_anonymous: bool = False

    @classmethod
    def for_requester(cls, org_id: int, requester: Requester) -> QueryTag:
        match requester:
            case BackendRequester():
                return cls(job=JOB_LABEL, org_id=org_id, is_backend=True)
            case AnonymousRequester(role=role):
                return cls(job=JOB_LABEL, org_id=org_id, user_role=role, is_anonymous=True)
            case NamedRequester(name=name, login=login, email=email, role=role):
                return cls(
                    job=JOB_LABEL,
                    org_id=org_id,
                    user_login=login,
                    user_name=name,
                    user_email=email,
                    user_role=role,
                )
            case _:
                assert_never(requester)

    def encode(self) -> str:
        """Compact JSON with empty fields omitted."""

        payload = self.model_dump_json(exclude_defaults=True)
        return payload.translate(_JSON_HTML_ESCAPES)


def query_tag_from_context(ctx: PluginContext) -> str:
    """Build the QUERY_TAG value for a request context."""

    requester = requester_from_user(ctx.user)
    try:
        return QueryTag.for_requester(ctx.org_id, requester).encode()
    except (ValidationError, PydanticSerializationError, UnicodeError) as exc:
        raise QueryTagEncodeError(f"Could not encode query tag: {exc}") from exc


__all__ = [
    "AnonymousRequester",
    "BackendRequester",
    "JOB_LABEL",
    "NamedRequester",
    "QueryTag",
    "QueryTagEncodeError",
    "Requester",
    "query_tag_from_context",
    "requester_from_user",
]
