"""Settings validation and health checks.

Validation stops at the first problem and reports it as a
:class:`CheckHealthResult` the host can show to the user. Only
:class:`QueryTagEncodeError` escapes, since it points at a bug rather than at
bad settings.
"""

from __future__ import annotations

import logging

from .config import ConfigDecodeError, get_config
from .connections import credentials_from_settings, get_connection_string
from .models import CheckHealthRequest, CheckHealthResult, HealthStatus
from .query_tag import query_tag_from_context

LOG = logging.getLogger(__name__)

# Makes the driver reject unknown role/warehouse/database/schema values on connect.
VALIDATE_DEFAULT_PARAMETERS = "validateDefaultParameters=true"

MISSING_CREDENTIALS_MESSAGE = "Password or private key are required."
CONFIG_ERROR_PREFIX = "Error getting config"
MISSING_ACCOUNT_MESSAGE = "Account not provided"
MISSING_USERNAME_MESSAGE = "Username not provided"
HEALTHY_MESSAGE = "Data source settings are valid"


def create_and_validate_connection_string(
    request: CheckHealthRequest,
    *,
    logger: logging.Logger | None = None,
) -> tuple[str, CheckHealthResult | None]:
    """Validate the request settings and build the health check descriptor.

    Returns ``(connection_string, None)`` on success and ``("", result)``
    with an error result otherwise.
    """

    log = logger or LOG
    ctx = request.plugin_context
    settings = ctx.data_source_instance_settings

    credentials = credentials_from_settings(settings)
    if credentials.empty:
        return "", _error(MISSING_CREDENTIALS_MESSAGE)

    try:
        config = get_config(settings)
    except ConfigDecodeError as exc:
        log.warning("Could not get config for data source", extra={"datasource": settings.uid})
        return "", _error(f"{CONFIG_ERROR_PREFIX}: {exc}")

    if not config.account:
        return "", _error(MISSING_ACCOUNT_MESSAGE)
    if not config.username:
        return "", _error(MISSING_USERNAME_MESSAGE)

    query_tag = query_tag_from_context(ctx)

    config = config.model_copy(
        update={"extra_config": _append_fragment(config.extra_config, VALIDATE_DEFAULT_PARAMETERS)}
    )
    log.debug(
        "Built connection string",
        extra={"datasource": settings.uid, "key_pair": credentials.uses_key_pair},
    )
    return get_connection_string(config, credentials.password, credentials.private_key, query_tag), None


def check_health(
    request: CheckHealthRequest,
    *,
    logger: logging.Logger | None = None,
) -> CheckHealthResult:
    """Run settings validation and report the outcome."""

    log = logger or LOG
    _, result = create_and_validate_connection_string(request, logger=log)
    if result is not None:
        log.info(
            "Health check failed",
            extra={
                "datasource": request.plugin_context.data_source_instance_settings.uid,
                "reason": result.message,
            },
        )
        return result
    return CheckHealthResult(status=HealthStatus.OK, message=HEALTHY_MESSAGE)


def _append_fragment(extra_config: str, fragment: str) -> str:
    if not extra_config:
        return fragment
    return f"{extra_config}&{fragment}"


def _error(message: str) -> CheckHealthResult:
    return CheckHealthResult(status=HealthStatus.ERROR, message=message)


__all__ = [
    "CONFIG_ERROR_PREFIX",
    "HEALTHY_MESSAGE",
    "MISSING_ACCOUNT_MESSAGE",
    "MISSING_CREDENTIALS_MESSAGE",
    "MISSING_USERNAME_MESSAGE",
    "VALIDATE_DEFAULT_PARAMETERS",
    "check_health",
    "create_and_validate_connection_string",
]
