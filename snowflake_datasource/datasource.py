"""Host-facing data source handler."""

from __future__ import annotations

import logging

from .health import check_health
from .instances import InstanceManager
from .models import CheckHealthRequest, CheckHealthResult
from .query_tag import QueryTagEncodeError

LOG = logging.getLogger(__name__)


class SnowflakeDatasource:
    """Answers host health checks for Snowflake data sources."""

    def __init__(
        self,
        manager: InstanceManager | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._manager = manager or InstanceManager()
        self._log = logger or LOG

    @property
    def manager(self) -> InstanceManager:
        return self._manager

    def check_health(self, request: CheckHealthRequest) -> CheckHealthResult:
        ctx = request.plugin_context
        # Lifecycle bookkeeping only; the check reads everything from the request.
        self._manager.get(ctx)
        try:
            return check_health(request, logger=self._log)
        except QueryTagEncodeError:
            self._log.exception(
                "Query tag encoding failed",
                extra={"datasource": ctx.data_source_instance_settings.uid, "org_id": ctx.org_id},
            )
            raise

    def dispose(self) -> None:
        """Release every data source instance (host shutdown)."""

        self._manager.dispose_all()


__all__ = ["SnowflakeDatasource"]
