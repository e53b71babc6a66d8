"""Per data source instance lifecycle, driven by the plugin host."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .models import DataSourceInstanceSettings, PluginContext

LOG = logging.getLogger(__name__)


class DataSourceInstance:
    """State kept for one version of a data source's settings."""

    def __init__(self, settings: DataSourceInstanceSettings) -> None:
        self._settings = settings
        self._disposed = False

    @property
    def settings(self) -> DataSourceInstanceSettings:
        return self._settings

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Release the instance; repeated calls are no-ops."""

        if self._disposed:
            return
        LOG.info("Disposing of instance", extra={"datasource": self._settings.uid})
        self._disposed = True


InstanceFactory = Callable[[DataSourceInstanceSettings], DataSourceInstance]


def new_datasource_instance(settings: DataSourceInstanceSettings) -> DataSourceInstance:
    """Default factory used by :class:`InstanceManager`."""

    LOG.info("Creating instance", extra={"datasource": settings.uid})
    return DataSourceInstance(settings)


class InstanceManager:
    """Caches one instance per data source, replacing it when settings change."""

    def __init__(self, factory: InstanceFactory = new_datasource_instance) -> None:
        self._factory = factory
        self._instances: dict[str, DataSourceInstance] = {}
        self._lock = threading.Lock()

    def get(self, ctx: PluginContext) -> DataSourceInstance:
        """Return the instance for the request's data source, creating it if needed."""

        settings = ctx.data_source_instance_settings
        with self._lock:
            cached = self._instances.get(settings.uid)
            if cached is not None and cached.settings.updated == settings.updated:
                return cached
            instance = self._factory(settings)
            self._instances[settings.uid] = instance
        if cached is not None:
            self._dispose(cached)
        return instance

    def dispose_all(self) -> None:
        """Dispose every cached instance."""

        with self._lock:
            instances = list(self._instances.values())
            self._instances.clear()
        for instance in instances:
            self._dispose(instance)

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)

    def _dispose(self, instance: DataSourceInstance) -> None:
        try:
            instance.dispose()
        except Exception:  # pragma: no cover - defensive logging path
            LOG.exception("Instance dispose failed", extra={"datasource": instance.settings.uid})


__all__ = [
    "DataSourceInstance",
    "InstanceFactory",
    "InstanceManager",
    "new_datasource_instance",
]
