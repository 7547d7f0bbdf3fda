"""High-level async client for last-position lookups."""

from __future__ import annotations

import logging
from typing import Any

from lastpos._connection import RedisBackend, RedisConnection
from lastpos.config import LastPosConfig
from lastpos.exceptions import LastPosError
from lastpos.models.namespace import Namespace, NamespaceSpec, device_namespace, mobile_namespace
from lastpos.models.results import HealthStatus
from lastpos.service import LastPositionService
from lastpos.store.namespace import NamespaceStore

_logger = logging.getLogger(__name__)


class LastPositionClient:
    """Async client exposing one query service per namespace.

    Usage::

        async with LastPositionClient(LastPosConfig.from_env()) as client:
            result = await client.devices.get_last_position("device-001")
            users = await client.mobile.list_last_positions(limit=50)

    Each namespace owns its own :class:`RedisConnection`, opened lazily on
    the first query and shared by all concurrent requests for that
    namespace.  When *redis* is given it is used for both namespaces and is
    never closed by the client.
    """

    def __init__(
        self,
        config: LastPosConfig | None = None,
        *,
        redis: RedisBackend | None = None,
    ) -> None:
        self._config = config or LastPosConfig()
        self._services: dict[Namespace, LastPositionService] = {}
        for spec in (
            device_namespace(self._config.device_key_prefix),
            mobile_namespace(self._config.mobile_key_prefix),
        ):
            self._services[spec.namespace] = self._build_service(spec, redis)

    def _build_service(self, spec: NamespaceSpec, redis: RedisBackend | None) -> LastPositionService:
        connection = RedisConnection(self._config, client=redis, name=f"{spec.namespace} namespace")
        store = NamespaceStore(
            spec,
            connection,
            lookup_concurrency=self._config.lookup_concurrency,
            scan_count=self._config.scan_count,
        )
        return LastPositionService(store, self._config)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LastPositionClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Release every namespace connection."""
        for namespace, service in self._services.items():
            try:
                await service.store.close()
            except LastPosError:
                _logger.debug("Error closing %s namespace", namespace, exc_info=True)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    @property
    def config(self) -> LastPosConfig:
        return self._config

    @property
    def devices(self) -> LastPositionService:
        return self._services[Namespace.DEVICE]

    @property
    def mobile(self) -> LastPositionService:
        return self._services[Namespace.MOBILE]

    def service(self, namespace: Namespace | str) -> LastPositionService:
        """Return the service for *namespace* (``"device"`` or ``"mobile"``)."""
        try:
            return self._services[Namespace(namespace)]
        except ValueError as exc:
            raise KeyError(f"Unknown namespace: {namespace!r}") from exc

    async def health(self) -> dict[str, HealthStatus]:
        """Return the health of every namespace."""
        return {str(namespace): await service.health() for namespace, service in self._services.items()}
