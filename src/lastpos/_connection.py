"""Owned Redis connection handle shared by one namespace."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

from redis import asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from lastpos._redact import redact_for_log, redact_url
from lastpos.config import LastPosConfig
from lastpos.exceptions import StoreUnavailableError

_logger = logging.getLogger(__name__)

#: Redis errors that mean the store itself is unreachable, as opposed to a
#: problem with one key.
CONNECTION_ERRORS: tuple[type[Exception], ...] = (
    RedisConnectionError,
    RedisTimeoutError,
    ConnectionError,
    OSError,
    asyncio.TimeoutError,
)


class RedisBackend(Protocol):
    """Structural interface of the Redis commands the engine issues.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production client (`redis.asyncio.Redis`) concrete.  The engine only
    reads; no write command appears here.
    """

    async def exists(self, *names: str) -> int: ...

    async def type(self, name: str) -> str: ...

    async def get(self, name: str) -> str | None: ...

    async def hgetall(self, name: str) -> dict[str, str]: ...

    async def hlen(self, name: str) -> int: ...

    async def lindex(self, name: str, index: int) -> str | None: ...

    async def llen(self, name: str) -> int: ...

    async def zrevrange(self, name: str, start: int, end: int) -> list[str]: ...

    async def zcard(self, name: str) -> int: ...

    async def strlen(self, name: str) -> int: ...

    def scan_iter(self, match: str | None = None, count: int | None = None) -> AsyncIterator[str]: ...

    async def memory_usage(self, key: str) -> int | None: ...

    async def ping(self) -> Any: ...

    async def aclose(self) -> None: ...


def _build_client(config: LastPosConfig) -> aioredis.Redis:
    options: dict[str, Any] = {
        "decode_responses": True,
        "socket_timeout": config.socket_timeout,
        "socket_connect_timeout": config.socket_connect_timeout,
    }
    if config.redis_url:
        return aioredis.Redis.from_url(config.redis_url, **options)
    return aioredis.Redis(
        host=config.redis_host,
        port=config.redis_port,
        password=config.redis_password,
        db=config.redis_db,
        **options,
    )


def _describe_target(config: LastPosConfig) -> str:
    if config.redis_url:
        return redact_url(config.redis_url)
    return f"{config.redis_host}:{config.redis_port}/{config.redis_db}"


class RedisConnection:
    """Lazily established, reusable connection for one namespace.

    ``ensure_connected`` may be awaited by any number of concurrent
    requests: the first one opens the connection behind a single lock and
    the rest reuse it.  An externally supplied client is never closed by
    this handle.
    """

    def __init__(
        self,
        config: LastPosConfig,
        *,
        client: RedisBackend | None = None,
        name: str = "redis",
    ) -> None:
        self._config = config
        self._name = name
        self._external_client = client is not None
        self._client: RedisBackend | None = client
        self._connected = False
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client is not None

    @property
    def target(self) -> str:
        return _describe_target(self._config)

    async def ensure_connected(self) -> RedisBackend:
        """Return the live client, opening the connection on first use.

        Raises
        ------
        StoreUnavailableError
            If Redis cannot be reached.
        """
        client = self._client
        if self._connected and client is not None:
            return client

        async with self._lock:
            # Another waiter may have connected while we queued on the lock.
            if self._connected and self._client is not None:
                return self._client
            if self._client is None:
                _logger.debug(
                    "Creating Redis client for %s: %s",
                    self._name,
                    redact_for_log(dataclasses.asdict(self._config)),
                )
                self._client = _build_client(self._config)
            try:
                await self._client.ping()
            except CONNECTION_ERRORS as exc:
                _logger.error("Cannot connect to Redis at %s for %s: %s", self.target, self._name, exc)
                raise StoreUnavailableError(f"Redis at {self.target} is unavailable: {exc}") from exc
            except RedisError as exc:
                _logger.error("Redis rejected connection for %s: %s", self._name, exc)
                raise StoreUnavailableError(f"Redis at {self.target} rejected the connection: {exc}") from exc
            self._connected = True
            _logger.info("Connected to Redis at %s for %s", self.target, self._name)
            return self._client

    async def ping(self) -> bool:
        """Liveness probe sharing the connection with ordinary reads.

        Never raises; a failed probe leaves the connection in place so
        in-flight reads are not torn down.
        """
        try:
            client = await self.ensure_connected()
            result = await client.ping()
        except StoreUnavailableError:
            return False
        except (RedisError, *CONNECTION_ERRORS) as exc:
            _logger.warning("Redis ping failed for %s: %s", self._name, exc)
            return False
        return result is True or result == "PONG"

    async def close(self) -> None:
        """Release the connection.  Safe to call more than once."""
        client = self._client
        self._connected = False
        if client is None or self._external_client:
            return
        self._client = None
        try:
            await client.aclose()
        except (RedisError, *CONNECTION_ERRORS) as exc:
            _logger.debug("Ignoring error while closing Redis client for %s: %s", self._name, exc)
        else:
            _logger.info("Disconnected from Redis for %s", self._name)
