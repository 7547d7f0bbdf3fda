from __future__ import annotations

import asyncio
import fnmatch
import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from lastpos._connection import RedisConnection
from lastpos.config import LastPosConfig
from lastpos.models.namespace import device_namespace, mobile_namespace
from lastpos.service import LastPositionService
from lastpos.store.namespace import NamespaceStore

_READ_COMMANDS = frozenset({"get", "hgetall", "lindex", "zrevrange"})
_PROBE_COMMANDS = frozenset({"strlen", "hlen", "llen", "zcard"})


@dataclass
class FakeRedis:
    """In-memory stand-in for the read commands of ``redis.asyncio.Redis``.

    Keys keep insertion order so ``scan_iter`` is deterministic.
    """

    data: dict[str, tuple[str, Any]] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)
    down: bool = False
    ping_result: Any = True
    wrongtype_keys: set[str] = field(default_factory=set)
    probe_fail_keys: set[str] = field(default_factory=set)
    memory_fail_keys: set[str] = field(default_factory=set)
    unreachable_keys: set[str] = field(default_factory=set)
    slow_keys: set[str] = field(default_factory=set)
    stall_seconds: float = 10.0
    stalled: int = 0
    cancelled: int = 0
    closed: bool = False

    # -- seeding --------------------------------------------------------

    def set_string(self, key: str, value: Any) -> None:
        self.data[key] = ("string", value if isinstance(value, str) else json.dumps(value))

    def set_hash(self, key: str, mapping: dict[str, Any]) -> None:
        self.data[key] = ("hash", {k: str(v) for k, v in mapping.items()})

    def set_list(self, key: str, items: list[Any]) -> None:
        self.data[key] = ("list", [item if isinstance(item, str) else json.dumps(item) for item in items])

    def set_zset(self, key: str, members: dict[str, float]) -> None:
        self.data[key] = ("zset", dict(members))

    def set_other(self, key: str, type_name: str) -> None:
        self.data[key] = (type_name, object())

    # -- plumbing -------------------------------------------------------

    def _record(self, command: str, key: str | None = None) -> None:
        self.calls[command] = self.calls.get(command, 0) + 1
        if self.down or key in self.unreachable_keys:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        if key in self.wrongtype_keys and command in _READ_COMMANDS:
            raise ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        if key in self.probe_fail_keys and command in _PROBE_COMMANDS:
            raise ResponseError("ERR probe failed")

    def _value(self, key: str, type_name: str) -> Any:
        entry = self.data.get(key)
        if entry is None:
            return None
        if entry[0] != type_name:
            raise ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return entry[1]

    async def _stall(self, key: str) -> None:
        if key not in self.slow_keys:
            return
        self.stalled += 1
        try:
            await asyncio.sleep(self.stall_seconds)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.stalled -= 1

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    # -- commands -------------------------------------------------------

    async def exists(self, *names: str) -> int:
        self._record("exists", names[0] if names else None)
        if names:
            await self._stall(names[0])
        return sum(1 for name in names if name in self.data)

    async def type(self, name: str) -> str:
        self._record("type", name)
        entry = self.data.get(name)
        return entry[0] if entry else "none"

    async def get(self, name: str) -> str | None:
        self._record("get", name)
        return self._value(name, "string")

    async def hgetall(self, name: str) -> dict[str, str]:
        self._record("hgetall", name)
        return dict(self._value(name, "hash") or {})

    async def hlen(self, name: str) -> int:
        self._record("hlen", name)
        return len(self._value(name, "hash") or {})

    async def lindex(self, name: str, index: int) -> str | None:
        self._record("lindex", name)
        items = self._value(name, "list") or []
        try:
            return items[index]
        except IndexError:
            return None

    async def llen(self, name: str) -> int:
        self._record("llen", name)
        return len(self._value(name, "list") or [])

    async def zrevrange(self, name: str, start: int, end: int) -> list[str]:
        self._record("zrevrange", name)
        members = self._value(name, "zset") or {}
        ordered = sorted(members, key=lambda member: members[member], reverse=True)
        return ordered[start : end + 1]

    async def zcard(self, name: str) -> int:
        self._record("zcard", name)
        return len(self._value(name, "zset") or {})

    async def strlen(self, name: str) -> int:
        self._record("strlen", name)
        return len(self._value(name, "string") or "")

    async def scan_iter(self, match: str | None = None, count: int | None = None) -> AsyncIterator[str]:
        self._record("scan")
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def memory_usage(self, key: str) -> int | None:
        self._record("memory_usage", key)
        if key in self.memory_fail_keys:
            raise ResponseError("ERR MEMORY USAGE is disabled")
        return 64 if key in self.data else None

    async def ping(self) -> Any:
        self._record("ping")
        return self.ping_result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def config() -> LastPosConfig:
    return LastPosConfig()


@pytest.fixture
def device_store(fake_redis: FakeRedis, config: LastPosConfig) -> NamespaceStore:
    connection = RedisConnection(config, client=fake_redis, name="device namespace")
    return NamespaceStore(device_namespace(), connection)


@pytest.fixture
def mobile_store(fake_redis: FakeRedis, config: LastPosConfig) -> NamespaceStore:
    connection = RedisConnection(config, client=fake_redis, name="mobile namespace")
    return NamespaceStore(mobile_namespace(), connection)


@pytest.fixture
def device_service(device_store: NamespaceStore, config: LastPosConfig) -> LastPositionService:
    return LastPositionService(device_store, config)


@pytest.fixture
def mobile_service(mobile_store: NamespaceStore, config: LastPosConfig) -> LastPositionService:
    return LastPositionService(mobile_store, config)
