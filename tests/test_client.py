from __future__ import annotations

import pytest
from conftest import FakeRedis

from lastpos import LastPosConfig, LastPositionClient, Namespace, PositionNotFoundError


@pytest.mark.asyncio
async def test_namespaces_are_independent(fake_redis: FakeRedis) -> None:
    fake_redis.set_hash("gps:last:shared-1", {"lat": "1", "lng": "1"})
    fake_redis.set_hash("mobile:last:shared-1", {"userId": "shared-1", "lat": "2", "lng": "2", "name": "Ana"})

    async with LastPositionClient(redis=fake_redis) as client:
        device = await client.devices.get_last_position("shared-1")
        mobile = await client.mobile.get_last_position("shared-1", "mobile")

    assert device.data["lat"] == 1.0
    assert mobile.data == {"id": "shared-1", "lat": 2.0, "lng": 2.0, "name": "Ana"}


@pytest.mark.asyncio
async def test_custom_prefixes_are_honored(fake_redis: FakeRedis) -> None:
    fake_redis.set_hash("tracker:last:t-1", {"lat": "5"})
    config = LastPosConfig(device_key_prefix="tracker:last:")

    async with LastPositionClient(config, redis=fake_redis) as client:
        result = await client.devices.get_last_position("t-1")
        with pytest.raises(PositionNotFoundError):
            await client.mobile.get_last_position("t-1")

    assert result.data["lat"] == 5.0


@pytest.mark.asyncio
async def test_service_lookup_by_name(fake_redis: FakeRedis) -> None:
    client = LastPositionClient(redis=fake_redis)

    assert client.service("device") is client.devices
    assert client.service(Namespace.MOBILE) is client.mobile
    with pytest.raises(KeyError):
        client.service("vehicles")

    await client.close()


@pytest.mark.asyncio
async def test_health_covers_every_namespace(fake_redis: FakeRedis) -> None:
    fake_redis.set_hash("mobile:last:user-1", {"lat": "1"})

    async with LastPositionClient(redis=fake_redis) as client:
        health = await client.health()

    assert set(health) == {"device", "mobile"}
    assert health["device"].count == 0
    assert health["mobile"].count == 1


@pytest.mark.asyncio
async def test_close_leaves_shared_client_open(fake_redis: FakeRedis) -> None:
    async with LastPositionClient(redis=fake_redis) as client:
        await client.devices.exists("device-001")

    assert fake_redis.closed is False
