"""Per-namespace read store over Redis.

This is the only component that talks to Redis.  It resolves ids to keys,
probes the physical type, and hands raw content to the decoder.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from redis.exceptions import RedisError

from lastpos._connection import CONNECTION_ERRORS, RedisBackend, RedisConnection
from lastpos.exceptions import PositionDecodeError, StoreUnavailableError
from lastpos.ingestion.decode import PhysicalType, decode, has_content, read_raw
from lastpos.ingestion.normalize import utc_now_iso
from lastpos.models.namespace import NamespaceSpec
from lastpos.models.position import PositionRecord
from lastpos.models.results import LookupOutcome, LookupStatus, StoreStats

_logger = logging.getLogger(__name__)


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for entity_id in ids:
        if entity_id not in seen:
            seen.add(entity_id)
            ordered.append(entity_id)
    return ordered


class NamespaceStore:
    """Read-only access to the records under one key prefix.

    The store never writes, deletes or expires keys.  Listings are
    point-in-time approximate: keys written or removed by producers during
    a scan may or may not appear.
    """

    def __init__(
        self,
        spec: NamespaceSpec,
        connection: RedisConnection,
        *,
        lookup_concurrency: int = 1,
        scan_count: int = 500,
    ) -> None:
        self._spec = spec
        self._connection = connection
        self._lookup_concurrency = max(1, lookup_concurrency)
        self._scan_count = scan_count

    @property
    def spec(self) -> NamespaceSpec:
        return self._spec

    @property
    def connection(self) -> RedisConnection:
        return self._connection

    async def _client(self) -> RedisBackend:
        return await self._connection.ensure_connected()

    async def _probe_type(self, client: RedisBackend, key: str) -> PhysicalType:
        return PhysicalType(await client.type(key))

    # ------------------------------------------------------------------
    # Single record
    # ------------------------------------------------------------------

    async def get(self, entity_id: str) -> PositionRecord | None:
        """Return the record for *entity_id*, or ``None`` if absent.

        The returned record's ``entity_id`` always equals *entity_id*, even
        when the stored payload omitted or mismatched it.  An empty
        *entity_id* names no record.

        Raises
        ------
        PositionDecodeError
            If the key exists but its content is corrupt.
        StoreUnavailableError
            If Redis is unreachable.
        """
        if not entity_id:
            return None
        key = self._spec.key_for(entity_id)
        client = await self._client()
        try:
            if not await client.exists(key):
                _logger.debug("No last position for %s %s", self._spec.label, entity_id)
                return None
            physical_type = await self._probe_type(client, key)
            raw = await read_raw(client, key, physical_type)
        except CONNECTION_ERRORS as exc:
            raise StoreUnavailableError(f"Redis unavailable while reading {key!r}: {exc}") from exc
        except RedisError as exc:
            # e.g. WRONGTYPE when a producer replaced the key between TYPE and the read
            raise PositionDecodeError(f"could not read {key!r}: {exc}", key=key) from exc

        record = decode(raw, physical_type, entity_id, self._spec, key=key)
        if record is None:
            _logger.debug("No decodable last position for %s %s", self._spec.label, entity_id)
            return None

        _logger.debug("Read last position for %s %s (%s)", self._spec.label, entity_id, physical_type)
        return record.model_copy(update={"entity_id": entity_id, "retrieved_at": utc_now_iso()})

    async def lookup(self, entity_id: str) -> LookupOutcome:
        """Resolve one id into an explicit outcome.

        Decode failures become ``DECODE_ERROR`` outcomes; connection
        failures still raise :class:`StoreUnavailableError`.
        """
        try:
            record = await self.get(entity_id)
        except PositionDecodeError as exc:
            _logger.warning("Skipping %s %s: %s", self._spec.label, entity_id, exc)
            return LookupOutcome(entity_id=entity_id, status=LookupStatus.DECODE_ERROR, error=str(exc))
        if record is None:
            return LookupOutcome(entity_id=entity_id, status=LookupStatus.NOT_FOUND)
        return LookupOutcome(entity_id=entity_id, status=LookupStatus.FOUND, record=record)

    # ------------------------------------------------------------------
    # Many records
    # ------------------------------------------------------------------

    async def lookup_many(self, entity_ids: Sequence[str]) -> list[LookupOutcome]:
        """Resolve every id independently, one outcome per distinct id.

        Outcomes follow the order of first appearance in *entity_ids*.
        """
        ids = _unique(entity_ids)
        if not ids:
            return []
        await self._client()

        if self._lookup_concurrency == 1:
            outcomes = []
            for entity_id in ids:
                outcomes.append(await self.lookup(entity_id))
            return outcomes

        semaphore = asyncio.Semaphore(self._lookup_concurrency)

        async def _bounded(entity_id: str) -> LookupOutcome:
            async with semaphore:
                return await self.lookup(entity_id)

        # A failing lookup cancels its siblings before the error reaches the caller.
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(_bounded(entity_id)) for entity_id in ids]
        except ExceptionGroup as group_exc:
            raise group_exc.exceptions[0] from None
        return [task.result() for task in tasks]

    async def get_many(self, entity_ids: Sequence[str]) -> list[PositionRecord]:
        """Return the records that exist among *entity_ids*.

        A single id failing to decode never aborts the batch; it is logged
        and left out.
        """
        outcomes = await self.lookup_many(entity_ids)
        records = [outcome.record for outcome in outcomes if outcome.record is not None]
        _logger.info(
            "Resolved %d/%d %s last positions",
            len(records),
            len(outcomes),
            self._spec.label,
        )
        return records

    async def keys(self) -> list[str]:
        """Enumerate keys under the namespace prefix with ``SCAN``."""
        client = await self._client()
        found: list[str] = []
        seen: set[str] = set()
        try:
            async for key in client.scan_iter(match=self._spec.key_pattern, count=self._scan_count):
                # SCAN may return a key more than once
                if key not in seen:
                    seen.add(key)
                    found.append(key)
        except CONNECTION_ERRORS as exc:
            raise StoreUnavailableError(f"Redis unavailable while scanning {self._spec.key_pattern!r}: {exc}") from exc
        except RedisError as exc:
            raise StoreUnavailableError(f"scan of {self._spec.key_pattern!r} failed: {exc}") from exc
        return found

    async def get_all(self) -> list[PositionRecord]:
        """Return every decodable record under the prefix, in scan order."""
        keys = await self.keys()
        if not keys:
            _logger.info("No %s last positions found", self._spec.label)
            return []
        ids = [self._spec.id_from_key(key) for key in keys]
        if "" in ids:
            _logger.warning("Ignoring key %r: it carries no %s id", self._spec.key_prefix, self._spec.label)
            ids = [entity_id for entity_id in ids if entity_id]
        outcomes = await self.lookup_many(ids)
        records = [outcome.record for outcome in outcomes if outcome.record is not None]
        _logger.info("Read %d %s last positions from %d keys", len(records), self._spec.label, len(keys))
        return records

    # ------------------------------------------------------------------
    # Existence, stats, liveness
    # ------------------------------------------------------------------

    async def exists(self, entity_id: str) -> bool:
        """Return whether *entity_id* has a key with non-empty content.

        An empty hash, list or sorted set counts as absent.  If the content
        probe itself fails the answer falls back to bare key presence, so
        ``exists`` can report ``True`` for a key ``get`` would not decode.
        """
        key = self._spec.key_for(entity_id)
        client = await self._client()
        try:
            present = bool(await client.exists(key))
        except CONNECTION_ERRORS as exc:
            raise StoreUnavailableError(f"Redis unavailable while checking {key!r}: {exc}") from exc
        except RedisError as exc:
            raise StoreUnavailableError(f"existence check for {key!r} failed: {exc}") from exc
        if not present:
            return False

        try:
            physical_type = await self._probe_type(client, key)
            if physical_type == PhysicalType.UNSUPPORTED:
                _logger.warning("Unsupported Redis type at %s", key)
            return await has_content(client, key, physical_type)
        except CONNECTION_ERRORS as exc:
            raise StoreUnavailableError(f"Redis unavailable while checking {key!r}: {exc}") from exc
        except RedisError as exc:
            _logger.warning("Content probe failed for %s, falling back to key presence: %s", key, exc)
            return present

    async def stats(self) -> StoreStats:
        """Count keys and sum per-key ``MEMORY USAGE``.

        Memory accounting failures for individual keys are ignored.
        """
        keys = await self.keys()
        client = await self._client()
        memory = 0
        for key in keys:
            try:
                usage = await client.memory_usage(key)
            except CONNECTION_ERRORS as exc:
                raise StoreUnavailableError(f"Redis unavailable while reading stats: {exc}") from exc
            except RedisError as exc:
                _logger.debug("Ignoring memory usage failure for %s: %s", key, exc)
                continue
            memory += int(usage or 0)
        return StoreStats(count=len(keys), memory_bytes=memory, key_pattern=self._spec.key_pattern)

    async def ping(self) -> bool:
        return await self._connection.ping()

    async def close(self) -> None:
        await self._connection.close()
