"""Query service for one namespace.

Every operation follows the same flow: validate the request (no storage
access on failure), call the :class:`~lastpos.store.NamespaceStore`, then
project and summarize.  The service holds no per-request state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from lastpos._version import __version__
from lastpos.config import LastPosConfig
from lastpos.exceptions import LastPosError, PositionNotFoundError
from lastpos.models.namespace import NamespaceSpec
from lastpos.models.results import (
    BatchResult,
    BatchSummary,
    ExistenceResult,
    HealthStatus,
    ListingResult,
    ListingSummary,
    LookupOutcome,
    LookupStatus,
    PositionResult,
    ServiceStats,
)
from lastpos.models.view import View
from lastpos.store.namespace import NamespaceStore
from lastpos.validation import validate_batch, validate_identifier, validate_pagination
from lastpos.views import project

_logger = logging.getLogger(__name__)


def summarize_outcomes(outcomes: Sequence[LookupOutcome], requested_ids: Sequence[str], view: View) -> BatchSummary:
    """Fold per-id outcomes into a batch summary.

    ``requested`` counts distinct ids; every id that did not resolve to a
    record, including decode failures, counts as not found.
    """
    found_ids = {outcome.entity_id for outcome in outcomes if outcome.status == LookupStatus.FOUND}
    decode_error_ids = [outcome.entity_id for outcome in outcomes if outcome.status == LookupStatus.DECODE_ERROR]
    distinct = list(dict.fromkeys(requested_ids))
    not_found_ids = [entity_id for entity_id in distinct if entity_id not in found_ids]
    return BatchSummary(
        requested=len(distinct),
        found=len(distinct) - len(not_found_ids),
        not_found=len(not_found_ids),
        not_found_ids=not_found_ids,
        decode_error_ids=decode_error_ids,
        view=view,
    )


class LastPositionService:
    """Last-position queries for one namespace.

    Parameters
    ----------
    store : NamespaceStore
        Store for the namespace this service answers for.
    config : LastPosConfig
        Supplies the batch, page and identifier ceilings.
    """

    def __init__(self, store: NamespaceStore, config: LastPosConfig) -> None:
        self._store = store
        self._config = config

    @property
    def spec(self) -> NamespaceSpec:
        return self._store.spec

    @property
    def store(self) -> NamespaceStore:
        return self._store

    def _validate_id(self, entity_id: Any) -> str:
        return validate_identifier(entity_id, max_length=self._config.max_identifier_length)

    async def get_last_position(self, entity_id: Any, view: View | str = View.FULL) -> PositionResult:
        """Return the last position of one entity.

        Raises
        ------
        InvalidIdentifierError
            If *entity_id* is not a valid identifier.
        PositionNotFoundError
            If no decodable record exists.
        PositionDecodeError
            If the record exists but is corrupt.
        StoreUnavailableError
            If Redis is unreachable.
        """
        clean_id = self._validate_id(entity_id)
        resolved = View(view)
        _logger.info("Looking up last position for %s %s (view=%s)", self.spec.label, clean_id, resolved)

        record = await self._store.get(clean_id)
        if record is None:
            raise PositionNotFoundError(
                f"No last position found for {self.spec.label}: {clean_id}",
                entity_id=clean_id,
                namespace=str(self.spec.namespace),
            )
        return PositionResult(entity_id=clean_id, view=resolved, data=project(record, resolved))

    async def get_last_positions(self, entity_ids: Any, view: View | str = View.FULL) -> BatchResult:
        """Return the last positions of many entities with a not-found summary.

        Raises
        ------
        InvalidBatchError
            If the batch is empty, too large, or holds any invalid id.
        StoreUnavailableError
            If Redis is unreachable.
        """
        clean_ids = validate_batch(
            entity_ids,
            max_size=self._config.max_batch_size,
            max_length=self._config.max_identifier_length,
        )
        resolved = View(view)
        _logger.info("Looking up last positions for %d %s ids (view=%s)", len(clean_ids), self.spec.label, resolved)

        outcomes = await self._store.lookup_many(clean_ids)
        data = [project(outcome.record, resolved) for outcome in outcomes if outcome.record is not None]
        summary = summarize_outcomes(outcomes, clean_ids, resolved)
        if summary.decode_error_ids:
            _logger.warning(
                "Batch lookup skipped %d corrupt %s records: %s",
                len(summary.decode_error_ids),
                self.spec.label,
                summary.decode_error_ids,
            )
        return BatchResult(data=data, summary=summary)

    async def list_last_positions(
        self,
        limit: Any = None,
        offset: Any = None,
        view: View | str | None = None,
    ) -> ListingResult:
        """Return every last position in the namespace, paginated in memory.

        The page is sliced after projection from the full scanned set, so
        ``summary.total`` always reflects the whole namespace.

        Raises
        ------
        InvalidPaginationError
            If ``limit`` is outside ``1..max_page_limit`` or ``offset`` < 0.
        StoreUnavailableError
            If Redis is unreachable.
        """
        page = validate_pagination(limit, offset, max_limit=self._config.max_page_limit)
        resolved = self.spec.list_view if view is None else View(view)
        _logger.info("Listing all %s last positions (view=%s)", self.spec.label, resolved)

        records = await self._store.get_all()
        projected = [project(record, resolved) for record in records]
        data = projected[page.window(len(projected))]
        return ListingResult(
            data=data,
            summary=ListingSummary(
                total=len(projected),
                returned=len(data),
                offset=page.offset,
                limit=page.limit,
                view=resolved,
            ),
        )

    async def exists(self, entity_id: Any) -> ExistenceResult:
        """Report whether an entity has a last position.

        Absence is a normal result, never an error.
        """
        clean_id = self._validate_id(entity_id)
        found = await self._store.exists(clean_id)
        return ExistenceResult(entity_id=clean_id, exists=found)

    async def stats(self) -> ServiceStats:
        """Return key count, memory usage and connection state."""
        stats = await self._store.stats()
        healthy = await self._store.ping()
        return ServiceStats(
            namespace=str(self.spec.namespace),
            service=self.spec.service_name,
            version=__version__,
            stats=stats,
            store_connection="healthy" if healthy else "unhealthy",
        )

    async def health(self) -> HealthStatus:
        """Report namespace health.

        ``healthy`` is driven by the liveness probe alone.  When the probe
        succeeds but counting keys fails, the failure is reported in
        ``error`` rather than raised.
        """
        namespace = str(self.spec.namespace)
        if not await self._store.ping():
            return HealthStatus(namespace=namespace, healthy=False, store="unhealthy")
        try:
            keys = await self._store.keys()
        except LastPosError as exc:
            _logger.warning("Health check could not count %s keys: %s", self.spec.label, exc)
            return HealthStatus(namespace=namespace, healthy=True, store="healthy", error=str(exc))
        return HealthStatus(namespace=namespace, healthy=True, store="healthy", count=len(keys))
