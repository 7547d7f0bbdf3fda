"""lastpos - Async last-known-position lookups over Redis."""

from lastpos._version import __version__
from lastpos.client import LastPositionClient
from lastpos.config import LastPosConfig
from lastpos.exceptions import (
    ErrorCode,
    InvalidBatchError,
    InvalidIdentifierError,
    InvalidPaginationError,
    LastPosConfigError,
    LastPosError,
    LastPosValidationError,
    PositionDecodeError,
    PositionNotFoundError,
    StoreUnavailableError,
)
from lastpos.models import (
    BatchResult,
    BatchSummary,
    ExistenceResult,
    HealthStatus,
    ListingResult,
    ListingSummary,
    Namespace,
    PositionRecord,
    PositionResult,
    ServiceStats,
    StoreStats,
    View,
)
from lastpos.service import LastPositionService
from lastpos.views import project

__all__ = [
    "__version__",
    "BatchResult",
    "BatchSummary",
    "ErrorCode",
    "ExistenceResult",
    "HealthStatus",
    "InvalidBatchError",
    "InvalidIdentifierError",
    "InvalidPaginationError",
    "LastPosConfig",
    "LastPosConfigError",
    "LastPosError",
    "LastPosValidationError",
    "LastPositionClient",
    "LastPositionService",
    "ListingResult",
    "ListingSummary",
    "Namespace",
    "PositionDecodeError",
    "PositionNotFoundError",
    "PositionRecord",
    "PositionResult",
    "ServiceStats",
    "StoreStats",
    "StoreUnavailableError",
    "View",
    "project",
]
