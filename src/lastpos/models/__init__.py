"""Data models for lastpos records, requests and results."""

from lastpos.models._base import LastPosBaseModel
from lastpos.models.namespace import Namespace, NamespaceSpec, device_namespace, mobile_namespace
from lastpos.models.position import PositionRecord
from lastpos.models.requests import PageRequest
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
    StoreStats,
)
from lastpos.models.view import View

__all__ = [
    "BatchResult",
    "BatchSummary",
    "ExistenceResult",
    "HealthStatus",
    "LastPosBaseModel",
    "ListingResult",
    "ListingSummary",
    "LookupOutcome",
    "LookupStatus",
    "Namespace",
    "NamespaceSpec",
    "PageRequest",
    "PositionRecord",
    "PositionResult",
    "ServiceStats",
    "StoreStats",
    "View",
    "device_namespace",
    "mobile_namespace",
]
