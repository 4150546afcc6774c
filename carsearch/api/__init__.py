"""
HTTP API for the vehicle search pipeline.
"""
from carsearch.api.models import (
    SearchRequest,
    SearchResult,
    ClearCacheResponse,
    HealthResponse,
)

__all__ = [
    "SearchRequest",
    "SearchResult",
    "ClearCacheResponse",
    "HealthResponse",
]
