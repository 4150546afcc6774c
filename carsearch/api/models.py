"""
Pydantic models for the search API requests and responses.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class SearchRequest(BaseModel):
    """Request model for the search endpoint."""
    query: str = Field(description="Free-text vehicle query in English or Spanish")


class SearchResult(BaseModel):
    """Response model for the search endpoint."""
    query: str
    response: str = Field(description="Answer text in the query's language")
    language: str = Field(description="'en' or 'es'")
    vehicles: List[Dict[str, Any]] = Field(default_factory=list, description="Up to 10 matching vehicles")
    total_results: int = Field(default=0, description="Rows returned by the winning tier")
    processing_time_ms: int = 0
    is_vehicle_query: bool = True
    tier: Optional[str] = Field(default=None, description="'optimized', 'simplified' or 'keyword'")
    extracted_params: Optional[Dict[str, Any]] = None
    query_type: Optional[str] = Field(default=None, description="'technical' or 'general'")
    extraction_source: Optional[str] = Field(default=None, description="'llm' or 'deterministic'")
    suggestions: Optional[Dict[str, Any]] = Field(default=None, description="Present only when nothing matched")
    search_attempts: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None


class ClearCacheResponse(BaseModel):
    """Response model for cache clearing."""
    status: str
    cleared: Dict[str, int] = Field(default_factory=dict, description="Entries removed per cache")


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    service: str
    version: str
    config: Dict[str, Any]
