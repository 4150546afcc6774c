"""
FastAPI server for the vehicle search pipeline.

Usage:
    python -m carsearch.api.server
    # or
    uvicorn carsearch.api.server:app --reload --port 8000
"""
import traceback
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from carsearch import __version__
from carsearch.api.models import ClearCacheResponse, HealthResponse, SearchRequest, SearchResult
from carsearch.core.config import get_config
from carsearch.core.pipeline import VehicleSearchPipeline, create_pipeline
from carsearch.utils.logger import get_logger, set_level

logger = get_logger("api.server")

app = FastAPI(
    title="Vehicle Search API",
    description="Natural-language (English/Spanish) vehicle inventory search",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One pipeline (and its caches) per process
_pipeline: Optional[VehicleSearchPipeline] = None


def get_pipeline() -> VehicleSearchPipeline:
    """Get the process-wide pipeline, creating it from config on first use."""
    global _pipeline
    if _pipeline is None:
        config = get_config()
        set_level(config.log_level)
        _pipeline = create_pipeline(config)
        logger.info(f"Search pipeline ready (model={config.llm_model}, db={config.vehicle_db})")
    return _pipeline


def set_pipeline(pipeline: Optional[VehicleSearchPipeline]) -> None:
    """Install (or reset with None) the process-wide pipeline."""
    global _pipeline
    _pipeline = pipeline


@app.on_event("shutdown")
def shutdown_event():
    if _pipeline is not None:
        _pipeline.caches.close()


# API Endpoints

@app.get("/", response_model=HealthResponse)
def root():
    """Health check endpoint."""
    config = get_config()
    return HealthResponse(
        status="online",
        service="Vehicle Search API",
        version=__version__,
        config={
            "model": config.llm_model,
            "default_location": config.default_location,
            "tier_row_limit": config.tier_row_limit,
            "max_vehicles": config.max_vehicles_returned,
        },
    )


@app.post("/search", response_model=SearchResult)
def search(request: SearchRequest):
    """Run a natural-language vehicle search."""
    try:
        result = get_pipeline().search(request.query)
        return SearchResult(**result.to_dict())
    except Exception as e:
        logger.error(f"Error in /search: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/clear-cache", response_model=ClearCacheResponse)
def clear_cache():
    """Drop cached search results and response text."""
    try:
        cleared = get_pipeline().clear_caches()
        return ClearCacheResponse(status="ok", cleared=cleared)
    except Exception as e:
        logger.error(f"Error in /clear-cache: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("Vehicle Search API Server")
    print("=" * 60)
    print("API Documentation: http://localhost:8000/docs")
    print("")
    print("Environment variables:")
    print("  OPENAI_API_KEY        - Model access (searches degrade to deterministic parsing without it)")
    print("  CARSEARCH_VEHICLE_DB  - Path to the SQLite inventory")
    print("  LOG_LEVEL             - Logging level (default INFO)")
    print("=" * 60)

    uvicorn.run(app, host="0.0.0.0", port=8000)
