"""
carsearch - natural-language vehicle search

Turns English or Spanish free text into bounded, parameterized searches
against a vehicle inventory with:
- Keyword-first intent detection and deterministic language detection
- Model-based parameter extraction with a dictionary fallback
- Three-tier query relaxation (optimized, simplified, keyword)
- Suggestions and a template response when nothing matches
"""

__version__ = '0.1.0'

from carsearch.core.config import SearchConfig, get_config, set_config
from carsearch.core.pipeline import SearchResponse, VehicleSearchPipeline, create_pipeline

__all__ = [
    'VehicleSearchPipeline',
    'SearchResponse',
    'create_pipeline',
    'SearchConfig',
    'get_config',
    'set_config',
]
