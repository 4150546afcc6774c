"""
Configuration management for carsearch.

Loads settings from ``config/default.yaml`` and exposes them as a typed
dataclass. A few deployment values can be overridden from the environment
(``.env`` files are honoured).
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of the carsearch package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"


@dataclass
class SearchConfig:
    """Configuration for the vehicle search pipeline."""

    # Language model
    llm_model: str = "gpt-4o-mini"
    extraction_timeout: float = 5.0       # seconds, parameter extraction
    classification_timeout: float = 5.0   # seconds, intent fallback check
    synthesis_timeout: float = 4.0        # seconds, response text
    suggestion_timeout: float = 5.0       # seconds, suggestion set
    translation_timeout: float = 5.0      # seconds, batched Spanish translation
    extraction_max_tokens: int = 350
    classification_max_tokens: int = 10
    synthesis_max_tokens: int = 250
    suggestion_max_tokens: int = 600
    translation_max_tokens: int = 600
    extraction_temperature: float = 0.1
    classification_temperature: float = 0.1
    synthesis_temperature: float = 0.6
    suggestion_temperature: float = 0.7

    # Inventory store
    vehicle_db: str = "data/vehicles.db"
    query_timeout: float = 5.0            # seconds per tier
    tier_row_limit: int = 15
    similarity_threshold: float = 0.4     # fuzzy model match in the optimized tier

    # Response shaping
    max_vehicles_returned: int = 10
    synthesis_sample_size: int = 3

    # Caches (seconds)
    pipeline_cache_ttl: float = 1800.0
    response_cache_ttl: float = 600.0

    # Market region injected when the query names none
    default_location: str = "Dominican Republic"
    default_location_aliases: List[str] = field(
        default_factory=lambda: ["República Dominicana", "Republica Dominicana"]
    )

    log_level: str = "INFO"

    def resolve_db_path(self) -> Path:
        """Return the store path, relative paths resolved against the project root."""
        path = Path(self.vehicle_db)
        if not path.is_absolute():
            path = _project_root() / path
        return path

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "SearchConfig":
        """Load configuration from YAML file, then apply environment overrides."""
        path = config_path or DEFAULT_CONFIG_PATH
        data: Dict[str, Any] = {}
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

        defaults = cls()
        llm_config = data.get('llm', {})
        timeouts = llm_config.get('timeouts', {})
        max_tokens = llm_config.get('max_tokens', {})
        temperatures = llm_config.get('temperatures', {})
        store_config = data.get('store', {})
        response_config = data.get('response', {})
        cache_config = data.get('cache', {})
        location_config = data.get('location', {})

        config = cls(
            llm_model=llm_config.get('model', defaults.llm_model),
            extraction_timeout=timeouts.get('extraction', defaults.extraction_timeout),
            classification_timeout=timeouts.get('classification', defaults.classification_timeout),
            synthesis_timeout=timeouts.get('synthesis', defaults.synthesis_timeout),
            suggestion_timeout=timeouts.get('suggestions', defaults.suggestion_timeout),
            translation_timeout=timeouts.get('translation', defaults.translation_timeout),
            extraction_max_tokens=max_tokens.get('extraction', defaults.extraction_max_tokens),
            classification_max_tokens=max_tokens.get('classification', defaults.classification_max_tokens),
            synthesis_max_tokens=max_tokens.get('synthesis', defaults.synthesis_max_tokens),
            suggestion_max_tokens=max_tokens.get('suggestions', defaults.suggestion_max_tokens),
            translation_max_tokens=max_tokens.get('translation', defaults.translation_max_tokens),
            extraction_temperature=temperatures.get('extraction', defaults.extraction_temperature),
            classification_temperature=temperatures.get('classification', defaults.classification_temperature),
            synthesis_temperature=temperatures.get('synthesis', defaults.synthesis_temperature),
            suggestion_temperature=temperatures.get('suggestions', defaults.suggestion_temperature),
            vehicle_db=store_config.get('vehicle_db', defaults.vehicle_db),
            query_timeout=store_config.get('query_timeout', defaults.query_timeout),
            tier_row_limit=store_config.get('tier_row_limit', defaults.tier_row_limit),
            similarity_threshold=store_config.get('similarity_threshold', defaults.similarity_threshold),
            max_vehicles_returned=response_config.get('max_vehicles', defaults.max_vehicles_returned),
            synthesis_sample_size=response_config.get('sample_size', defaults.synthesis_sample_size),
            pipeline_cache_ttl=cache_config.get('pipeline_ttl', defaults.pipeline_cache_ttl),
            response_cache_ttl=cache_config.get('response_ttl', defaults.response_cache_ttl),
            default_location=location_config.get('default', defaults.default_location),
            default_location_aliases=location_config.get('aliases', defaults.default_location_aliases),
            log_level=data.get('log_level', defaults.log_level),
        )

        # Deployment overrides
        config.llm_model = os.getenv("CARSEARCH_LLM_MODEL", config.llm_model)
        config.vehicle_db = os.getenv("CARSEARCH_VEHICLE_DB", config.vehicle_db)
        config.default_location = os.getenv("CARSEARCH_DEFAULT_LOCATION", config.default_location)
        return config


# Global config instance
_config: Optional[SearchConfig] = None


def get_config() -> SearchConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = SearchConfig.from_yaml()
    return _config


def set_config(config: Optional[SearchConfig]) -> None:
    """Set (or reset with None) the global configuration instance."""
    global _config
    _config = config
