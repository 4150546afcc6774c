"""
Vehicle search pipeline.

Flow for one query:
    normalize -> results cache -> language -> intent -> extraction
    -> tier queries -> tiered execution -> suggestions (zero rows only)
    -> response text -> cache

Every stage has a deterministic fallback, so ``search`` always returns a
``SearchResponse``. Failures reported to the caller are an inventory that
could not be reached on any tier, and an unexpected error, which is logged
and answered with a generic invitation to add detail (naming the brand when
the query mentions one).
"""
import dataclasses
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from carsearch.cache.ttl_cache import SearchCaches
from carsearch.core.config import SearchConfig, get_config
from carsearch.data.vehicle_store import LocalVehicleStore, VehicleRecord, VehicleStore
from carsearch.llm.client import OpenAIChatClient
from carsearch.parsing.intent_classifier import IntentClassifier
from carsearch.parsing.language_detector import detect_language
from carsearch.parsing.parameter_extractor import ParameterExtractor
from carsearch.query.query_builder import build_tiers
from carsearch.response.suggestions import SuggestionGenerator, SuggestionSet
from carsearch.response.synthesizer import ResponseSynthesizer, region_name
from carsearch.search.executor import SearchExecutor
from carsearch.utils.logger import get_logger
from carsearch.vocabulary.tables import BRAND_ALIASES
from carsearch.vocabulary.text import first_term, normalize_query

logger = get_logger("core.pipeline")

INVENTORY_UNAVAILABLE = "inventory_unavailable"
PROCESSING_ERROR = "processing_error"

MESSAGES = {
    "en": {
        "empty": "Please tell us what vehicle you are looking for.",
        "not_vehicle": (
            "I can only help with vehicle searches in {region}. "
            "Try asking about a brand, a model or a type of vehicle."
        ),
        "unavailable": (
            "Our vehicle inventory is temporarily unavailable, so we could not search for "
            "\"{query}\". Please try again in a few minutes."
        ),
        "fallback": (
            "We'd be happy to help you find a vehicle in {region}. "
            "Could you tell us more about what you're looking for?"
        ),
        "fallback_brand": (
            "We'd be happy to help you find a {brand} vehicle in {region}. "
            "Could you tell us which model or features you're looking for?"
        ),
    },
    "es": {
        "empty": "Por favor indíquenos qué vehículo está buscando.",
        "not_vehicle": (
            "Solo puedo ayudarle con búsquedas de vehículos en {region}. "
            "Pruebe preguntando por una marca, un modelo o un tipo de vehículo."
        ),
        "unavailable": (
            "Nuestro inventario de vehículos no está disponible en este momento, por lo que no "
            "pudimos buscar \"{query}\". Por favor intente de nuevo en unos minutos."
        ),
        "fallback": (
            "Con gusto le ayudamos a encontrar un vehículo en {region}. "
            "¿Podría darnos más detalles sobre lo que busca?"
        ),
        "fallback_brand": (
            "Con gusto le ayudamos a encontrar un vehículo {brand} en {region}. "
            "¿Podría indicarnos qué modelo o características busca?"
        ),
    },
}


@dataclass
class SearchResponse:
    """Result of one natural-language vehicle search."""
    query: str
    response: str
    language: str = "en"
    vehicles: List[VehicleRecord] = field(default_factory=list)
    total_results: int = 0
    processing_time_ms: int = 0
    is_vehicle_query: bool = True
    tier: Optional[str] = None                        # tier that produced the rows
    extracted_params: Optional[Dict[str, Any]] = None
    query_type: Optional[str] = None                  # 'technical' or 'general'
    extraction_source: Optional[str] = None           # 'llm' or 'deterministic'
    suggestions: Optional[SuggestionSet] = None       # zero-result searches only
    search_attempts: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "response": self.response,
            "language": self.language,
            "vehicles": [vehicle.to_dict() for vehicle in self.vehicles],
            "total_results": self.total_results,
            "processing_time_ms": self.processing_time_ms,
            "is_vehicle_query": self.is_vehicle_query,
            "tier": self.tier,
            "extracted_params": self.extracted_params,
            "query_type": self.query_type,
            "extraction_source": self.extraction_source,
            "suggestions": self.suggestions.model_dump() if self.suggestions else None,
            "search_attempts": self.search_attempts,
            "error": self.error,
        }


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class VehicleSearchPipeline:
    """
    Orchestrates a natural-language vehicle search.

    Args:
        llm: Chat client exposing ``complete(...)``
        store: Inventory store
        caches: Result/response caches owned by this pipeline
        config: Search configuration
    """

    def __init__(
        self,
        llm,
        store: VehicleStore,
        caches: Optional[SearchCaches] = None,
        config: Optional[SearchConfig] = None,
    ):
        self.config = config or get_config()
        self.llm = llm
        self.store = store
        self.caches = caches or SearchCaches(self.config)

        self.classifier = IntentClassifier(llm, self.config)
        self.extractor = ParameterExtractor(llm, self.config)
        self.executor = SearchExecutor(store)
        self.synthesizer = ResponseSynthesizer(llm, self.caches.responses, self.config)
        self.suggester = SuggestionGenerator(llm, self.config)

    def _message(self, key: str, language: str, **values: Any) -> str:
        return MESSAGES.get(language, MESSAGES["en"])[key].format(**values)

    def search(self, query: str) -> SearchResponse:
        """
        Run a natural-language vehicle search.

        Args:
            query: Free text in English or Spanish

        Returns:
            SearchResponse (a cached instance for repeated queries within the TTL)
        """
        started = time.perf_counter()
        normalized = normalize_query(query)

        if not normalized:
            return SearchResponse(
                query=query or "",
                response=self._message("empty", "en"),
                processing_time_ms=_elapsed_ms(started),
            )

        cached = self.caches.results.get(normalized)
        if cached is not None:
            logger.info(f"Results cache hit for '{normalized}'")
            return cached

        try:
            return self._search(query, normalized, started)
        except Exception as e:
            logger.error(f"Search failed for '{normalized}': {e}\n{traceback.format_exc()}")
            return self._fallback_response(query, normalized, started)

    def _fallback_response(self, query: str, normalized: str, started: float) -> SearchResponse:
        """Generic answer for an unexpected failure; not cached."""
        language = detect_language(normalized)
        region = region_name(None, language, self.config)
        brand = None
        for canonical, aliases in BRAND_ALIASES.items():
            if first_term(normalized, aliases):
                brand = canonical
                break
        if brand:
            label = brand.upper() if len(brand) <= 3 else brand.title()
            text = self._message("fallback_brand", language, brand=label, region=region)
        else:
            text = self._message("fallback", language, region=region)
        return SearchResponse(
            query=query,
            response=text,
            language=language,
            processing_time_ms=_elapsed_ms(started),
            error=PROCESSING_ERROR,
        )

    def _search(self, query: str, normalized: str, started: float) -> SearchResponse:
        language = detect_language(normalized)
        logger.info(f"Search query: '{normalized}' (language={language})")

        if not self.classifier.is_vehicle_query(normalized):
            logger.info("Query is not about vehicles")
            region = region_name(None, language, self.config)
            response = SearchResponse(
                query=query,
                response=self._message("not_vehicle", language, region=region),
                language=language,
                is_vehicle_query=False,
                processing_time_ms=_elapsed_ms(started),
            )
            self.caches.results.set(normalized, response)
            return response

        extraction = self.extractor.extract(normalized, language)
        parameters = extraction.parameters
        params_dict = parameters.model_dump(exclude_none=True)

        tiers = build_tiers(parameters, normalized, self.config)
        execution = self.executor.execute(tiers)
        attempts = [attempt.to_dict() for attempt in execution.attempts]

        if execution.store_unavailable:
            logger.error("Vehicle inventory unreachable on every tier")
            return SearchResponse(
                query=query,
                response=self._message("unavailable", language, query=query.strip()),
                language=language,
                extracted_params=params_dict,
                query_type=extraction.query_type,
                extraction_source=extraction.source,
                search_attempts=attempts,
                processing_time_ms=_elapsed_ms(started),
                error=INVENTORY_UNAVAILABLE,
            )

        suggestions = None
        if execution.total == 0:
            suggestions = self.suggester.generate(normalized, language, params_dict)

        text = self.synthesizer.synthesize(
            normalized,
            language,
            execution.rows,
            execution.total,
            suggestions=suggestions,
            location=parameters.location,
        )

        response = SearchResponse(
            query=query,
            response=text,
            language=language,
            vehicles=execution.rows[:self.config.max_vehicles_returned],
            total_results=execution.total,
            tier=execution.tier.name.lower(),
            extracted_params=params_dict,
            query_type=extraction.query_type,
            extraction_source=extraction.source,
            suggestions=suggestions,
            search_attempts=attempts,
            processing_time_ms=_elapsed_ms(started),
        )
        self.caches.results.set(normalized, response)
        logger.info(
            f"Search complete: {response.total_results} results via {response.tier} "
            f"in {response.processing_time_ms}ms"
        )
        return response

    def clear_caches(self) -> Dict[str, int]:
        """Drop all cached results and response text."""
        return self.caches.clear()


def create_pipeline(config: Optional[SearchConfig] = None, **kwargs) -> VehicleSearchPipeline:
    """
    Factory function to wire a pipeline from configuration.

    Args:
        config: Configuration object (global config if omitted)
        **kwargs: Config attributes to override on a copy of ``config``

    Returns:
        VehicleSearchPipeline backed by OpenAI and the local SQLite inventory
    """
    base = config or get_config()
    names = {f.name for f in dataclasses.fields(base)}
    overrides = {key: value for key, value in kwargs.items() if key in names}
    # Copy, so overrides never leak into the shared global config
    config = dataclasses.replace(base, **overrides)

    llm = OpenAIChatClient(config)
    store = LocalVehicleStore(config=config)
    return VehicleSearchPipeline(llm, store, SearchCaches(config), config)
