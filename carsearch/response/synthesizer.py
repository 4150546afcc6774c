"""
Natural-language response text for a search result.

The model writes a short answer in the query's language; if it fails or
times out a fixed bilingual template stating the result count is used.
Model answers are memoized per (language, result count, query).
"""
from typing import List, Optional

from carsearch.cache.ttl_cache import TTLCache
from carsearch.core.config import SearchConfig, get_config
from carsearch.core.errors import LLMError, ResponseSynthesisError
from carsearch.data.vehicle_store import VehicleRecord
from carsearch.response.suggestions import SuggestionSet
from carsearch.utils.logger import get_logger

logger = get_logger("response.synthesizer")

TEMPLATES = {
    "en": {
        "found_one": "We found 1 vehicle in {region} that matches your search.",
        "found_many": "We found {count} vehicles in {region} that match your search.",
        "none": (
            "We couldn't find vehicles in {region} that match your search. "
            "Try broadening your criteria, for example another model or a wider price range."
        ),
    },
    "es": {
        "found_one": "Encontramos 1 vehículo en {region} que coincide con su búsqueda.",
        "found_many": "Encontramos {count} vehículos en {region} que coinciden con su búsqueda.",
        "none": (
            "No encontramos vehículos en {region} que coincidan con su búsqueda. "
            "Intente ampliar sus criterios, por ejemplo otro modelo o un rango de precio más amplio."
        ),
    },
}

SYNTHESIS_PROMPT = """You are a helpful vehicle sales assistant for a car marketplace in {region}.
Write a short, friendly answer (at most 3 sentences) to the customer's search.
Answer ONLY in {language_name}. Mention how many vehicles were found.
If nothing was found, explain briefly and point to the alternatives provided.
Do not invent vehicles that are not listed."""


def response_cache_key(language: str, count: int, normalized_query: str) -> str:
    return f"resp:{language}:{count}:{normalized_query}"


def region_name(location: Optional[str], language: str, config: SearchConfig) -> str:
    """Display name of the search region in the response language."""
    location = location or config.default_location
    if (
        language == "es"
        and location.lower() == config.default_location.lower()
        and config.default_location_aliases
    ):
        return config.default_location_aliases[0]
    return location


def template_response(count: int, language: str, region: str) -> str:
    """Deterministic fallback text."""
    templates = TEMPLATES.get(language, TEMPLATES["en"])
    if count == 0:
        return templates["none"].format(region=region)
    if count == 1:
        return templates["found_one"].format(region=region)
    return templates["found_many"].format(count=count, region=region)


def _describe(record: VehicleRecord) -> str:
    details = [record.title() or "vehicle"]
    if record.price:
        details.append(f"price {record.price}")
    if record.exterior:
        details.append(f"color {record.exterior}")
    if record.engine:
        details.append(f"engine {record.engine}")
    return ", ".join(details)


class ResponseSynthesizer:
    """Writes the answer text shown with search results."""

    def __init__(self, llm, cache: TTLCache, config: Optional[SearchConfig] = None):
        self.llm = llm
        self.cache = cache
        self.config = config or get_config()

    def _build_messages(
        self,
        query: str,
        language: str,
        region: str,
        records: List[VehicleRecord],
        total: int,
        suggestions: Optional[SuggestionSet],
    ) -> List[dict]:
        lines = [f"Customer query: \"{query}\"", f"Vehicles found: {total}"]
        samples = records[:self.config.synthesis_sample_size]
        if samples:
            lines.append("Sample results:")
            lines.extend(f"- {_describe(record)}" for record in samples)
        if total == 0 and suggestions:
            lines.append(f"Analysis: {suggestions.analysis}")
            if suggestions.alternative_searches:
                lines.append("Alternatives:")
                lines.extend(f"- {alt.description}" for alt in suggestions.alternative_searches)
        system = SYNTHESIS_PROMPT.format(
            region=region,
            language_name="Spanish" if language == "es" else "English",
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": "\n".join(lines)},
        ]

    def _generate(self, messages: List[dict]) -> str:
        try:
            return self.llm.complete(
                messages,
                temperature=self.config.synthesis_temperature,
                max_tokens=self.config.synthesis_max_tokens,
                timeout=self.config.synthesis_timeout,
            )
        except LLMError as exc:
            raise ResponseSynthesisError(str(exc)) from exc

    def synthesize(
        self,
        query: str,
        language: str,
        records: List[VehicleRecord],
        total: int,
        suggestions: Optional[SuggestionSet] = None,
        location: Optional[str] = None,
    ) -> str:
        """
        Produce response text for a search result.

        Args:
            query: Normalized query text (also the cache key component)
            language: "en" or "es"
            records: Result rows; the first few are shown to the model
            total: Number of rows found
            suggestions: Zero-result suggestions, if any
            location: Search region

        Returns:
            Model text, or the template text when the model is unavailable
        """
        key = response_cache_key(language, total, query)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Using cached response text")
            return cached

        region = region_name(location, language, self.config)
        messages = self._build_messages(query, language, region, records, total, suggestions)
        try:
            text = self._generate(messages)
        except ResponseSynthesisError as exc:
            logger.warning(f"Response synthesis fell back to template: {exc}")
            return template_response(total, language, region)

        self.cache.set(key, text)
        return text
