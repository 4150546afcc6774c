"""
Suggestions for searches that found nothing.

The model diagnoses why the search came up empty and proposes relaxed
alternatives plus follow-up questions. Spanish output is produced by a
single batched translation call. Any failure yields a deterministic set
built from the extracted parameters, in the query's language.
"""
import json
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field, StringConstraints, ValidationError

from carsearch.core.config import SearchConfig, get_config
from carsearch.core.errors import LLMError, SuggestionGenerationError, TranslationError
from carsearch.utils.logger import get_logger

logger = get_logger("response.suggestions")

# Blank strings are schema errors, so they take the canned fallback
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class AlternativeSearch(BaseModel):
    """A relaxed version of the original search."""
    description: Text = Field(..., description="Short description shown to the user")
    modified_parameters: Dict[str, Any] = Field(default_factory=dict)


class SuggestionSet(BaseModel):
    """Diagnosis and alternatives for a zero-result search."""
    analysis: Text
    alternative_searches: List[AlternativeSearch] = Field(default_factory=list)
    follow_up_questions: List[Text] = Field(..., min_length=1)


class TranslatedSuggestions(BaseModel):
    """Shape of the batched translation answer."""
    analysis: Text
    follow_up_questions: List[Text]
    alternative_descriptions: List[Text]


SUGGESTION_PROMPT = """You are a vehicle search expert. A customer's search returned no vehicles.
Analyze why and propose alternatives.

Return JSON ONLY:
{
  "analysis": "one or two sentences on why nothing matched",
  "alternative_searches": [
    {"description": "short description", "modified_parameters": {...search parameters...}}
  ],
  "follow_up_questions": ["question", "question"]
}
Give exactly 3 alternative_searches (each relaxing or changing one constraint) and 2 follow_up_questions."""

TRANSLATION_PROMPT = """Translate every string value in this JSON from English to Spanish.
Keep the same keys and the same number of items in each list, in the same order.
Return JSON ONLY."""

CANNED = {
    "en": {
        "analysis": "The search may be too specific.",
        "broaden": "Try broadening your search",
        "questions": [
            "Which features are most important to you?",
            "Would you consider other brands or models?",
        ],
        "relax": {
            "color": "Search without the color requirement",
            "engine_specs": "Search without the engine requirements",
            "price_range": "Search without the price limit",
            "year_range": "Search any model year",
            "fuel_type": "Search any fuel type",
            "model": "Search other models from the same brand",
        },
    },
    "es": {
        "analysis": "La búsqueda puede ser demasiado específica.",
        "broaden": "Intente ampliar su búsqueda",
        "questions": [
            "¿Qué características son más importantes para usted?",
            "¿Consideraría otras marcas o modelos?",
        ],
        "relax": {
            "color": "Buscar sin el requisito de color",
            "engine_specs": "Buscar sin los requisitos de motor",
            "price_range": "Buscar sin el límite de precio",
            "year_range": "Buscar cualquier año",
            "fuel_type": "Buscar cualquier tipo de combustible",
            "model": "Buscar otros modelos de la misma marca",
        },
    },
}

# Constraints dropped first when building deterministic alternatives
RELAXATION_ORDER = ["color", "engine_specs", "fuel_type", "price_range", "year_range", "model"]
MAX_ALTERNATIVES = 3


def canned_suggestions(parameters: Dict[str, Any], language: str) -> SuggestionSet:
    """Deterministic suggestion set: drop one constraint at a time, least important first."""
    text = CANNED.get(language, CANNED["en"])
    alternatives: List[AlternativeSearch] = []
    for name in RELAXATION_ORDER:
        if len(alternatives) >= MAX_ALTERNATIVES:
            break
        if parameters.get(name) is None:
            continue
        relaxed = {k: v for k, v in parameters.items() if k != name}
        alternatives.append(AlternativeSearch(description=text["relax"][name], modified_parameters=relaxed))
    if not alternatives:
        alternatives.append(AlternativeSearch(description=text["broaden"], modified_parameters={}))
    return SuggestionSet(
        analysis=text["analysis"],
        alternative_searches=alternatives,
        follow_up_questions=list(text["questions"]),
    )


def _load_json(raw: str, error_cls: type) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise error_cls(f"Invalid JSON from model: {exc}") from exc
    if not isinstance(data, dict):
        raise error_cls("Model JSON is not an object")
    return data


class SuggestionGenerator:
    """Builds a ``SuggestionSet`` for zero-result searches."""

    def __init__(self, llm, config: Optional[SearchConfig] = None):
        self.llm = llm
        self.config = config or get_config()

    def _generate_english(self, query: str, parameters: Dict[str, Any]) -> SuggestionSet:
        user = (
            f"Customer query: \"{query}\"\n"
            f"Search parameters: {json.dumps(parameters, ensure_ascii=False)}"
        )
        try:
            raw = self.llm.complete(
                [
                    {"role": "system", "content": SUGGESTION_PROMPT},
                    {"role": "user", "content": user},
                ],
                temperature=self.config.suggestion_temperature,
                max_tokens=self.config.suggestion_max_tokens,
                timeout=self.config.suggestion_timeout,
                json_output=True,
            )
        except LLMError as exc:
            raise SuggestionGenerationError(str(exc)) from exc

        data = _load_json(raw, SuggestionGenerationError)
        try:
            return SuggestionSet.model_validate(data)
        except ValidationError as exc:
            raise SuggestionGenerationError(f"Suggestion JSON violates schema: {exc.error_count()} errors") from exc

    def translate(self, suggestions: SuggestionSet) -> SuggestionSet:
        """Translate analysis, questions and alternative descriptions in one model call."""
        payload = {
            "analysis": suggestions.analysis,
            "follow_up_questions": suggestions.follow_up_questions,
            "alternative_descriptions": [alt.description for alt in suggestions.alternative_searches],
        }
        try:
            raw = self.llm.complete(
                [
                    {"role": "system", "content": TRANSLATION_PROMPT},
                    {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
                ],
                temperature=0.0,
                max_tokens=self.config.translation_max_tokens,
                timeout=self.config.translation_timeout,
                json_output=True,
            )
        except LLMError as exc:
            raise TranslationError(str(exc)) from exc

        data = _load_json(raw, TranslationError)
        try:
            translated = TranslatedSuggestions.model_validate(data)
        except ValidationError as exc:
            raise TranslationError(f"Translation JSON violates schema: {exc.error_count()} errors") from exc

        if (
            len(translated.follow_up_questions) != len(suggestions.follow_up_questions)
            or len(translated.alternative_descriptions) != len(suggestions.alternative_searches)
        ):
            raise TranslationError("Translation changed the number of items")

        try:
            return SuggestionSet(
                analysis=translated.analysis,
                follow_up_questions=translated.follow_up_questions,
                alternative_searches=[
                    AlternativeSearch(description=description, modified_parameters=alt.modified_parameters)
                    for description, alt in zip(translated.alternative_descriptions, suggestions.alternative_searches)
                ],
            )
        except ValidationError as exc:
            raise TranslationError(f"Translated suggestions are invalid: {exc.error_count()} errors") from exc

    def generate(self, query: str, language: str, parameters: Dict[str, Any]) -> SuggestionSet:
        """
        Generate suggestions for a zero-result search.

        Args:
            query: Normalized query text
            language: "en" or "es"
            parameters: Extracted parameters (``model_dump(exclude_none=True)``)

        Returns:
            SuggestionSet in the query's language; never raises
        """
        try:
            suggestions = self._generate_english(query, parameters)
            if language == "es":
                suggestions = self.translate(suggestions)
        except (SuggestionGenerationError, TranslationError) as exc:
            logger.warning(f"Suggestion generation fell back to canned set ({type(exc).__name__}): {exc}")
            return canned_suggestions(parameters, language)

        logger.info(
            f"Generated {len(suggestions.alternative_searches)} alternatives and "
            f"{len(suggestions.follow_up_questions)} follow-up questions"
        )
        return suggestions
