"""
Decide whether a query is about vehicles.

Stage 1 is a whole-word scan of bilingual automotive vocabulary and known
brands; a hit answers immediately. Only queries with no keyword reach the
model, whose answer is a single true/false token.
"""
from typing import Optional

from carsearch.core.config import SearchConfig, get_config
from carsearch.core.errors import ClassificationError, LLMError
from carsearch.utils.logger import get_logger
from carsearch.vocabulary.tables import AUTOMOTIVE_KEYWORDS, BRAND_ALIASES
from carsearch.vocabulary.text import first_term, normalize_query

logger = get_logger("parsing.intent_classifier")

CLASSIFIER_PROMPT = """You determine if a query is related to cars, vehicles, automotive topics, or vehicle shopping.
Respond with "true" ONLY if the query is clearly about:
- specific car brands, models, or types
- car pricing, features, or comparisons
- vehicle shopping or dealerships
- automotive specifications (engines, transmissions, fuel)

Respond with "false" for anything else.

Examples:
"red toyota" -> true
"busco una jeepeta" -> true
"something cheap with good mileage" -> true
"weather in santo domingo" -> false
"receta de arroz con pollo" -> false
"apartment for rent" -> false

Answer with exactly one word: true or false."""

_KEYWORDS = list(AUTOMOTIVE_KEYWORDS) + [alias for aliases in BRAND_ALIASES.values() for alias in aliases]


def has_automotive_keyword(query: str) -> bool:
    """Whole-word check against automotive vocabulary and brand names."""
    hit = first_term(normalize_query(query), _KEYWORDS)
    if hit:
        logger.debug(f"Automotive keyword detected: {hit}")
    return hit is not None


def _parse_answer(answer: str) -> bool:
    token = answer.strip().strip('."\'').lower()
    if token.startswith("true"):
        return True
    if token.startswith("false"):
        return False
    raise ClassificationError(f"Unparseable classifier answer: {answer!r}")


class IntentClassifier:
    """Keyword-first vehicle intent classifier with a model fallback."""

    def __init__(self, llm, config: Optional[SearchConfig] = None):
        self.llm = llm
        self.config = config or get_config()

    def _ask_model(self, query: str) -> bool:
        try:
            answer = self.llm.complete(
                [
                    {"role": "system", "content": CLASSIFIER_PROMPT},
                    {"role": "user", "content": query},
                ],
                temperature=self.config.classification_temperature,
                max_tokens=self.config.classification_max_tokens,
                timeout=self.config.classification_timeout,
            )
        except LLMError as exc:
            raise ClassificationError(str(exc)) from exc
        return _parse_answer(answer)

    def is_vehicle_query(self, query: str) -> bool:
        """Return True if the query is about vehicles."""
        keyword_result = has_automotive_keyword(query)
        if keyword_result:
            return True

        try:
            result = self._ask_model(query)
        except ClassificationError as exc:
            logger.warning(f"Intent classification fell back to keyword result: {exc}")
            return keyword_result

        logger.info(f"Model intent classification: {result}")
        return result
