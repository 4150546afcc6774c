"""
English/Spanish language detection by indicator scoring.

No model call: accented characters and inverted punctuation are strong
Spanish signals, function words add one point each for their language.
Ties go to English.
"""
import re

from carsearch.vocabulary.tables import ENGLISH_INDICATORS, SPANISH_INDICATORS
from carsearch.vocabulary.text import contains_term, normalize_query, tokenize
from carsearch.utils.logger import get_logger

logger = get_logger("parsing.language_detector")

SPANISH = "es"
ENGLISH = "en"

_ACCENTED = re.compile(r"[áéíóúñü]")
_INVERTED_PUNCTUATION = re.compile(r"[¿¡]")


def _score(text: str, words: list, indicators: list) -> int:
    score = 0
    for indicator in indicators:
        if " " in indicator:
            if contains_term(text, indicator):
                score += 1
        else:
            score += words.count(indicator)
    return score


def detect_language(query: str) -> str:
    """Return "es" when Spanish scores strictly higher, otherwise "en"."""
    text = normalize_query(query)
    if not text:
        return ENGLISH

    spanish_score = 0
    if _ACCENTED.search(text):
        spanish_score += 3
    if _INVERTED_PUNCTUATION.search(text):
        spanish_score += 3

    words = tokenize(text)
    spanish_score += _score(text, words, SPANISH_INDICATORS)
    english_score = _score(text, words, ENGLISH_INDICATORS)

    language = SPANISH if spanish_score > english_score else ENGLISH
    logger.debug(f"Language scores es={spanish_score} en={english_score} -> {language}")
    return language
