"""
Text helpers shared by the deterministic parsers and the store.

Kept lightweight and deterministic: lowercase normalization, whole-word
term lookup (Unicode aware, so accented Spanish words are single words),
tokenization and a Levenshtein-based similarity ratio.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s\-\.]")

# "1,250,000" and "1.250.000" are both thousands groupings
GROUPED_DIGITS = r"\d{1,3}(?:[,.]\d{3})+"
_GROUPED = re.compile(GROUPED_DIGITS)
_NUMBER_TOKEN = re.compile(r"(-?)(" + GROUPED_DIGITS + r"(?!\d)|\d+(?:\.\d+)?)")


def normalize_query(text: Optional[str]) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.strip().lower())


def strip_punctuation(text: str) -> str:
    """Remove punctuation except hyphens and dots (model names, displacements)."""
    return _PUNCTUATION.sub(" ", text)


@lru_cache(maxsize=2048)
def _term_pattern(term: str) -> Pattern[str]:
    return re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)")


def contains_term(text: str, term: str) -> bool:
    """True if ``term`` occurs in ``text`` as a whole word (or whole phrase)."""
    return bool(_term_pattern(term).search(text))


def first_term(text: str, terms: Iterable[str]) -> Optional[str]:
    """Return the first of ``terms`` present in ``text`` as a whole word."""
    for term in terms:
        if contains_term(text, term):
            return term
    return None


def match_canonical(text: str, table: Dict[str, List[str]]) -> Optional[Tuple[str, str]]:
    """
    Scan a canonical -> variants table in order.

    Returns:
        (canonical, matched_variant) for the first whole-word hit, else None.
    """
    for canonical, variants in table.items():
        hit = first_term(text, variants)
        if hit:
            return canonical, hit
    return None


def is_grouped(digits: str) -> bool:
    return bool(_GROUPED.fullmatch(digits))


def digits_value(digits: str) -> float:
    """Value of a digit run, reading "18.500" as eighteen thousand five hundred."""
    if is_grouped(digits):
        return float(re.sub(r"[,.]", "", digits))
    return float(digits)


def first_number(text: str) -> Optional[float]:
    """First number in free text ("RD$ 1.250.000" -> 1250000.0), or None."""
    match = _NUMBER_TOKEN.search(text)
    if not match:
        return None
    sign, digits = match.groups()
    value = digits_value(digits)
    return -value if sign else value


def tokenize(text: str) -> List[str]:
    """Split normalized text into punctuation-free words."""
    return [tok.strip(".-") for tok in strip_punctuation(text).split() if tok.strip(".-")]


def levenshtein_distance(a: str, b: str) -> int:
    """Compute Levenshtein distance between two strings."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def similarity_ratio(a: Optional[str], b: Optional[str]) -> float:
    """Case-insensitive similarity in [0, 1] based on Levenshtein distance."""
    a = (a or "").lower().strip()
    b = (b or "").lower().strip()
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein_distance(a, b) / max(len(a), len(b))
