"""
Deterministic vehicle color detection.

Works the same in English and Spanish and never calls the language model,
so it is safe to use both as a fallback and to fill gaps in model output.
"""
from typing import Optional

from carsearch.vocabulary.tables import COLOR_DESCRIPTORS, COLOR_VARIANTS
from carsearch.vocabulary.text import contains_term, match_canonical, normalize_query


def detect_color(query: str) -> Optional[str]:
    """
    Detect the color a query asks for.

    A named color wins ("metallic red car" gives "red"); descriptors only
    count when no color is named.

    Returns:
        - canonical color ("red") when a color variant appears as a whole word
        - the descriptor ("metallic", "matte") when no color is named
        - None otherwise
    """
    text = normalize_query(query)
    if not text:
        return None

    color_hit = match_canonical(text, COLOR_VARIANTS)
    if color_hit:
        return color_hit[0]

    for term, canonical in COLOR_DESCRIPTORS.items():
        if contains_term(text, term):
            return canonical
    return None


def base_color(color: Optional[str]) -> Optional[str]:
    """Return the last word of a color value ("metallic blue" -> "blue")."""
    if not color:
        return None
    parts = color.strip().lower().split()
    return parts[-1] if parts else None
