"""
Three-tier search query construction.

Queries are built as data (predicates over allow-listed logical columns)
and compiled to parameterized SQL by the store, so no user text is ever
spliced into a statement.

Tiers, strictest first:
- OPTIMIZED: one predicate per extracted field
- SIMPLIFIED: brand/model only, or query tokens against brand/model
- KEYWORD: a single brand-or-model disjunction
Every tier keeps the location predicate and a fixed row limit.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from carsearch.core.config import SearchConfig, get_config
from carsearch.parsing.color_detector import base_color
from carsearch.parsing.parameter_extractor import ExtractedParameters
from carsearch.utils.logger import get_logger
from carsearch.vocabulary.tables import (
    COLOR_SEARCH_VARIATIONS,
    CONDITION_TERMS,
    FUEL_TERMS,
    STOP_WORDS,
    TRANSMISSION_TERMS,
    VEHICLE_TYPES,
)
from carsearch.vocabulary.text import tokenize

logger = get_logger("query.query_builder")

# Logical columns a predicate may reference
SEARCHABLE_COLUMNS = frozenset({
    "brand", "model", "body_type", "year", "price", "engine", "transmission",
    "fuel", "exterior", "interior", "condition", "location", "address",
})
OPERATORS = frozenset({"contains", "word", "similar", "gte", "lte"})

MIN_TOKEN_LENGTH = 4


class SearchTier(IntEnum):
    """Search strategies in the order they are tried."""
    OPTIMIZED = 1
    SIMPLIFIED = 2
    KEYWORD = 3


@dataclass(frozen=True)
class Condition:
    """A single column test; ``value`` is always bound, never interpolated."""
    column: str
    op: str
    value: Union[str, float]

    def __post_init__(self) -> None:
        if self.column not in SEARCHABLE_COLUMNS:
            raise ValueError(f"Column not searchable: {self.column}")
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")


@dataclass(frozen=True)
class Predicate:
    """OR-group of conditions. An empty group matches nothing."""
    label: str
    conditions: Tuple[Condition, ...] = ()

    @classmethod
    def any_of(cls, label: str, conditions: Iterable[Condition]) -> "Predicate":
        unique: List[Condition] = []
        for condition in conditions:
            if condition not in unique:
                unique.append(condition)
        return cls(label=label, conditions=tuple(unique))


@dataclass
class TierQuery:
    """AND-combined predicates for one tier."""
    tier: SearchTier
    predicates: List[Predicate] = field(default_factory=list)
    limit: int = 15

    def describe(self) -> str:
        return f"{self.tier.name}[{', '.join(p.label for p in self.predicates)}] limit={self.limit}"


def _as_list(value: Union[None, str, List[str]]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _variants(value: str, table: Dict[str, List[str]]) -> List[str]:
    """Canonical value plus its known surface forms (stored text may be either language)."""
    forms = [value]
    for canonical, variants in table.items():
        if value == canonical or value in variants:
            forms.extend([canonical] + variants)
    return list(dict.fromkeys(forms))


def _contains_any(label: str, columns: Sequence[str], values: Iterable[str]) -> Predicate:
    return Predicate.any_of(
        label,
        (Condition(column, "contains", value) for value in values for column in columns),
    )


def location_predicate(location: Optional[str], config: SearchConfig) -> Predicate:
    """Location or address contains the region; the default region also matches its aliases."""
    location = (location or config.default_location).strip()
    values = [location]
    if location.lower() == config.default_location.lower():
        values = [config.default_location] + list(config.default_location_aliases)
    return _contains_any("location", ("location", "address"), values)


def _brand_predicate(brands: List[str]) -> Predicate:
    return _contains_any("brand", ("brand",), brands)


def _model_predicate(models: List[str], fuzzy: bool) -> Predicate:
    conditions = []
    for model in models:
        conditions.append(Condition("model", "contains", model))
        if fuzzy:
            conditions.append(Condition("model", "similar", model))
    return Predicate.any_of("model", conditions)


def _cylinder_patterns(cylinders: int) -> List[str]:
    return [f"{cylinders} cylinder", f"{cylinders}-cylinder", f"{cylinders} cilindro", f"v{cylinders}"]


def _cylinder_predicate(cylinders: int) -> Predicate:
    # Word match so that 8 does not hit "18 cylinder" or "V80"
    return Predicate.any_of(
        "cylinders",
        (Condition("engine", "word", pattern) for pattern in _cylinder_patterns(cylinders)),
    )


def build_optimized(params: ExtractedParameters, config: SearchConfig) -> TierQuery:
    """One predicate per populated field."""
    predicates: List[Predicate] = []

    brands = _as_list(params.brand)
    if brands:
        predicates.append(_brand_predicate(brands))

    models = _as_list(params.model)
    if models:
        predicates.append(_model_predicate(models, fuzzy=True))

    vehicle_types = _as_list(params.vehicle_type)
    if vehicle_types:
        forms = [form for vt in vehicle_types for form in _variants(vt, VEHICLE_TYPES)]
        predicates.append(_contains_any("vehicle_type", ("body_type", "model"), forms))

    if params.year_range:
        if params.year_range.min is not None:
            predicates.append(Predicate("year_min", (Condition("year", "gte", params.year_range.min),)))
        if params.year_range.max is not None:
            predicates.append(Predicate("year_max", (Condition("year", "lte", params.year_range.max),)))

    if params.price_range:
        if params.price_range.min is not None:
            predicates.append(Predicate("price_min", (Condition("price", "gte", params.price_range.min),)))
        if params.price_range.max is not None:
            predicates.append(Predicate("price_max", (Condition("price", "lte", params.price_range.max),)))

    specs = params.engine_specs
    if specs:
        if specs.cylinders:
            predicates.append(_cylinder_predicate(specs.cylinders))
        if specs.displacement:
            predicates.append(_contains_any("displacement", ("engine",), [specs.displacement.lower()]))
        if specs.type:
            predicates.append(_contains_any("engine_type", ("engine",), [specs.type.lower()]))

    if params.transmission:
        predicates.append(_contains_any(
            "transmission", ("transmission",), _variants(params.transmission, TRANSMISSION_TERMS)
        ))
    if params.fuel_type:
        predicates.append(_contains_any("fuel", ("fuel",), _variants(params.fuel_type, FUEL_TERMS)))
    if params.condition:
        predicates.append(_contains_any(
            "condition", ("condition",), _variants(params.condition, CONDITION_TERMS)
        ))

    if params.color:
        color = base_color(params.color)
        variations = COLOR_SEARCH_VARIATIONS.get(color, [params.color.lower()])
        predicates.append(_contains_any("color", ("exterior", "interior"), variations))

    predicates.append(location_predicate(params.location, config))
    return TierQuery(SearchTier.OPTIMIZED, predicates, config.tier_row_limit)


def sanitized_tokens(normalized_query: str) -> List[str]:
    """Query words worth matching on their own: long enough and not stop words."""
    tokens = [
        tok for tok in tokenize(normalized_query)
        if len(tok) >= MIN_TOKEN_LENGTH and tok not in STOP_WORDS
    ]
    return list(dict.fromkeys(tokens))


def build_simplified(params: ExtractedParameters, normalized_query: str, config: SearchConfig) -> TierQuery:
    """Brand/model substring only; token disjunction when neither was extracted."""
    predicates: List[Predicate] = []
    brands = _as_list(params.brand)
    models = _as_list(params.model)

    if brands:
        predicates.append(_brand_predicate(brands))
    if models:
        predicates.append(_model_predicate(models, fuzzy=False))
    if not brands and not models:
        predicates.append(_contains_any("tokens", ("brand", "model"), sanitized_tokens(normalized_query)))

    predicates.append(location_predicate(params.location, config))
    return TierQuery(SearchTier.SIMPLIFIED, predicates, config.tier_row_limit)


def build_keyword(params: ExtractedParameters, config: SearchConfig) -> TierQuery:
    """Brand OR model; matches nothing when neither was extracted."""
    conditions = [Condition("brand", "contains", b) for b in _as_list(params.brand)]
    conditions += [Condition("model", "contains", m) for m in _as_list(params.model)]
    predicates = [
        Predicate.any_of("brand_or_model", conditions),
        location_predicate(params.location, config),
    ]
    return TierQuery(SearchTier.KEYWORD, predicates, config.tier_row_limit)


def build_tiers(
    params: ExtractedParameters,
    normalized_query: str,
    config: Optional[SearchConfig] = None,
) -> List[TierQuery]:
    """
    Build the three tier queries in execution order.

    Args:
        params: Extracted parameters (location already populated)
        normalized_query: Lowercased, whitespace-collapsed query text
        config: Search configuration (global config if omitted)

    Returns:
        [OPTIMIZED, SIMPLIFIED, KEYWORD]
    """
    config = config or get_config()
    tiers = [
        build_optimized(params, config),
        build_simplified(params, normalized_query, config),
        build_keyword(params, config),
    ]
    for tier in tiers:
        logger.debug(f"Built tier {tier.describe()}")
    return tiers
