"""
Structured parameter extraction from a free-text vehicle query.

Two strategies, tried in order:
1. ``llm`` - strict JSON prompt, validated against ``ExtractedParameters``
2. ``deterministic`` - dictionary and pattern scan that always succeeds

Both paths go through the same post-processing: the location is never
left empty and a color found by the color detector is merged in when the
model missed it.
"""
import json
import math
import re
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from carsearch.core.config import SearchConfig, get_config
from carsearch.core.errors import ExtractionParseError, ExtractionTimeout, LLMError, LLMTimeoutError
from carsearch.core.fallback import run_strategies
from carsearch.parsing.color_detector import detect_color
from carsearch.utils.logger import get_logger
from carsearch.vocabulary.tables import (
    AMBIGUOUS_MODELS,
    BRAND_ALIASES,
    BRAND_MODELS,
    CONDITION_TERMS,
    ENGINE_TYPES,
    FUEL_TERMS,
    TECHNICAL_KEYWORDS,
    TRANSMISSION_TERMS,
    VEHICLE_TYPES,
)
from carsearch.vocabulary.text import (
    GROUPED_DIGITS,
    digits_value,
    first_term,
    is_grouped,
    match_canonical,
    normalize_query,
)

logger = get_logger("parsing.parameter_extractor")

StrOrList = Optional[Union[str, List[str]]]


def parse_number(value: Any) -> Optional[float]:
    """
    Coerce model/user numbers: 50000, "50,000", "$30k", "1.5 million".

    Raises:
        ValueError: for strings with no number in them, and for
            infinite, NaN or overflowing values
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError as exc:
            raise ValueError(f"Number out of range: {value!r}") from exc
        if not math.isfinite(number):
            raise ValueError(f"Not a finite number: {value!r}")
        return number
    if not isinstance(value, str):
        raise ValueError(f"Not a number: {value!r}")

    text = re.sub(r"^(?:us\$|rd\$|usd|\$)\s*", "", value.strip().lower())
    if not text:
        return None
    match = re.match(r"^(" + GROUPED_DIGITS + r"|\d+(?:\.\d+)?)\s*(k|mil|thousand|m|million|millones)?$", text)
    if not match:
        raise ValueError(f"Not a number: {value!r}")
    digits, suffix = match.groups()
    number = digits_value(digits)
    if suffix in ("k", "mil", "thousand"):
        number *= 1_000
    elif suffix in ("m", "million", "millones"):
        number *= 1_000_000
    if not math.isfinite(number):
        raise ValueError(f"Number out of range: {value!r}")
    return number


def _normalize_text_values(value: Any) -> StrOrList:
    """Trim/lowercase a string or list of strings; empty becomes None."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"Expected strings, got {item!r}")
            item = item.strip().lower()
            if item and item not in items:
                items.append(item)
        if not items:
            return None
        return items[0] if len(items) == 1 else items
    raise ValueError(f"Expected a string or list of strings, got {type(value).__name__}")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class YearRange(BaseModel):
    """Inclusive model-year bounds."""
    min: Optional[int] = Field(None, description="Earliest model year")
    max: Optional[int] = Field(None, description="Latest model year")

    @field_validator("min", "max", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> Optional[int]:
        number = parse_number(value)
        return int(number) if number is not None else None


class PriceRange(BaseModel):
    """Inclusive price bounds."""
    min: Optional[float] = Field(None, description="Minimum price")
    max: Optional[float] = Field(None, description="Maximum price")

    @field_validator("min", "max", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> Optional[float]:
        return parse_number(value)


class EngineSpecs(BaseModel):
    """Engine requirements."""
    cylinders: Optional[int] = Field(None, description="Cylinder count (e.g. 8)")
    displacement: Optional[str] = Field(None, description="Engine size (e.g. '2.0L')")
    type: Optional[str] = Field(None, description="Engine type (e.g. 'V6', 'turbo')")

    @field_validator("cylinders", mode="before")
    @classmethod
    def _coerce_cylinders(cls, value: Any) -> Optional[int]:
        if isinstance(value, str):
            value = value.strip().lower().lstrip("v")
        number = parse_number(value)
        return int(number) if number is not None else None

    @field_validator("displacement", "type", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def is_empty(self) -> bool:
        return self.cylinders is None and self.displacement is None and self.type is None


class ExtractedParameters(BaseModel):
    """Vehicle search parameters extracted from a query."""
    model_config = ConfigDict(extra="ignore")

    brand: StrOrList = Field(None, description="Manufacturer(s), lowercase")
    model: StrOrList = Field(None, description="Model name(s), lowercase")
    year_range: Optional[YearRange] = None
    price_range: Optional[PriceRange] = None
    vehicle_type: StrOrList = Field(None, description="Body category (suv, sedan, truck...)")
    engine_specs: Optional[EngineSpecs] = None
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    color: Optional[str] = None
    condition: Optional[str] = None
    location: str = Field("", description="Market region; never empty after post-processing")

    @field_validator("brand", "model", "vehicle_type", mode="before")
    @classmethod
    def _normalize_lists(cls, value: Any) -> StrOrList:
        return _normalize_text_values(value)

    @field_validator("transmission", "fuel_type", "color", "condition", mode="before")
    @classmethod
    def _lower_text(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator("location", mode="before")
    @classmethod
    def _location_text(cls, value: Any) -> str:
        return (_blank_to_none(value) or "") if value is not None else ""


class LLMExtraction(BaseModel):
    """Shape of the model's JSON answer."""
    model_config = ConfigDict(extra="ignore")

    parameters: ExtractedParameters = Field(default_factory=ExtractedParameters)
    query_type: Literal["technical", "general"] = "general"
    is_technical_search: bool = False

    @field_validator("query_type", mode="before")
    @classmethod
    def _lower_query_type(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class ExtractionResult(BaseModel):
    """Parameters plus query classification and which strategy produced them."""
    parameters: ExtractedParameters
    query_type: Literal["technical", "general"] = "general"
    is_technical_search: bool = False
    source: Literal["llm", "deterministic"] = "deterministic"


EXTRACTION_PROMPT = """You are a vehicle database expert. Extract search parameters from the user's query.

INSTRUCTIONS:
1. Include ONLY parameters the query mentions.
2. Parse technical parameters precisely ("8 cylinder" -> engine_specs.cylinders: 8).
3. Resolve brand aliases ("Benz" -> "mercedes", "Chevy" -> "chevrolet").
4. Always set location to "{default_location}" unless the query names another place.
5. Normalize colors to a standard name (black, white, red, blue, green, yellow, orange,
   purple, pink, brown, gray, silver) and keep descriptors ("pearl white", "matte black").
   Spanish colors map the same way (rojo -> red, negro -> black).
6. Prices and years are plain numbers.

Return JSON ONLY with this structure:
{{
  "parameters": {{
    "brand": string or [string],
    "model": string or [string],
    "year_range": {{"min": number, "max": number}},
    "price_range": {{"min": number, "max": number}},
    "vehicle_type": string or [string],
    "engine_specs": {{"cylinders": number, "displacement": string, "type": string}},
    "transmission": string,
    "fuel_type": string,
    "color": string,
    "condition": string,
    "location": string
  }},
  "query_type": "technical" or "general",
  "is_technical_search": boolean
}}"""


# ---------------------------------------------------------------------- #
# Deterministic patterns
# ---------------------------------------------------------------------- #

_NUMBER_WORDS = {
    "three": 3, "four": 4, "five": 5, "six": 6, "eight": 8, "ten": 10, "twelve": 12,
    "tres": 3, "cuatro": 4, "cinco": 5, "seis": 6, "ocho": 8, "diez": 10, "doce": 12,
}
_CYLINDERS = re.compile(
    r"(?<!\w)(\d{1,2}|" + "|".join(_NUMBER_WORDS) + r")\s*-?\s*(?:cylinders?|cilindros?|cyl)(?!\w)"
)
_V_ENGINE = re.compile(r"(?<!\w)v\s?(4|6|8|10|12)(?!\w)")
_DISPLACEMENT = re.compile(r"(?<!\w)(\d\.\d)\s*(?:l|lts?|liters?|litres?|litros?)(?!\w)")

_NUM = r"(\$\s?)?(" + GROUPED_DIGITS + r"|\d+(?:\.\d+)?)\s?(k|mil|thousand|million|millones)?(?!\w)"
_BETWEEN = re.compile(r"(?:between|entre)\s+" + _NUM + r"\s+(?:and|y|to|a)\s+" + _NUM)
_SPAN = re.compile(_NUM + r"\s*(?:-|to|hasta|a)\s*" + _NUM)
_MAX_WORDS = (
    r"under|below|less than|cheaper than|up to|no more than|max(?:imum)?|at most|"
    r"menos de|por debajo de|hasta|m[aá]ximo|bajo|no m[aá]s de"
)
_MIN_WORDS = r"over|above|more than|at least|min(?:imum)?|m[aá]s de|por encima de|m[ií]nimo|desde"
_YEAR_MIN_WORDS = r"after|since|newer than|from|despu[eé]s de|a partir de|posterior a"
_YEAR_MAX_WORDS = r"before|older than|antes de|anterior a"
_COMPARATOR = re.compile(
    r"(?<!\w)(?P<op>" + "|".join([_MAX_WORDS, _MIN_WORDS, _YEAR_MIN_WORDS, _YEAR_MAX_WORDS]) + r")\s+" + _NUM
)
_BARE = re.compile(r"(?<![\w.])" + _NUM)

YEAR_BOUNDS = (1950, 2100)


def _blank_span(text: str, match: "re.Match[str]") -> str:
    return text[:match.start()] + " " * (match.end() - match.start()) + text[match.end():]


def _classify(dollar: Optional[str], digits: str, suffix: Optional[str]) -> Tuple[str, Optional[float]]:
    """Return ("price" | "year" | "other", value) for a matched number."""
    try:
        value = parse_number(f"{digits}{suffix or ''}")
    except ValueError:
        return "other", None
    grouped = is_grouped(digits)
    if dollar or suffix or grouped:
        return "price", value
    if value is not None and YEAR_BOUNDS[0] <= value <= YEAR_BOUNDS[1] and "." not in digits:
        return "year", value
    if value is not None and value >= 3000:
        return "price", value
    return "other", value


class _Bounds:
    def __init__(self):
        self.year: Dict[str, float] = {}
        self.price: Dict[str, float] = {}

    def put(self, kind: str, bound: str, value: Optional[float]) -> None:
        if value is None or kind not in ("year", "price"):
            return
        getattr(self, kind).setdefault(bound, value)


def _scan_ranges(text: str) -> Tuple[Optional[YearRange], Optional[PriceRange]]:
    bounds = _Bounds()

    for pattern in (_BETWEEN, _SPAN):
        for match in list(pattern.finditer(text)):
            low_kind, low = _classify(*match.group(1, 2, 3))
            high_kind, high = _classify(*match.group(4, 5, 6))
            # "20-30k": the suffix on the upper bound applies to both
            if high_kind == "price" and match.group(6) and not match.group(3) and low is not None and low < 1000:
                upper_digits = digits_value(match.group(5))
                if upper_digits:
                    low = low * (high / upper_digits)
                low_kind = "price"
            if "price" in (low_kind, high_kind):
                kind = "price"
            elif low_kind == high_kind:
                kind = low_kind
            else:
                continue
            if kind in ("year", "price") and low is not None and high is not None:
                bounds.put(kind, "min", min(low, high))
                bounds.put(kind, "max", max(low, high))
                text = _blank_span(text, match)

    for match in list(_COMPARATOR.finditer(text)):
        op = match.group("op")
        kind, value = _classify(match.group(2), match.group(3), match.group(4))
        if kind not in ("year", "price"):
            continue
        if re.fullmatch(_MIN_WORDS, op) or re.fullmatch(_YEAR_MIN_WORDS, op):
            bounds.put(kind, "min", value)
        else:
            bounds.put(kind, "max", value)
        text = _blank_span(text, match)

    for match in _BARE.finditer(text):
        kind, value = _classify(*match.group(1, 2, 3))
        if kind == "year":
            bounds.put("year", "min", value)
            bounds.put("year", "max", value)
        elif kind == "price":
            bounds.put("price", "max", value)

    year_range = YearRange(**bounds.year) if bounds.year else None
    price_range = PriceRange(**bounds.price) if bounds.price else None
    return year_range, price_range


def _one_or_many(values: List[str]) -> StrOrList:
    if not values:
        return None
    return values[0] if len(values) == 1 else values


def _scan_brands_and_models(text: str) -> Tuple[List[str], List[str], str]:
    """Return (brands, models, text with model names blanked)."""
    brands: List[str] = []
    for brand, aliases in BRAND_ALIASES.items():
        if first_term(text, sorted(aliases, key=len, reverse=True)) and brand not in brands:
            brands.append(brand)

    candidates = sorted(
        ((model, brand) for brand, models in BRAND_MODELS.items() for model in models),
        key=lambda pair: len(pair[0]),
        reverse=True,
    )
    models: List[str] = []
    for model, brand in candidates:
        if model in AMBIGUOUS_MODELS and brand not in brands:
            continue
        pattern = re.compile(r"(?<!\w)" + re.escape(model) + r"(?!\w)")
        match = pattern.search(text)
        if not match:
            continue
        text = _blank_span(text, match)
        if model not in models:
            models.append(model)
        # A known model implies its make
        if brand not in brands:
            brands.append(brand)
    return brands, models, text


def _scan_engine(text: str) -> Tuple[Optional[EngineSpecs], str]:
    cylinders = None
    engine_type = None
    displacement = None

    match = _CYLINDERS.search(text)
    if match:
        raw = match.group(1)
        cylinders = _NUMBER_WORDS.get(raw) or int(raw)
        text = _blank_span(text, match)

    match = _V_ENGINE.search(text)
    if match:
        engine_type = f"V{match.group(1)}"
        cylinders = cylinders or int(match.group(1))
        text = _blank_span(text, match)

    match = _DISPLACEMENT.search(text)
    if match:
        displacement = f"{match.group(1)}L"
        text = _blank_span(text, match)

    if engine_type is None:
        hit = first_term(text, ENGINE_TYPES)
        if hit:
            engine_type = "turbo" if hit.startswith("turbo") else hit

    specs = EngineSpecs(cylinders=cylinders, displacement=displacement, type=engine_type)
    return (None if specs.is_empty() else specs), text


def _is_technical(text: str) -> bool:
    return any(keyword in text for keyword in TECHNICAL_KEYWORDS)


def _scan_query(text: str) -> ExtractionResult:
    brands, models, working = _scan_brands_and_models(text)
    engine_specs, working = _scan_engine(working)
    year_range, price_range = _scan_ranges(working)

    vehicle_types = [canonical for canonical, variants in VEHICLE_TYPES.items() if first_term(text, variants)]
    transmission = match_canonical(text, TRANSMISSION_TERMS)
    fuel = match_canonical(text, FUEL_TERMS)
    condition = match_canonical(text, CONDITION_TERMS)

    parameters = ExtractedParameters(
        brand=_one_or_many(brands),
        model=_one_or_many(models),
        year_range=year_range,
        price_range=price_range,
        vehicle_type=_one_or_many(vehicle_types),
        engine_specs=engine_specs,
        transmission=transmission[0] if transmission else None,
        fuel_type=fuel[0] if fuel else None,
        color=detect_color(text),
        condition=condition[0] if condition else None,
    )
    technical = _is_technical(text) or engine_specs is not None
    return ExtractionResult(
        parameters=parameters,
        query_type="technical" if technical else "general",
        is_technical_search=technical,
        source="deterministic",
    )


def deterministic_extract(query: str) -> ExtractionResult:
    """Dictionary/pattern extraction that never fails and never calls the model."""
    text = normalize_query(query)
    try:
        return _scan_query(text)
    except (ValueError, ArithmeticError) as exc:
        # Pydantic's ValidationError is a ValueError
        logger.warning(f"Deterministic scan failed ({exc.__class__.__name__}: {exc}); using empty parameters")
        return ExtractionResult(parameters=ExtractedParameters(), source="deterministic")


class ParameterExtractor:
    """Extracts ``ExtractedParameters`` with a model-first, deterministic-fallback strategy list."""

    def __init__(self, llm, config: Optional[SearchConfig] = None):
        self.llm = llm
        self.config = config or get_config()

    def _llm_extract(self, query: str, language: str) -> ExtractionResult:
        prompt = EXTRACTION_PROMPT.format(default_location=self.config.default_location)
        language_name = "Spanish" if language == "es" else "English"
        try:
            raw = self.llm.complete(
                [
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": f"QUERY: \"{query}\"\nLANGUAGE: {language_name}"},
                ],
                temperature=self.config.extraction_temperature,
                max_tokens=self.config.extraction_max_tokens,
                timeout=self.config.extraction_timeout,
                json_output=True,
            )
        except LLMTimeoutError as exc:
            raise ExtractionTimeout(str(exc)) from exc
        except LLMError as exc:
            raise ExtractionParseError(f"Model unavailable: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ExtractionParseError(f"Invalid JSON from model: {exc}") from exc
        if not isinstance(data, dict):
            raise ExtractionParseError("Model JSON is not an object")
        # Tolerate answers that skip the "parameters" wrapper
        if "parameters" not in data:
            data = {"parameters": data}

        try:
            parsed = LLMExtraction.model_validate(data)
        except ValidationError as exc:
            raise ExtractionParseError(f"Model JSON violates schema: {exc.error_count()} errors") from exc

        technical = parsed.query_type == "technical" or parsed.is_technical_search
        return ExtractionResult(
            parameters=parsed.parameters,
            query_type="technical" if technical else "general",
            is_technical_search=technical,
            source="llm",
        )

    def _post_process(self, result: ExtractionResult, query: str) -> ExtractionResult:
        parameters = result.parameters
        if not parameters.location:
            parameters.location = self.config.default_location
        if not parameters.color:
            color = detect_color(query)
            if color:
                logger.info(f"Merged detector color into parameters: {color}")
                parameters.color = color
        return result

    def extract(self, query: str, language: str) -> ExtractionResult:
        """
        Extract search parameters from a normalized query.

        Args:
            query: Normalized query text
            language: "en" or "es"

        Returns:
            ExtractionResult whose parameters always carry a location
        """
        outcome = run_strategies([
            ("llm", lambda: self._llm_extract(query, language)),
            ("deterministic", lambda: deterministic_extract(query)),
        ])
        result = self._post_process(outcome.value, query)

        logger.info(
            f"Extracted parameters via {result.source}: "
            f"{result.parameters.model_dump(exclude_none=True)} (query_type={result.query_type})"
        )
        return result
