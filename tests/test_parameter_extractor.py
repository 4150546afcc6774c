"""
Tests for parameter extraction: schema coercion, the deterministic scan,
and the model-first strategy with its fallback and post-processing.
"""

import json

import pytest
from pydantic import ValidationError

from carsearch.core.errors import LLMError, LLMTimeoutError
from carsearch.parsing.parameter_extractor import (
    ExtractedParameters,
    ParameterExtractor,
    deterministic_extract,
    parse_number,
)


def llm_answer(parameters, query_type="general", technical=False):
    return json.dumps({
        "parameters": parameters,
        "query_type": query_type,
        "is_technical_search": technical,
    })


# ── Schema coercion ──────────────────────────────────────────────────────

class TestParseNumber:
    @pytest.mark.parametrize("raw,expected", [
        (50000, 50000.0),
        ("50,000", 50000.0),
        ("$30k", 30000.0),
        ("US$ 25,500", 25500.0),
        ("1.5 million", 1500000.0),
        ("40 mil", 40000.0),
        ("", None),
        (None, None),
    ])
    def test_coercion(self, raw, expected):
        assert parse_number(raw) == expected

    def test_rejects_words(self):
        with pytest.raises(ValueError):
            parse_number("cheap")

    @pytest.mark.parametrize("raw", [
        float("inf"),
        float("-inf"),
        float("nan"),
        10 ** 400,
        "9" * 400,
    ])
    def test_rejects_non_finite(self, raw):
        with pytest.raises(ValueError):
            parse_number(raw)


class TestExtractedParameters:
    def test_normalizes_text_fields(self):
        params = ExtractedParameters.model_validate({
            "brand": " BMW ",
            "model": ["X5", "x5", ""],
            "vehicle_type": [],
            "engine_specs": {"cylinders": "V8"},
            "price_range": {"max": "$50,000"},
            "color": "",
        })
        assert params.brand == "bmw"
        assert params.model == "x5"
        assert params.vehicle_type is None
        assert params.engine_specs.cylinders == 8
        assert params.price_range.max == 50000.0
        assert params.color is None
        assert params.location == ""

    def test_brand_of_wrong_shape_is_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedParameters.model_validate({"brand": {"name": "bmw"}})

    @pytest.mark.parametrize("fields", [
        {"year_range": {"min": float("inf")}},
        {"year_range": {"max": float("nan")}},
        {"engine_specs": {"cylinders": float("-inf")}},
    ])
    def test_non_finite_numbers_are_schema_errors(self, fields):
        with pytest.raises(ValidationError):
            ExtractedParameters.model_validate(fields)


# ── Deterministic extraction ─────────────────────────────────────────────

class TestDeterministicExtract:
    def test_brand_and_price_cap(self):
        result = deterministic_extract("bmw under $50,000")
        assert result.parameters.brand == "bmw"
        assert result.parameters.price_range.max == 50000.0
        assert result.parameters.price_range.min is None
        assert result.source == "deterministic"

    def test_cylinders_make_query_technical(self):
        result = deterministic_extract("8 cylinder car")
        assert result.parameters.engine_specs.cylinders == 8
        assert result.query_type == "technical"
        assert result.is_technical_search is True

    def test_spanish_cylinders_and_v_notation(self):
        assert deterministic_extract("motor de 6 cilindros").parameters.engine_specs.cylinders == 6
        specs = deterministic_extract("mustang v8").parameters.engine_specs
        assert specs.cylinders == 8
        assert specs.type == "V8"

    def test_displacement_and_turbo(self):
        specs = deterministic_extract("sedan 2.0l turbo").parameters.engine_specs
        assert specs.displacement == "2.0L"
        assert specs.type == "turbo"

    def test_model_implies_brand(self):
        params = deterministic_extract("corolla 2019").parameters
        assert params.brand == "toyota"
        assert params.model == "corolla"
        assert params.year_range.min == 2019
        assert params.year_range.max == 2019

    def test_alias_resolves_brand(self):
        assert deterministic_extract("benz c300").parameters.brand == "mercedes"
        assert deterministic_extract("chevy silverado").parameters.brand == "chevrolet"

    def test_ambiguous_model_needs_brand(self):
        """'escape' alone is not a Ford."""
        assert deterministic_extract("escape plan car").parameters.brand is None
        assert deterministic_extract("ford escape").parameters.model == "escape"

    def test_year_range(self):
        params = deterministic_extract("honda civic 2015-2020").parameters
        assert (params.year_range.min, params.year_range.max) == (2015, 2020)
        params = deterministic_extract("toyota desde 2018").parameters
        assert params.year_range.min == 2018
        assert params.year_range.max is None

    def test_price_between_spanish(self):
        params = deterministic_extract("jeepeta entre 20k y 30k").parameters
        assert (params.price_range.min, params.price_range.max) == (20000.0, 30000.0)
        assert params.vehicle_type == "suv"

    def test_price_span_with_shared_suffix(self):
        params = deterministic_extract("suv 20-30k").parameters
        assert (params.price_range.min, params.price_range.max) == (20000.0, 30000.0)

    def test_categorical_fields(self):
        params = deterministic_extract("carro usado automático diesel").parameters
        assert params.condition == "used"
        assert params.transmission == "automatic"
        assert params.fuel_type == "diesel"

    @pytest.mark.parametrize("query", ["red car", "carro rojo"])
    def test_color(self, query):
        assert deterministic_extract(query).parameters.color == "red"

    def test_general_query(self):
        result = deterministic_extract("toyota")
        assert result.query_type == "general"
        assert result.is_technical_search is False

    def test_zero_upper_bound_with_suffix(self):
        params = deterministic_extract("toyota 5-0k").parameters
        assert params.brand == "toyota"

    def test_mismatched_span_is_not_a_year_range(self):
        params = deterministic_extract("civic 2015-20").parameters
        assert params.year_range.min == 2015
        assert params.year_range.max == 2015

    @pytest.mark.parametrize("query", [
        "0-0k",
        "entre 0 y 0k",
        "$0",
        "0 cylinder v0",
        "9" * 400 + " dollars",
        "between 1,000,000,000,000,000k and 2k",
        "1.5.5l ¿?",
    ])
    def test_odd_input_never_raises(self, query):
        result = deterministic_extract(query)
        assert result.source == "deterministic"


# ── Strategy list ────────────────────────────────────────────────────────

class TestParameterExtractor:
    def test_uses_model_answer(self, config, make_llm):
        llm = make_llm(extract=llm_answer({"brand": "BMW", "price_range": {"max": 50000}}))
        result = ParameterExtractor(llm, config).extract("bmw under $50,000", "en")
        assert result.source == "llm"
        assert result.parameters.brand == "bmw"
        assert result.parameters.price_range.max == 50000.0
        kwargs = llm.calls[0]["kwargs"]
        assert kwargs["json_output"] is True
        assert kwargs["timeout"] == config.extraction_timeout
        assert kwargs["max_tokens"] == config.extraction_max_tokens

    def test_location_default_injected_on_model_path(self, config, make_llm):
        llm = make_llm(extract=llm_answer({"brand": "toyota", "location": ""}))
        result = ParameterExtractor(llm, config).extract("toyota", "en")
        assert result.parameters.location == "Dominican Republic"

    def test_explicit_location_kept(self, config, make_llm):
        llm = make_llm(extract=llm_answer({"brand": "toyota", "location": "Santiago"}))
        result = ParameterExtractor(llm, config).extract("toyota en santiago", "es")
        assert result.parameters.location == "Santiago"

    def test_detector_color_merged_when_model_omits_it(self, config, make_llm):
        llm = make_llm(extract=llm_answer({"brand": "toyota"}))
        result = ParameterExtractor(llm, config).extract("toyota roja", "es")
        assert result.parameters.color == "red"

    def test_model_color_not_overridden(self, config, make_llm):
        llm = make_llm(extract=llm_answer({"color": "metallic red"}))
        result = ParameterExtractor(llm, config).extract("metallic red car", "en")
        assert result.parameters.color == "metallic red"

    def test_unwrapped_answer_accepted(self, config, make_llm):
        llm = make_llm(extract=json.dumps({"brand": "kia"}))
        result = ParameterExtractor(llm, config).extract("kia", "en")
        assert result.source == "llm"
        assert result.parameters.brand == "kia"

    @pytest.mark.parametrize("answer", [
        LLMTimeoutError("slow"),
        LLMError("no key"),
        "not json at all",
        "[1, 2, 3]",
        llm_answer({"brand": {"name": "bmw"}}),
        llm_answer({}, query_type="unknown"),
    ])
    def test_falls_back_to_deterministic(self, config, make_llm, answer):
        llm = make_llm(extract=answer)
        result = ParameterExtractor(llm, config).extract("8 cylinder car", "en")
        assert result.source == "deterministic"
        assert result.parameters.engine_specs.cylinders == 8
        assert result.query_type == "technical"
        assert result.parameters.location == "Dominican Republic"

    def test_fallback_location_never_empty(self, config, fake_llm):
        result = ParameterExtractor(fake_llm, config).extract("carro rojo", "es")
        assert result.parameters.location == config.default_location
        assert result.parameters.color == "red"

    @pytest.mark.parametrize("answer", [
        '{"parameters": {"brand": "bmw", "year_range": {"min": Infinity}}}',
        '{"parameters": {"brand": "bmw", "engine_specs": {"cylinders": -Infinity}}}',
        '{"parameters": {"brand": "bmw", "price_range": {"max": NaN}}}',
        '{"parameters": {"brand": "bmw", "year_range": {"max": 1' + "0" * 400 + '}}}',
    ])
    def test_non_finite_model_numbers_fall_back(self, config, make_llm, answer):
        llm = make_llm(extract=answer)
        result = ParameterExtractor(llm, config).extract("bmw 8 cylinder", "en")
        assert result.source == "deterministic"
        assert result.parameters.brand == "bmw"
        assert result.parameters.engine_specs.cylinders == 8
