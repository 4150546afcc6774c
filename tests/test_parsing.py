"""
Tests for the deterministic parsers: language detection, color detection
and keyword intent detection.
"""

import pytest

from carsearch.core.errors import LLMError, LLMTimeoutError
from carsearch.parsing.color_detector import base_color, detect_color
from carsearch.parsing.intent_classifier import IntentClassifier, has_automotive_keyword
from carsearch.parsing.language_detector import detect_language


# ── Language detection ───────────────────────────────────────────────────

class TestDetectLanguage:
    def test_english_query(self):
        assert detect_language("I am looking for a red car near the beach") == "en"

    def test_spanish_function_words(self):
        assert detect_language("busco un carro rojo para la familia") == "es"

    def test_accents_weigh_towards_spanish(self):
        assert detect_language("camión híbrido") == "es"

    def test_inverted_question_mark(self):
        assert detect_language("¿tienen toyota?") == "es"

    def test_multiword_indicator(self):
        assert detect_language("toyota república dominicana") == "es"

    def test_tie_goes_to_english(self):
        assert detect_language("toyota corolla") == "en"

    def test_empty_query(self):
        assert detect_language("") == "en"
        assert detect_language(None) == "en"


# ── Color detection ──────────────────────────────────────────────────────

class TestDetectColor:
    @pytest.mark.parametrize("query", ["red car", "carro rojo", "camioneta roja"])
    def test_bilingual_red(self, query):
        assert detect_color(query) == "red"

    def test_whole_word_only(self):
        """'tan' inside 'tanque' or 'red' inside 'credit' is not a color."""
        assert detect_color("tanque lleno y credito") is None
        assert detect_color("good credit terms") is None

    @pytest.mark.parametrize("query,expected", [
        ("metallic red car", "red"),
        ("pearl white honda", "white"),
        ("negro mate", "black"),
        ("azul metalizado", "blue"),
    ])
    def test_named_color_wins_over_descriptor(self, query, expected):
        assert detect_color(query) == expected

    def test_descriptor_alone(self):
        assert detect_color("something metallic") == "metallic"

    def test_descriptor_word_that_is_also_a_color(self):
        """'pearl' alone is a white variant, not a descriptor on top of itself."""
        assert detect_color("pearl sedan") == "white"

    def test_navy_wins_over_blue(self):
        assert detect_color("navy blue suv") == "navy"

    def test_two_tone(self):
        assert detect_color("dos tonos") == "two-tone"

    def test_no_color(self):
        assert detect_color("toyota corolla 2019") is None

    def test_base_color(self):
        assert base_color("metallic blue") == "blue"
        assert base_color("red") == "red"
        assert base_color(None) is None


# ── Intent classification ────────────────────────────────────────────────

class TestHasAutomotiveKeyword:
    @pytest.mark.parametrize("query", [
        "red car", "busco una jeepeta", "toyota", "v8 engine", "caja de cambios automática",
        "chevy", "mercedes-benz",
    ])
    def test_keyword_hits(self, query):
        assert has_automotive_keyword(query)

    @pytest.mark.parametrize("query", ["weather tomorrow", "scary movie", "cartoon network"])
    def test_no_partial_matches(self, query):
        assert not has_automotive_keyword(query)


class TestIntentClassifier:
    def test_keyword_hit_skips_model(self, config, fake_llm):
        classifier = IntentClassifier(fake_llm, config)
        assert classifier.is_vehicle_query("carro rojo") is True
        assert fake_llm.count("classify") == 0

    def test_model_fallback_true(self, config, make_llm):
        llm = make_llm(classify="true")
        classifier = IntentClassifier(llm, config)
        assert classifier.is_vehicle_query("something cheap and reliable for my family") is True
        call = llm.calls[0]
        assert call["kwargs"]["max_tokens"] == config.classification_max_tokens
        assert call["kwargs"]["temperature"] == config.classification_temperature

    def test_model_fallback_false(self, config, make_llm):
        classifier = IntentClassifier(make_llm(classify="False."), config)
        assert classifier.is_vehicle_query("receta de arroz") is False

    @pytest.mark.parametrize("answer", [LLMError("down"), LLMTimeoutError("slow"), "maybe"])
    def test_model_failure_uses_keyword_result(self, config, make_llm, answer):
        classifier = IntentClassifier(make_llm(classify=answer), config)
        assert classifier.is_vehicle_query("weather in santo domingo") is False
