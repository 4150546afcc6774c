"""
Shared fixtures: a seeded temporary SQLite inventory and a scripted model client.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from carsearch.cache.ttl_cache import SearchCaches
from carsearch.core.config import SearchConfig, set_config
from carsearch.core.errors import LLMError
from carsearch.core.pipeline import VehicleSearchPipeline
from carsearch.data.sample_inventory import create_database
from carsearch.data.vehicle_store import LocalVehicleStore
from carsearch.parsing.intent_classifier import CLASSIFIER_PROMPT
from carsearch.response.suggestions import SUGGESTION_PROMPT, TRANSLATION_PROMPT


class FakeLLM:
    """
    Scripted stand-in for OpenAIChatClient.

    Answers are keyed by pipeline stage ("classify", "extract", "synthesize",
    "suggest", "translate"). A value may be a string, an exception instance
    (raised), or a callable taking the messages. Unscripted stages raise
    LLMError so the caller's fallback runs.
    """

    def __init__(self, **answers):
        self.answers = answers
        self.calls = []

    @staticmethod
    def stage_of(messages):
        system = messages[0]["content"]
        if system == CLASSIFIER_PROMPT:
            return "classify"
        if system.startswith("You are a vehicle database expert"):
            return "extract"
        if system == SUGGESTION_PROMPT:
            return "suggest"
        if system == TRANSLATION_PROMPT:
            return "translate"
        return "synthesize"

    def complete(self, messages, **kwargs):
        stage = self.stage_of(messages)
        self.calls.append({"stage": stage, "messages": messages, "kwargs": kwargs})
        answer = self.answers.get(stage, LLMError(f"no scripted answer for {stage}"))
        if callable(answer) and not isinstance(answer, Exception):
            answer = answer(messages)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def count(self, stage):
        return sum(1 for call in self.calls if call["stage"] == stage)


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def inventory_db(tmp_path):
    """SQLite inventory seeded with the sample vehicles."""
    return create_database(tmp_path / "vehicles.db")


@pytest.fixture
def config(inventory_db):
    """Configuration pointing at the temporary inventory."""
    cfg = SearchConfig(vehicle_db=str(inventory_db))
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def store(config, inventory_db):
    return LocalVehicleStore(db_path=inventory_db, config=config)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def caches(config, clock):
    return SearchCaches(config, clock=clock)


@pytest.fixture
def make_pipeline(config, store, caches):
    """Build a pipeline around a given fake model client."""
    def _make(llm):
        return VehicleSearchPipeline(llm, store, caches, config)
    return _make


@pytest.fixture
def make_llm():
    """Factory for scripted model clients: make_llm(extract='{...}', classify='true')."""
    return FakeLLM
