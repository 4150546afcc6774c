"""
Tests for configuration loading.
"""

import pytest

from carsearch.core.config import DEFAULT_CONFIG_PATH, SearchConfig, get_config, set_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CARSEARCH_LLM_MODEL", "CARSEARCH_VEHICLE_DB", "CARSEARCH_DEFAULT_LOCATION"):
        monkeypatch.delenv(name, raising=False)


class TestSearchConfig:
    def test_shipped_defaults_match_dataclass(self):
        assert DEFAULT_CONFIG_PATH.exists()
        assert SearchConfig.from_yaml() == SearchConfig()

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "llm:\n"
            "  model: gpt-4o\n"
            "  timeouts:\n"
            "    extraction: 2\n"
            "store:\n"
            "  tier_row_limit: 5\n"
            "location:\n"
            "  default: Puerto Rico\n"
            "  aliases: []\n",
            encoding="utf-8",
        )
        config = SearchConfig.from_yaml(path)
        assert config.llm_model == "gpt-4o"
        assert config.extraction_timeout == 2
        assert config.synthesis_timeout == SearchConfig().synthesis_timeout
        assert config.tier_row_limit == 5
        assert config.default_location == "Puerto Rico"
        assert config.default_location_aliases == []

    def test_missing_file_gives_defaults(self, tmp_path):
        assert SearchConfig.from_yaml(tmp_path / "nope.yaml") == SearchConfig()

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CARSEARCH_LLM_MODEL", "gpt-4.1-mini")
        monkeypatch.setenv("CARSEARCH_VEHICLE_DB", str(tmp_path / "inv.db"))
        config = SearchConfig.from_yaml(tmp_path / "nope.yaml")
        assert config.llm_model == "gpt-4.1-mini"
        assert config.resolve_db_path() == tmp_path / "inv.db"

    def test_relative_db_path_resolves_against_project(self):
        path = SearchConfig(vehicle_db="data/vehicles.db").resolve_db_path()
        assert path.is_absolute()
        assert path.parts[-2:] == ("data", "vehicles.db")

    def test_global_instance(self):
        custom = SearchConfig(tier_row_limit=3)
        set_config(custom)
        try:
            assert get_config() is custom
        finally:
            set_config(None)
