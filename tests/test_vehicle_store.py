"""
Tests for the SQLite vehicle store against the sample inventory.
"""

import dataclasses
import sqlite3

import pytest

from carsearch.core.errors import QueryExecutionError, QueryTimeout
from carsearch.data.sample_inventory import create_database
from carsearch.data.vehicle_store import (
    LocalVehicleStore,
    VehicleRecord,
    _format_sql_with_params,
    _has_word,
    _to_number,
)
from carsearch.parsing.parameter_extractor import EngineSpecs, ExtractedParameters, PriceRange
from carsearch.query.query_builder import Condition, Predicate, SearchTier, TierQuery, build_tiers


def optimized(config, **fields):
    fields.setdefault("location", config.default_location)
    return build_tiers(ExtractedParameters(**fields), "", config)[0]


def models(records):
    return [r.model for r in records]


class TestHelpers:
    @pytest.mark.parametrize("raw,expected", [
        ("$45,000", 45000.0),
        ("US$ 18,500", 18500.0),
        ("RD$ 1.250.000", 1250000.0),
        ("$1,250,000.00", 1250000.0),
        ("$45000.50", 45000.5),
        (2019, 2019.0),
        ("call for price", None),
        (None, None),
    ])
    def test_to_number(self, raw, expected):
        assert _to_number(raw) == expected

    @pytest.mark.parametrize("engine,term,expected", [
        ("6.2L 8-cylinder", "8-cylinder", 1),
        ("1.8L 4 cilindros", "4 cilindro", 1),
        ("5.0L V8", "v8", 1),
        ("W16 18 cylinder", "8 cylinder", 0),
        ("V80 prototype", "v8", 0),
        ("2.8 cilindrada", "8 cilindro", 0),
        (None, "v8", 0),
    ])
    def test_has_word(self, engine, term, expected):
        assert _has_word(engine, term) == expected

    def test_format_sql_with_params(self):
        assert _format_sql_with_params("a = ? AND b <= ?", ["x", 5.0]) == "a = 'x' AND b <= 5.0"


class TestLocalVehicleStore:
    def test_brand_and_price_cap(self, store, config):
        tier = optimized(config, brand="bmw", price_range=PriceRange(max=50000))
        records = store.execute(tier)
        assert models(records) == ["X5"]
        assert isinstance(records[0], VehicleRecord)
        assert records[0].year == 2020

    def test_color_matches_both_languages_in_default_region(self, store, config):
        records = store.execute(optimized(config, color="red"))
        # Corolla is "Rojo"; C300 has a red interior; the Miami Tesla is outside the region
        assert models(records) == ["Corolla", "Mustang GT", "C300"]

    def test_cylinders_match_v_notation_and_address_alias(self, store, config):
        records = store.execute(optimized(config, engine_specs=EngineSpecs(cylinders=8)))
        assert models(records) == ["Mustang GT", "Camaro SS"]

    def test_fuzzy_model(self, store, config):
        records = store.execute(optimized(config, model="corola"))
        assert models(records) == ["Corolla"]

    def test_explicit_region(self, store, config):
        records = store.execute(optimized(config, color="red", location="Miami"))
        assert models(records) == ["Model 3"]

    def test_spanish_stored_categories(self, store, config):
        records = store.execute(optimized(config, fuel_type="diesel"))
        assert models(records) == ["Hilux", "Frontier"]

    def test_empty_group_matches_nothing(self, store, config):
        tier = TierQuery(SearchTier.KEYWORD, [Predicate("brand_or_model", ())], config.tier_row_limit)
        assert store.execute(tier) == []

    def test_like_wildcards_are_literal(self, store, config):
        for wildcard in ("%", "_"):
            tier = TierQuery(
                SearchTier.KEYWORD,
                [Predicate("brand", (Condition("brand", "contains", wildcard),))],
                config.tier_row_limit,
            )
            assert store.execute(tier) == []

    def test_row_limit(self, store):
        assert len(store.execute(TierQuery(SearchTier.KEYWORD, [], limit=3))) == 3

    def test_missing_database(self, tmp_path, config):
        store = LocalVehicleStore(db_path=tmp_path / "missing.db", config=config)
        with pytest.raises(QueryExecutionError):
            store.execute(optimized(config, brand="bmw"))

    def test_store_is_read_only(self, store):
        conn = store._connect()
        try:
            with pytest.raises(sqlite3.OperationalError):
                conn.execute("DELETE FROM vehicles")
        finally:
            conn.close()

    def test_deadline_interrupts_query(self, inventory_db, config):
        slow = LocalVehicleStore(db_path=inventory_db, config=dataclasses.replace(config, query_timeout=0))
        with pytest.raises(QueryTimeout):
            slow.execute(optimized(config, model="corola"))


class TestCustomInventory:
    """Rows the sample inventory does not cover."""

    def _row(self, model, **fields):
        row = {
            "brand": "Toyota", "model": model, "year": 2020, "price": "$20,000",
            "engine": "2.0L 4-cylinder", "location": "Dominican Republic",
        }
        row.update(fields)
        return row

    @pytest.fixture
    def custom_store(self, tmp_path, config):
        db_path = create_database(tmp_path / "custom.db", vehicles=[
            self._row("Land Cruiser", price="RD$ 1.250.000"),
            self._row("Prototype", engine="V80 prototype"),
            self._row("Bus", engine="18 cylinder"),
            self._row("Tundra", engine="5.7L V8"),
            self._row("Corolla", engine="1.8L 4 cilindros"),
        ])
        return LocalVehicleStore(db_path=db_path, config=config)

    def test_dot_grouped_price_is_thousands(self, custom_store, config):
        records = custom_store.execute(optimized(config, price_range=PriceRange(min=1_000_000)))
        assert models(records) == ["Land Cruiser"]

    def test_dot_grouped_price_above_cap(self, custom_store, config):
        records = custom_store.execute(optimized(config, price_range=PriceRange(max=50_000)))
        assert "Land Cruiser" not in models(records)

    def test_cylinders_do_not_match_longer_numbers(self, custom_store, config):
        records = custom_store.execute(optimized(config, engine_specs=EngineSpecs(cylinders=8)))
        assert models(records) == ["Tundra"]

    def test_spanish_plural_cylinders(self, custom_store, config):
        records = custom_store.execute(optimized(config, engine_specs=EngineSpecs(cylinders=4)))
        assert models(records) == ["Land Cruiser", "Corolla"]
