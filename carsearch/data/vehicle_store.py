"""
Read-only vehicle inventory access backed by SQLite.

Compiles ``TierQuery`` predicates into parameterized SQL against the
``vehicles`` table. Column names and operators come from fixed maps below;
values are always bound. Each query runs under a deadline enforced by a
SQLite progress handler, so a slow statement is aborted inside the engine.
"""
from __future__ import annotations

import re
import sqlite3
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from carsearch.core.config import SearchConfig, get_config
from carsearch.core.errors import QueryExecutionError, QueryTimeout
from carsearch.query.query_builder import Condition, Predicate, TierQuery
from carsearch.utils.logger import get_logger
from carsearch.vocabulary.text import first_number, similarity_ratio

logger = get_logger("data.vehicle_store")

# Logical column -> physical column
TEXT_COLUMNS: Dict[str, str] = {
    "brand": "brand",
    "model": "model",
    "body_type": "body_type",
    "engine": "engine",
    "transmission": "transmission",
    "fuel": "fuel",
    "exterior": "exterior",
    "interior": "interior",
    "condition": "condition",
    "location": "location",
    "address": "address",
}
NUMERIC_COLUMNS: Dict[str, str] = {
    "year": "year",
    "price": "price",
}

SELECT_COLUMNS = (
    "id", "brand", "model", "year", "price", "exterior", "interior", "transmission",
    "fuel", "engine", "condition", "body_type", "traction", "passengers", "location", "address",
)

# VM instructions between deadline checks
PROGRESS_STEPS = 50


def _to_number(value: Any) -> Optional[float]:
    """SQL helper: numeric value of "$25,000", "RD$ 1.250.000", "2018", 31000.0; NULL when unparseable."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return first_number(str(value))


def _casefold(value: Any) -> str:
    """SQL helper: Unicode-aware lowercase (SQLite LOWER only folds ASCII)."""
    return str(value).lower() if value is not None else ""


def _has_word(value: Any, term: Any) -> int:
    """
    SQL helper: ``term`` starts at a word boundary and is not followed by a digit.

    "8 cylinder" matches "8 cylinders" but not "18 cylinder"; "v8" does not match "v80".
    """
    if value is None or term is None:
        return 0
    pattern = r"(?<![\w.])" + re.escape(str(term).lower()) + r"(?!\d)"
    return 1 if re.search(pattern, str(value).lower()) else 0


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _format_sql_with_params(sql: str, params: Sequence[Any]) -> str:
    """Return human-readable SQL with positional parameters substituted for logging."""
    formatted = sql
    for value in params:
        formatted = formatted.replace("?", repr(value), 1)
    return formatted


@dataclass(frozen=True)
class VehicleRecord:
    """Read-only projection of an inventory row."""
    id: int
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    price: Optional[str] = None
    exterior: Optional[str] = None
    interior: Optional[str] = None
    transmission: Optional[str] = None
    fuel: Optional[str] = None
    engine: Optional[str] = None
    condition: Optional[str] = None
    body_type: Optional[str] = None
    traction: Optional[str] = None
    passengers: Optional[int] = None
    location: Optional[str] = None
    address: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "VehicleRecord":
        data = {key: row[key] for key in row.keys() if key in SELECT_COLUMNS}
        year = _to_number(data.get("year"))
        data["year"] = int(year) if year is not None else None
        if data.get("price") is not None:
            data["price"] = str(data["price"])
        return cls(**data)

    def title(self) -> str:
        return " ".join(str(part) for part in (self.year, self.brand, self.model) if part)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class VehicleStore:
    """Interface of the inventory store used by the search executor."""

    def execute(self, tier_query: TierQuery) -> List[VehicleRecord]:
        raise NotImplementedError


class LocalVehicleStore(VehicleStore):
    """
    Inventory repository over a SQLite ``vehicles`` table.

    Args:
        db_path: Database location (config ``vehicle_db`` when omitted)
        config: Search configuration; supplies the timeout and similarity threshold
    """

    def __init__(self, db_path: Optional[Path] = None, config: Optional[SearchConfig] = None):
        self.config = config or get_config()
        self.db_path = Path(db_path) if db_path else self.config.resolve_db_path()
        self.timeout = self.config.query_timeout
        self.similarity_threshold = self.config.similarity_threshold
        if not self.db_path.exists():
            # Not fatal: every tier reports QueryExecutionError and the pipeline degrades
            logger.warning(f"Vehicle database not found at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        conn.row_factory = sqlite3.Row
        conn.create_function("CASEFOLD", 1, _casefold, deterministic=True)
        conn.create_function("TO_NUMBER", 1, _to_number, deterministic=True)
        conn.create_function("SIMILARITY", 2, similarity_ratio, deterministic=True)
        conn.create_function("HAS_WORD", 2, _has_word, deterministic=True)
        return conn

    # ------------------------------------------------------------------ #
    # SQL compilation
    # ------------------------------------------------------------------ #

    def _compile_condition(self, condition: Condition) -> Tuple[str, List[Any]]:
        if condition.op == "contains":
            column = TEXT_COLUMNS[condition.column]
            pattern = f"%{_escape_like(str(condition.value).lower())}%"
            return f"CASEFOLD({column}) LIKE ? ESCAPE '\\'", [pattern]
        if condition.op == "word":
            column = TEXT_COLUMNS[condition.column]
            return f"HAS_WORD({column}, ?)", [str(condition.value)]
        if condition.op == "similar":
            column = TEXT_COLUMNS[condition.column]
            return f"SIMILARITY({column}, ?) > ?", [str(condition.value), self.similarity_threshold]
        if condition.op in ("gte", "lte"):
            column = NUMERIC_COLUMNS[condition.column]
            operator = ">=" if condition.op == "gte" else "<="
            return f"TO_NUMBER({column}) {operator} ?", [float(condition.value)]
        raise QueryExecutionError(f"Unsupported operator: {condition.op}")

    def _compile_predicate(self, predicate: Predicate) -> Tuple[str, List[Any]]:
        if not predicate.conditions:
            return "0", []
        clauses: List[str] = []
        params: List[Any] = []
        for condition in predicate.conditions:
            clause, values = self._compile_condition(condition)
            clauses.append(clause)
            params.extend(values)
        return "(" + " OR ".join(clauses) + ")", params

    def build_sql(self, tier_query: TierQuery) -> Tuple[str, List[Any]]:
        """Compile a tier query into (sql, params)."""
        try:
            compiled = [self._compile_predicate(p) for p in tier_query.predicates]
        except KeyError as exc:
            raise QueryExecutionError(f"Column not mapped: {exc}") from exc

        sql = f"SELECT {', '.join(SELECT_COLUMNS)} FROM vehicles"
        params: List[Any] = []
        if compiled:
            sql += " WHERE " + " AND ".join(clause for clause, _ in compiled)
            for _, values in compiled:
                params.extend(values)
        sql += " ORDER BY id LIMIT ?"
        params.append(int(tier_query.limit))
        return sql, params

    # ------------------------------------------------------------------ #
    # Public interface
    # ------------------------------------------------------------------ #

    def execute(self, tier_query: TierQuery) -> List[VehicleRecord]:
        """
        Run one tier query.

        Returns:
            Matching records, at most ``tier_query.limit``

        Raises:
            QueryTimeout: The statement ran past the store timeout and was interrupted
            QueryExecutionError: The store could not be opened or rejected the statement
        """
        sql, params = self.build_sql(tier_query)
        logger.info(f"{tier_query.tier.name} SQL query: {_format_sql_with_params(sql, params)}")

        deadline = time.monotonic() + self.timeout

        def _past_deadline() -> int:
            return 1 if time.monotonic() >= deadline else 0

        conn = None
        try:
            conn = self._connect()
            conn.set_progress_handler(_past_deadline, PROGRESS_STEPS)
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.OperationalError as exc:
            if "interrupted" in str(exc).lower():
                raise QueryTimeout(f"{tier_query.tier.name} query exceeded {self.timeout}s") from exc
            raise QueryExecutionError(f"SQLite query failed: {exc}") from exc
        except sqlite3.Error as exc:
            raise QueryExecutionError(f"SQLite query failed: {exc}") from exc
        finally:
            if conn is not None:
                conn.close()

        records = [VehicleRecord.from_row(row) for row in rows]
        logger.info(f"{tier_query.tier.name} query returned {len(records)} vehicles")
        return records
