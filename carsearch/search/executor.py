"""
Tiered search execution.

Runs OPTIMIZED, SIMPLIFIED and KEYWORD strictly in order and stops at the
first tier with at least one row. A tier that times out or errors counts as
empty. When every tier is empty the OPTIMIZED (empty) result is returned
together with the list of attempted tiers.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from carsearch.core.errors import QueryExecutionError, QueryTimeout
from carsearch.core.fallback import run_strategies
from carsearch.data.vehicle_store import VehicleRecord, VehicleStore
from carsearch.query.query_builder import SearchTier, TierQuery
from carsearch.utils.logger import get_logger, log_banner

logger = get_logger("search.executor")


@dataclass
class TierAttempt:
    """Diagnostics for one executed tier."""
    tier: SearchTier
    row_count: int = 0
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier.name.lower(),
            "row_count": self.row_count,
            "error": self.error,
            "elapsed_ms": round(self.elapsed_ms, 1),
        }


@dataclass
class ExecutionResult:
    """Rows from the first non-empty tier (or the OPTIMIZED tier when all are empty)."""
    tier: SearchTier
    rows: List[VehicleRecord] = field(default_factory=list)
    attempts: List[TierAttempt] = field(default_factory=list)
    store_unavailable: bool = False

    @property
    def total(self) -> int:
        return len(self.rows)


class SearchExecutor:
    """Executes tier queries sequentially against a vehicle store."""

    def __init__(self, store: VehicleStore):
        self.store = store

    def execute(self, tiers: List[TierQuery]) -> ExecutionResult:
        """
        Run tiers in order until one returns rows.

        Args:
            tiers: Tier queries, strictest first

        Returns:
            ExecutionResult with the winning tier, its rows and per-tier diagnostics
        """
        ordered = sorted(tiers, key=lambda t: t.tier)
        log_banner(logger, "TIERED VEHICLE SEARCH")

        outcome = run_strategies(
            [(tier.tier.name, (lambda tier=tier: self.store.execute(tier))) for tier in ordered],
            accept=lambda rows: len(rows) > 0,
            recoverable=(QueryTimeout, QueryExecutionError),
        )

        attempts = []
        for tier, attempt in zip(ordered, outcome.attempts):
            attempts.append(TierAttempt(
                tier=tier.tier,
                row_count=0 if attempt.failed else len(attempt.value),
                error=f"{type(attempt.error).__name__}: {attempt.error}" if attempt.failed else None,
                elapsed_ms=attempt.elapsed_ms,
            ))
            logger.info(f"  {tier.tier.name}: {attempts[-1].row_count} rows"
                        + (f" ({attempts[-1].error})" if attempts[-1].error else ""))

        if outcome.chosen is not None:
            winner = ordered[len(outcome.attempts) - 1].tier
            logger.info(f"Search resolved at tier {winner.name} with {len(outcome.value)} rows")
            return ExecutionResult(tier=winner, rows=list(outcome.value), attempts=attempts)

        logger.info("All tiers returned zero rows")
        first = ordered[0].tier if ordered else SearchTier.OPTIMIZED
        return ExecutionResult(
            tier=first,
            rows=[],
            attempts=attempts,
            store_unavailable=outcome.all_failed,
        )
