"""
Ordered fallback strategies.

Every degradable stage (extraction, tiered search) is a list of named
strategies tried in order. A strategy fails by raising a recoverable
pipeline error or by producing a value the caller does not accept; the
first accepted value wins. All attempts are recorded for diagnostics.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type

from carsearch.core.errors import SearchPipelineError
from carsearch.utils.logger import get_logger

logger = get_logger("core.fallback")

Strategy = Tuple[str, Callable[[], Any]]


@dataclass
class Attempt:
    """Outcome of one strategy."""
    name: str
    value: Any = None
    error: Optional[Exception] = None
    elapsed_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class FallbackOutcome:
    """Result of running a strategy list."""
    attempts: List[Attempt] = field(default_factory=list)
    chosen: Optional[Attempt] = None

    @property
    def value(self) -> Any:
        return self.chosen.value if self.chosen else None

    @property
    def strategy(self) -> Optional[str]:
        return self.chosen.name if self.chosen else None

    @property
    def all_failed(self) -> bool:
        """True when every attempt raised (as opposed to returning an unaccepted value)."""
        return bool(self.attempts) and all(a.failed for a in self.attempts)


def run_strategies(
    strategies: Sequence[Strategy],
    accept: Callable[[Any], bool] = lambda value: True,
    recoverable: Tuple[Type[Exception], ...] = (SearchPipelineError,),
) -> FallbackOutcome:
    """
    Try strategies in order until one returns an accepted value.

    Args:
        strategies: (name, zero-argument callable) pairs, most preferred first
        accept: Predicate a returned value must satisfy to stop the chain
        recoverable: Exception types that mean "try the next strategy"

    Returns:
        FallbackOutcome; ``chosen`` is None when no strategy was accepted.
        Non-recoverable exceptions propagate.
    """
    outcome = FallbackOutcome()
    for name, strategy in strategies:
        started = time.perf_counter()
        attempt = Attempt(name=name)
        try:
            attempt.value = strategy()
        except recoverable as exc:
            attempt.error = exc
        attempt.elapsed_ms = (time.perf_counter() - started) * 1000
        outcome.attempts.append(attempt)

        if attempt.failed:
            logger.warning(f"Strategy '{name}' failed ({type(attempt.error).__name__}): {attempt.error}")
            continue
        if accept(attempt.value):
            outcome.chosen = attempt
            logger.debug(f"Strategy '{name}' accepted after {attempt.elapsed_ms:.0f}ms")
            break
        logger.info(f"Strategy '{name}' produced no usable result, trying next")

    return outcome
