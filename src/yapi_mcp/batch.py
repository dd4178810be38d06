"""
YApi MCP — Batch Fetch Orchestration

Fetches many identifiers in fixed-size concurrent rounds. Rounds run one
after another; every fetch inside a round is started together and awaited
together without failing fast. A failing identifier is recorded and never
stops its siblings or later rounds.

Preload mode first discovers the identifiers (e.g. every interface of a
project) and then runs the batch purely to warm the cache.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .errors import PreloadError
from .observability import get_observability

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
S = TypeVar("S")

DEFAULT_CHUNK_SIZE = 5


@dataclass(frozen=True)
class BatchItemError(Generic[K]):
    """Records which identifier failed and why. Collected, never raised."""

    identifier: K
    error: str
    error_type: str = "Exception"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.identifier, "error": self.error, "error_type": self.error_type}


@dataclass
class BatchResult(Generic[K, V]):
    """Outcome of a batch run. Every identifier appears exactly once."""

    successes: list[V] = field(default_factory=list)
    succeeded_ids: list[K] = field(default_factory=list)
    failures: list[BatchItemError[K]] = field(default_factory=list)
    rounds: int = 0

    @property
    def failed_ids(self) -> list[K]:
        return [f.identifier for f in self.failures]

    @property
    def total(self) -> int:
        return len(self.succeeded_ids) + len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        """Human-readable breakdown of the run. Diagnostic only."""
        text = f"Batch completed: {len(self.successes)} succeeded, {len(self.failures)} failed in {self.rounds} round(s)"
        if self.failures:
            lines = [f"  - {f.identifier}: {f.error}" for f in self.failures]
            text += "\n" + "\n".join(lines)
        return text


@dataclass
class PreloadSummary(Generic[S, K]):
    """Result of a completed preload. Item failures do not fail the preload."""

    scope: S
    total: int
    succeeded: int
    failures: list[BatchItemError[K]]
    rounds: int
    status: str = "completed"

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "rounds": self.rounds,
            "failures": [f.to_dict() for f in self.failures],
        }


def chunked(items: Sequence[K], size: int) -> list[list[K]]:
    """Split ``items`` into consecutive chunks of at most ``size`` items."""
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchOrchestrator(Generic[K, V, S]):
    """
    Bounded-concurrency batch fetcher tolerant of partial failure.

    Args:
        fetch: Async function fetching one identifier (usually cache-wrapped)
        discover: Async function listing the identifiers of a scope (preload only)
        chunk_size: Default number of concurrent fetches per round
    """

    def __init__(
        self,
        fetch: Callable[[K], Awaitable[V]],
        discover: Callable[[S], Awaitable[Sequence[K]]] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk size must be >= 1, got {chunk_size}")
        self._fetch = fetch
        self._discover = discover
        self.chunk_size = chunk_size

    async def run_batch(self, identifiers: Sequence[K], chunk_size: int | None = None) -> BatchResult[K, V]:
        """
        Fetch every identifier, ``chunk_size`` at a time.

        Round ``i + 1`` starts only after every fetch of round ``i`` settled.
        Results are attributed by identifier, not by completion order.
        """
        size = chunk_size if chunk_size is not None else self.chunk_size
        chunks = chunked(identifiers, size)
        result: BatchResult[K, V] = BatchResult()
        obs = get_observability()

        logger.info(
            f"Batch started: {len(identifiers)} item(s) in {len(chunks)} round(s)",
            extra={"total": len(identifiers), "chunk_size": size, "rounds": len(chunks)},
        )

        for round_no, chunk in enumerate(chunks, start=1):
            outcomes = await asyncio.gather(*(self._fetch(ident) for ident in chunk), return_exceptions=True)

            for ident, outcome in zip(chunk, outcomes, strict=True):
                if isinstance(outcome, Exception):
                    result.failures.append(
                        BatchItemError(identifier=ident, error=str(outcome), error_type=type(outcome).__name__)
                    )
                    logger.warning(f"Batch item {ident} failed: {outcome}", extra={"identifier": ident})
                elif isinstance(outcome, BaseException):
                    # Cancellation and interpreter exits are not item failures
                    raise outcome
                else:
                    result.successes.append(outcome)
                    result.succeeded_ids.append(ident)

            result.rounds = round_no
            obs.increment("batch.rounds")
            logger.debug(
                f"Batch progress: {min(round_no * size, len(identifiers))}/{len(identifiers)}",
                extra={"round": round_no, "rounds": len(chunks)},
            )

        obs.increment("batch.items.succeeded", len(result.successes))
        obs.increment("batch.items.failed", len(result.failures))

        if result.failures:
            logger.warning(result.summary(), extra={"failed_ids": result.failed_ids})
        else:
            logger.info(result.summary())

        return result

    async def preload(self, scope: S, chunk_size: int | None = None) -> PreloadSummary[S, K]:
        """
        Discover the identifiers of ``scope`` and fetch them all to warm the cache.

        Raises:
            PreloadError: If the identifier list cannot be obtained. No round
                is started in that case.
        """
        if self._discover is None:
            raise RuntimeError("preload requires a discover function")

        logger.info(f"Preload started for {scope}", extra={"scope": scope})

        try:
            identifiers = list(await self._discover(scope))
        except Exception as e:
            get_observability().increment("preload.failed")
            logger.error(f"Preload failed for {scope}: {e}", extra={"scope": scope, "error": str(e)})
            raise PreloadError(scope, str(e)) from e

        logger.info(f"Found {len(identifiers)} item(s) to preload for {scope}", extra={"scope": scope})

        result = await self.run_batch(identifiers, chunk_size=chunk_size)
        summary = PreloadSummary(
            scope=scope,
            total=len(identifiers),
            succeeded=len(result.successes),
            failures=result.failures,
            rounds=result.rounds,
        )

        get_observability().increment("preload.completed")
        logger.info(
            f"Preload completed for {scope}: {summary.succeeded}/{summary.total} fetched",
            extra={"scope": scope, "failed": summary.failed, "rounds": summary.rounds},
        )
        return summary

