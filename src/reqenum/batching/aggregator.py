"""
Merge per-chunk batch results into one ordered result list.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass

import structlog

from reqenum.batching.planner import Chunk

log = structlog.get_logger(__name__)

ResultT = t.TypeVar("ResultT")


@dataclass(frozen=True)
class ChunkOutcome(t.Generic[ResultT]):
    """
    Terminal state of one chunk exchange.

    Exactly one of ``results`` and ``error`` is set.

    Parameters
    ----------
    chunk : Chunk
        Chunk the outcome belongs to.
    results : list[ResultT] | None
        Decoded result envelopes, in response order.
    error : Exception | None
        Transport or decode failure.
    """

    chunk: Chunk[t.Any]
    results: list[ResultT] | None = None
    error: Exception | None = None

    def __post_init__(self) -> None:
        if (self.results is None) == (self.error is None):
            raise ValueError("ChunkOutcome needs exactly one of results or error")

    @property
    def ok(self) -> bool:
        return self.error is None


def aggregate_chunks(outcomes: t.Iterable[ChunkOutcome[ResultT]]) -> list[ResultT]:
    """
    Concatenate chunk results in chunk order, all or nothing.

    Parameters
    ----------
    outcomes : typing.Iterable[ChunkOutcome[ResultT]]
        One outcome per chunk, in any order.

    Returns
    -------
    list[ResultT]
        Results of every chunk, ordered by chunk index.

    Raises
    ------
    Exception
        The error of the lowest-indexed failed chunk. Results of successful
        chunks are discarded.

    Notes
    -----
    Per-item JSON-RPC errors are ordinary results here; only a failed
    exchange or an undecodable body fails the aggregate.
    """
    ordered = sorted(outcomes, key=lambda outcome: outcome.chunk.index)
    failed = [outcome for outcome in ordered if not outcome.ok]
    if failed:
        first = failed[0]
        log.warning(
            event="Discarding chunked batch results after chunk failure",
            failed_chunk_index=first.chunk.index,
            failed_chunk_count=len(failed),
            discarded_chunk_count=len(ordered) - len(failed),
            error=str(object=first.error),
        )
        raise t.cast(Exception, first.error)

    results: list[ResultT] = []
    for outcome in ordered:
        results.extend(t.cast(list[ResultT], outcome.results))
    return results
