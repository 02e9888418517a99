"""
Correlation id assignment and chunk planning for JSON-RPC batches.

Ids are 1-based and carry a global offset across chunks: the item at
``position`` in chunk ``index`` gets ``index * chunk_size + position + 1``.
Ids are therefore unique within one dispatch call and equal to the item's
1-based position in the caller's sequence.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass

from reqenum.exceptions import InvalidRequestError

TargetT = t.TypeVar("TargetT")


def assign_ids(
    targets: t.Sequence[TargetT],
    *,
    start_offset: int = 0,
) -> list[tuple[int, TargetT]]:
    """
    Pair targets with contiguous 1-based correlation ids.

    Parameters
    ----------
    targets : typing.Sequence[TargetT]
        Targets in dispatch order.
    start_offset : int, optional
        Number of targets preceding this sequence in the dispatch call.

    Returns
    -------
    list[tuple[int, TargetT]]
        ``(start_offset + index + 1, target)`` pairs.
    """
    return [(start_offset + index + 1, target) for index, target in enumerate(targets)]


@dataclass(frozen=True)
class Chunk(t.Generic[TargetT]):
    """
    Contiguous slice of a dispatch call sent as one HTTP exchange.

    Parameters
    ----------
    index : int
        Position of the chunk among all chunks of the call.
    start_offset : int
        Position of the chunk's first target in the caller's sequence.
    targets : tuple[TargetT, ...]
        Targets of the chunk, in original order.
    """

    index: int
    start_offset: int
    targets: tuple[TargetT, ...]

    def __len__(self) -> int:
        return len(self.targets)

    def correlated(self) -> list[tuple[int, TargetT]]:
        return assign_ids(self.targets, start_offset=self.start_offset)

    @property
    def ids(self) -> list[int]:
        return [request_id for request_id, _ in self.correlated()]


def plan_chunks(targets: t.Sequence[TargetT], *, chunk_size: int) -> list[Chunk[TargetT]]:
    """
    Split targets into ordered chunks of at most ``chunk_size`` items.

    Parameters
    ----------
    targets : typing.Sequence[TargetT]
        Targets in dispatch order.
    chunk_size : int
        Maximum number of targets per chunk.

    Returns
    -------
    list[Chunk[TargetT]]
        ``ceil(len(targets) / chunk_size)`` chunks whose concatenation equals
        ``targets``.

    Raises
    ------
    InvalidRequestError
        If ``targets`` is empty or ``chunk_size`` is below one.
    """
    if not targets:
        raise InvalidRequestError("no targets to dispatch")
    if chunk_size < 1:
        raise InvalidRequestError(f"chunk size must be at least 1, got {chunk_size}")

    return [
        Chunk(
            index=index,
            start_offset=start,
            targets=tuple(targets[start : start + chunk_size]),
        )
        for index, start in enumerate(range(0, len(targets), chunk_size))
    ]
