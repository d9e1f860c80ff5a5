"""Batched worker-pool dispatch for Monte Carlo trials

Trials are split into fixed-size batches. Every batch owns a child
``numpy.random.SeedSequence`` spawned in batch order, so the random
stream a trial sees depends only on the root sequence and the batch
size. Whether batches run inline, on threads or on processes changes
wall-clock time only, never the numbers.

Typical usage
-------------
>>> seq = np.random.SeedSequence(42)
>>> sizes = batch_sizes(10_000, 2_000)
>>> payloads = [(child, n) for child, n in zip(seq.spawn(len(sizes)), sizes)]
>>> results = run_batches(_work, payloads, executor="thread")
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, List, Literal, Optional, Sequence, TypeVar

import numpy as np

__all__ = [
    "ExecutorKind",
    "resolve_max_workers",
    "batch_sizes",
    "choose_executor",
    "fresh_sequence",
    "as_seed_sequence",
    "run_batches",
]

logger = logging.getLogger(__name__)

ExecutorKind = Literal["thread", "process", "none"]

T = TypeVar("T")


def resolve_max_workers(max_workers: Optional[int], tasks: int) -> int:
    """Bound pool size by the requested maximum, the task count and the CPUs.

    Always returns at least one worker.
    """
    if tasks <= 1:
        return 1
    if max_workers is None:
        return max(1, min(tasks, os.cpu_count() or 1))
    return max(1, min(max_workers, tasks))


def batch_sizes(total: int, batch_size: int) -> List[int]:
    """Split *total* trials into consecutive batches of at most *batch_size*.

    >>> batch_sizes(5_000, 2_000)
    [2000, 2000, 1000]
    """
    if total < 0:
        raise ValueError(f"total must be non-negative (got {total}).")
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1 (got {batch_size}).")
    full, rest = divmod(total, batch_size)
    sizes = [batch_size] * full
    if rest:
        sizes.append(rest)
    return sizes


def choose_executor(executor: str, tasks: int) -> str:
    """Pick the dispatch mode; a single task always runs inline."""
    if executor not in ("thread", "process", "none"):
        raise ValueError(
            f"executor must be 'thread', 'process' or 'none' (got {executor!r})."
        )
    if tasks <= 1:
        return "none"
    return executor


def fresh_sequence(seq: np.random.SeedSequence) -> np.random.SeedSequence:
    """Copy of *seq* with its spawn counter reset.

    Spawning from the copy yields the same children the original yielded
    on its first spawn, which lets callers replay a run exactly.
    """
    return np.random.SeedSequence(
        seq.entropy, spawn_key=seq.spawn_key, pool_size=seq.pool_size
    )


def as_seed_sequence(seed: Any) -> np.random.SeedSequence:
    """Normalize ``None``, an int or a SeedSequence into a SeedSequence."""
    if isinstance(seed, np.random.SeedSequence):
        return fresh_sequence(seed)
    return np.random.SeedSequence(seed)


def run_batches(
    worker: Callable[[Any], T],
    payloads: Sequence[Any],
    *,
    executor: str = "thread",
    max_workers: Optional[int] = None,
) -> List[T]:
    """Apply *worker* to every payload and return results in payload order.

    Parameters
    ----------
    worker : callable
        Module-level function taking a single payload (picklable for
        process pools).
    payloads : sequence
        One entry per batch, usually a tuple carrying the batch's
        SeedSequence and trial count.
    executor : {"thread", "process", "none"}
        Dispatch mode. ``"none"`` runs inline in the calling thread.
    max_workers : int, optional
        Pool size cap; defaults to the CPU count.
    """
    mode = choose_executor(executor, len(payloads))
    if mode == "none":
        return [worker(p) for p in payloads]

    workers = resolve_max_workers(max_workers, len(payloads))
    logger.debug("Dispatching %d batches on %s pool (%d workers)", len(payloads), mode, workers)
    ExecutorCls = ProcessPoolExecutor if mode == "process" else ThreadPoolExecutor
    with ExecutorCls(max_workers=workers) as pool:
        return list(pool.map(worker, payloads))
