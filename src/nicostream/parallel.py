"""Thread pool helper for resolving many videos at once."""

import concurrent.futures
import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")

MAX_WORKERS_LIMIT = 16

Outcome = tuple[bool, R | None, Exception | None]


def parallel_process(
    items: Sequence[T],
    process_func: Callable[[T, int, int], R],
    max_workers: int = 4,
    logger: logging.Logger | None = None,
) -> list[Outcome[R]]:
    """Run ``process_func(item, index, total)`` for every item on a thread pool.

    An exception from one item is captured in that item's outcome and does
    not stop the others.

    Args:
        items: Items to process
        process_func: Called once per item
        max_workers: Thread count, clamped to 1..16
        logger: Logger for per-item failures; the module logger if omitted

    Returns:
        One ``(success, result, exception)`` outcome per item, in the order of ``items``

    """
    log = logger or logging.getLogger(__name__)
    total = len(items)
    if not total:
        return []

    outcomes: list[Outcome[R]] = [(False, None, None)] * total
    workers = max(1, min(max_workers, MAX_WORKERS_LIMIT))

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        pending = {executor.submit(_capture, process_func, item, index, total, log): index for index, item in enumerate(items)}
        for future in concurrent.futures.as_completed(pending):
            index = pending[future]
            outcome = future.result()
            outcomes[index] = outcome
            if not outcome[0]:
                log.warning("Item %s of %s failed: %s", index + 1, total, outcome[2])

    return outcomes


def _capture(
    process_func: Callable[[T, int, int], R],
    item: T,
    index: int,
    total: int,
    log: logging.Logger,
) -> Outcome[R]:
    try:
        return True, process_func(item, index, total), None
    except Exception as e:
        log.error("Error processing item %s of %s: %s", index + 1, total, e)
        return False, None, e
