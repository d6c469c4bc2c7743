"""
Batch Analyzer
Runs an async analysis over many items in fixed-size concurrent batches
"""
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar
import asyncio
import logging


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]


async def analyze_batch(
    items: Sequence[T],
    analyze_one: Callable[[T], Awaitable[R]],
    max_concurrent: int = 3,
    on_progress: Optional[ProgressCallback] = None,
    *,
    delay: float = 1.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[R]:
    """
    Analyze items in sequential batches of at most `max_concurrent`

    Items of one batch run concurrently and the next batch starts only when
    the whole batch is done, after `delay` seconds. A failing item is logged
    and dropped. `on_progress(completed, total)` fires once per finished item,
    successful or not, with `completed` strictly increasing.

    Args:
        items: inputs
        analyze_one: coroutine function analyzing a single item
        max_concurrent: batch size
        on_progress: progress callback
        delay: pause between batches (seconds)
        sleep: awaitable sleep, injectable for tests
        should_stop: checked before each batch; True stops launching batches

    Returns:
        Successful results in completion order
    """
    total = len(items)
    batch_size = max(1, int(max_concurrent))
    results: List[R] = []
    completed = 0

    async def run_one(item: T) -> None:
        nonlocal completed
        try:
            results.append(await analyze_one(item))
        except Exception as e:
            logger.warning(f"Item analysis failed, skipping: {e}")
        completed += 1
        if on_progress:
            on_progress(completed, total)

    logger.info(f"Analyzing {total} items ({batch_size} concurrent)")

    for start in range(0, total, batch_size):
        if start > 0 and delay > 0:
            await sleep(delay)

        if should_stop and should_stop():
            logger.info(f"Batch analysis stopped after {completed}/{total} items")
            break

        batch = items[start:start + batch_size]
        await asyncio.gather(*[run_one(item) for item in batch])

    logger.info(f"Batch analysis finished: {len(results)}/{total} succeeded")
    return results
