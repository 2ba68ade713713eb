"""
Batch scheduler: probes a URL list in sequential, internally concurrent batches.

- Batch size is picked once per run from the total URL count
- Every URL in a batch is probed concurrently; the batch ends when all settle
- Between batches the scheduler pauses longer if the last batch was slow
- Progress is pushed to an optional callback after each batch
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Sequence

import aiohttp

from .http_prober import HttpProber
from .metrics import UrlStatusResult
from .prober import UrlProber
from .settings import DEFAULT_CHECK_CONFIG, CheckConfig, ProxySettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerState:
    batch_index: int
    batch_size: int
    last_batch_duration_s: float = 0.0
    completed: int = 0


@dataclass(frozen=True)
class Progress:
    """Snapshot pushed to the progress callback after each batch."""
    results: tuple[UrlStatusResult, ...]
    percent: int
    batch_index: int
    total_batches: int


ProgressCallback = Callable[[Progress], None]
ProbeFn = Callable[[str], Awaitable[UrlStatusResult]]


def batch_size_for(count: int, config: CheckConfig | None = None) -> int:
    cfg = config or DEFAULT_CHECK_CONFIG
    if count <= cfg.small_job_max:
        return cfg.small_batch_size
    if count <= cfg.medium_job_max:
        return cfg.medium_batch_size
    return cfg.large_batch_size


def delay_after(duration_s: float, config: CheckConfig | None = None) -> float:
    """Pause to insert after a batch that took `duration_s` seconds."""
    cfg = config or DEFAULT_CHECK_CONFIG
    if duration_s > cfg.slow_batch_threshold_s:
        return cfg.slow_batch_delay_s
    return cfg.fast_batch_delay_s


def split_batches(urls: Sequence[str], size: int) -> list[list[str]]:
    return [list(urls[i:i + size]) for i in range(0, len(urls), size)]


def progress_percent(done: int, total: int) -> int:
    if total <= 0:
        return 100
    # Half-up rounding
    return math.floor(done / total * 100 + 0.5)


def advance(state: SchedulerState, batch_len: int, duration_s: float) -> SchedulerState:
    return replace(
        state,
        batch_index=state.batch_index + 1,
        last_batch_duration_s=duration_s,
        completed=state.completed + batch_len,
    )


async def run_batches(
    urls: Sequence[str],
    probe: ProbeFn,
    config: CheckConfig | None = None,
    on_progress: ProgressCallback | None = None,
    stop: asyncio.Event | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.perf_counter,
) -> list[UrlStatusResult]:
    """
    Drive `probe` over `urls` batch by batch.

    Results come back batch-ordered; within a batch they keep submission
    order. `stop` is checked right before each batch starts (after the
    inter-batch pause); once set, the run ends early with whatever has been
    collected. `sleep` and `clock` exist so tests can run the loop without
    real waiting.
    """
    cfg = config or DEFAULT_CHECK_CONFIG
    total = len(urls)
    if total == 0:
        return []

    size = batch_size_for(total, cfg)
    batches = split_batches(urls, size)
    state = SchedulerState(batch_index=0, batch_size=size)
    results: list[UrlStatusResult] = []

    for batch in batches:
        if state.batch_index > 0:
            await sleep(delay_after(state.last_batch_duration_s, cfg))

        # After the pause, so a stop set while sleeping is honoured
        if stop is not None and stop.is_set():
            logger.warning(
                "Stopped after %d of %d batches (%d/%d URLs)",
                state.batch_index, len(batches), state.completed, total,
            )
            break

        t0 = clock()
        batch_results = await asyncio.gather(*(probe(u) for u in batch))
        state = advance(state, len(batch), clock() - t0)
        results.extend(batch_results)

        percent = progress_percent(state.completed, total)
        logger.info(
            "Batch %d/%d: %d URLs in %.2fs (%d%%)",
            state.batch_index, len(batches), len(batch), state.last_batch_duration_s, percent,
        )
        if on_progress is not None:
            on_progress(Progress(
                results=tuple(results),
                percent=percent,
                batch_index=state.batch_index,
                total_batches=len(batches),
            ))

    return results


async def check_urls(
    urls: Sequence[str],
    config: CheckConfig | None = None,
    proxy: ProxySettings | None = None,
    on_progress: ProgressCallback | None = None,
    stop: asyncio.Event | None = None,
) -> list[UrlStatusResult]:
    """
    Probe every URL and return one UrlStatusResult per input entry.

    Duplicates are probed independently. Network failures never raise;
    they come back as status 0 results.
    """
    cfg = config or DEFAULT_CHECK_CONFIG
    if not urls:
        return []

    connector = aiohttp.TCPConnector(limit=batch_size_for(len(urls), cfg))
    async with aiohttp.ClientSession(connector=connector) as session:
        prober = UrlProber(HttpProber(session, cfg, proxy), cfg)
        return await run_batches(urls, prober.probe, cfg, on_progress=on_progress, stop=stop)


def run_check(
    urls: Sequence[str],
    config: CheckConfig | None = None,
    proxy: ProxySettings | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[UrlStatusResult]:
    """Blocking wrapper around check_urls."""
    return asyncio.run(check_urls(urls, config=config, proxy=proxy, on_progress=on_progress))
