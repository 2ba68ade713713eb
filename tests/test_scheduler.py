import asyncio

import pytest

from status_checker.metrics import UrlStatusResult
from status_checker.scheduler import (
    SchedulerState,
    advance,
    batch_size_for,
    delay_after,
    progress_percent,
    run_batches,
    split_batches,
)
from status_checker.settings import CheckConfig


class Recorder:
    """Fake probe that records which URLs were in flight together."""

    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0
        self.seen = []

    async def probe(self, url):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.seen.append(url)
        await asyncio.sleep(0)
        self.in_flight -= 1
        return UrlStatusResult(original_url=url, final_url=url, status=200, status_text="OK", response_time_ms=1)


class FakeClock:
    """Each batch appears to take the next duration in `durations`."""

    def __init__(self, durations):
        self.durations = list(durations)
        self.now = 0.0
        self.started = False

    def __call__(self):
        if self.started:
            self.now += self.durations.pop(0)
        self.started = not self.started
        return self.now


def run(urls, probe, **kwargs):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    kwargs.setdefault("sleep", fake_sleep)
    results = asyncio.run(run_batches(urls, probe, CheckConfig(), **kwargs))
    return results, sleeps


@pytest.mark.parametrize("count,size", [
    (1, 5), (50, 5), (100, 5), (101, 10), (200, 10), (500, 10), (501, 15), (1000, 15),
])
def test_batch_size_for(count, size):
    assert batch_size_for(count, CheckConfig()) == size


def test_delay_after():
    cfg = CheckConfig()
    assert delay_after(10.5, cfg) == 0.5
    assert delay_after(10.0, cfg) == 0.1
    assert delay_after(0.2, cfg) == 0.1


def test_split_batches_37():
    batches = split_batches([f"u{i}.com" for i in range(37)], 5)
    assert len(batches) == 8
    assert len(batches[-1]) == 2


def test_advance_threads_state():
    state = advance(SchedulerState(batch_index=0, batch_size=5), batch_len=5, duration_s=1.5)
    assert state == SchedulerState(batch_index=1, batch_size=5, last_batch_duration_s=1.5, completed=5)


def test_progress_percent_rounds_half_up():
    assert progress_percent(1, 8) == 13
    assert progress_percent(37, 37) == 100


def test_37_urls_run_in_8_batches():
    urls = [f"https://site{i}.example" for i in range(37)]
    recorder = Recorder()
    events = []

    results, sleeps = run(urls, recorder.probe, on_progress=events.append)

    assert len(events) == 8
    assert [e.batch_index for e in events] == list(range(1, 9))
    assert len(events[-1].results) - len(events[-2].results) == 2
    # No sleep after the last batch
    assert len(sleeps) == 7
    assert recorder.max_in_flight == 5
    assert [r.original_url for r in results] == urls


def test_progress_is_monotonic_and_ends_at_100():
    events = []
    run([f"u{i}.com" for i in range(23)], Recorder().probe, on_progress=events.append)

    percents = [e.percent for e in events]
    assert percents == sorted(percents)
    assert percents[-1] == 100


def test_slow_batch_gets_longer_pause():
    urls = [f"u{i}.com" for i in range(15)]
    _, sleeps = run(urls, Recorder().probe, clock=FakeClock([12.0, 1.0, 1.0]))
    assert sleeps == [0.5, 0.1]


def test_stop_event_ends_run_between_batches():
    stop = asyncio.Event()
    events = []

    def on_progress(p):
        events.append(p)
        if p.batch_index == 2:
            stop.set()

    results, _ = run([f"u{i}.com" for i in range(20)], Recorder().probe, on_progress=on_progress, stop=stop)

    assert len(events) == 2
    assert len(results) == 10


def test_duplicates_are_probed_independently():
    recorder = Recorder()
    results, _ = run(["a.com", "a.com", "a.com"], recorder.probe)
    assert len(results) == 3
    assert recorder.seen == ["a.com", "a.com", "a.com"]


def test_empty_input():
    events = []
    results, sleeps = run([], Recorder().probe, on_progress=events.append)
    assert results == []
    assert events == []
    assert sleeps == []


def test_stop_set_during_pause_skips_next_batch():
    stop = asyncio.Event()

    async def sleep_then_stop(seconds):
        stop.set()

    results, _ = run([f"u{i}.com" for i in range(20)], Recorder().probe, stop=stop, sleep=sleep_then_stop)

    assert len(results) == 5
