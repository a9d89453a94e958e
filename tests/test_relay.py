"""Tests for the debounce relay."""

import queue
import time
from pathlib import Path

from src.organiser.config import Config, Options
from src.organiser.models import DebouncedEvent, EventKind, RawFSEvent
from src.organiser.relay import DebounceRelay
from src.organiser.shutdown import CancellationToken
from src.organiser.workers import WorkerPool


CONFIG = Config(options=Options(screenshots_dir=Path("/s")))


def make_relay(delay_ms=100, tick_ms=50):
    output = queue.Queue()
    relay = DebounceRelay(delay_ms, output, CancellationToken(), tick_ms=tick_ms)
    return relay, output


def raw(kind, path, timestamp, old_path=None):
    return RawFSEvent(kind=kind, path=Path(path), old_path=old_path, timestamp=timestamp)


def drain(output):
    events = []
    while True:
        try:
            events.append(output.get_nowait())
        except queue.Empty:
            return events


class TestDebounceRelay:
    """Tests for DebounceRelay coalescing and ticking."""

    def test_single_event_after_window(self):
        relay, output = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.CREATE, "/s/a.png", now))

        assert relay.tick(now + 0.05) == []
        assert relay.tick(now + 0.15) == [DebouncedEvent(EventKind.CREATE, Path("/s/a.png"))]
        assert drain(output) == [DebouncedEvent(EventKind.CREATE, Path("/s/a.png"))]

    def test_empty_tick_publishes_nothing(self):
        relay, output = make_relay()

        assert relay.tick() == []
        assert output.empty()

    def test_duplicate_creates_coalesce(self):
        relay, output = make_relay(delay_ms=100)
        now = time.time()
        for offset in (0.0, 0.01, 0.02):
            relay.push(raw(EventKind.CREATE, "/s/a.png", now + offset))

        relay.tick(now + 1)

        assert drain(output) == [DebouncedEvent(EventKind.CREATE, Path("/s/a.png"))]

    def test_create_then_write_stays_create(self):
        relay, _ = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.CREATE, "/s/a.png", now))
        relay.push(raw(EventKind.WRITE, "/s/a.png", now + 0.08))

        # the write restarts the window
        assert relay.tick(now + 0.12) == []
        assert relay.tick(now + 0.2) == [DebouncedEvent(EventKind.CREATE, Path("/s/a.png"))]

    def test_create_then_remove_cancels(self):
        relay, output = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.CREATE, "/s/a.png", now))
        relay.push(raw(EventKind.REMOVE, "/s/a.png", now + 0.01))

        relay.tick(now + 1)

        assert output.empty()
        assert relay.pending_count() == 0

    def test_remove_then_create_is_create(self):
        relay, _ = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.REMOVE, "/s/a.png", now))
        relay.push(raw(EventKind.CREATE, "/s/a.png", now + 0.01))

        assert relay.tick(now + 1) == [DebouncedEvent(EventKind.CREATE, Path("/s/a.png"))]

    def test_recreated_file_reaches_workers(self):
        relay, output = make_relay(delay_ms=100)
        handled = []
        pool = WorkerPool(
            CONFIG,
            Path("/tmp/scratch"),
            output,
            relay.token,
            size=1,
            handler=lambda config, temp_dir, path, worker=None: handled.append(path),
        )
        path = "/s/ffxiv_20230615_143000_0001.png"
        now = time.time()
        relay.push(raw(EventKind.REMOVE, path, now))
        relay.push(raw(EventKind.CREATE, path, now + 0.01))
        relay.tick(now + 1)

        pool.start()
        deadline = time.time() + 2.0
        while not handled and time.time() < deadline:
            time.sleep(0.01)
        relay.token.cancel()
        pool.join(timeout=2.0)

        assert handled == [Path(path)]

    def test_writes_coalesce(self):
        relay, _ = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.WRITE, "/s/a.png", now))
        relay.push(raw(EventKind.WRITE, "/s/a.png", now + 0.01))

        assert relay.tick(now + 1) == [DebouncedEvent(EventKind.WRITE, Path("/s/a.png"))]

    def test_rename_replaces_source(self):
        relay, _ = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.CREATE, "/s/tmp.png", now))
        relay.push(raw(EventKind.RENAME, "/s/a.png", now + 0.01, old_path=Path("/s/tmp.png")))

        assert relay.tick(now + 1) == [DebouncedEvent(EventKind.RENAME, Path("/s/a.png"))]

    def test_distinct_paths_are_kept(self):
        relay, _ = make_relay(delay_ms=100)
        now = time.time()
        relay.push(raw(EventKind.CREATE, "/s/a.png", now))
        relay.push(raw(EventKind.CREATE, "/s/b.png", now))

        events = relay.tick(now + 1)

        assert {e.path for e in events} == {Path("/s/a.png"), Path("/s/b.png")}

    def test_zero_delay_forwards_on_next_tick(self):
        relay, _ = make_relay(delay_ms=0)
        now = time.time()
        relay.push(raw(EventKind.CREATE, "/s/a.png", now))

        assert len(relay.tick(now)) == 1

    def test_background_loop_forwards_and_stops(self):
        output = queue.Queue()
        token = CancellationToken()
        relay = DebounceRelay(20, output, token, tick_ms=10)
        relay.start()

        relay.push(RawFSEvent(kind=EventKind.CREATE, path=Path("/s/a.png")))
        event = output.get(timeout=2.0)

        token.cancel()
        relay.join(timeout=2.0)

        assert event == DebouncedEvent(EventKind.CREATE, Path("/s/a.png"))
        assert not relay._thread.is_alive()
