from __future__ import annotations

import logging
import math
import threading
from datetime import datetime

import pytest

from emgrms.config.runtime import RmsConfig
from emgrms.core.models import DisplaySnapshot
from emgrms.core.session import SessionState, SessionStateError, StreamingSession


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _session(clock: FakeClock, **kwargs) -> StreamingSession:
    return StreamingSession(
        kwargs.pop("config", None),
        clock=clock,
        wall_clock=lambda: datetime(2025, 1, 2, 3, 4, 5),
        **kwargs,
    )


def test_record_starts_with_empty_state() -> None:
    clock = FakeClock(5.0)
    session = _session(clock)
    assert session.state is SessionState.IDLE

    session.record()

    assert session.is_recording
    assert session.start_time == 5.0
    snap = session.snapshot()
    assert snap.values == ()
    assert snap.short_term == () and snap.medium_term == () and snap.max_term == ()
    assert session.recorded_values == []
    assert session.recorded_times == []


def test_append_while_idle_only_feeds_display() -> None:
    clock = FakeClock()
    session = _session(clock)

    clock.now = 3.0
    session.append([1.0, 2.0])

    assert session.values.snapshot() == [1.0, 2.0]
    assert session.recorded_values == []
    assert len(session.short_term) == 0
    assert len(session.medium_term) == 0


def test_record_clears_display_and_previous_session() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.append([9.0])
    session.record()
    clock.now = 0.5
    session.append([1.0])
    assert session.values.snapshot() == [1.0]

    clock.now = 10.0
    session.record()
    assert session.values.snapshot() == []
    assert session.recorded_values == []
    assert len(session.short_term) == 0
    assert session.start_time == 10.0


def test_batch_shares_elapsed_time_and_logs_stay_parallel() -> None:
    clock = FakeClock(100.0)
    session = _session(clock)
    session.record()

    clock.now = 100.25
    session.append([1.0, 2.0, 3.0])
    clock.now = 100.5
    session.append([4.0])

    times = session.recorded_times
    assert len(times) == len(session.recorded_values) == 4
    assert times[:3] == [pytest.approx(0.25)] * 3
    assert times[3] == pytest.approx(0.5)


def test_one_short_term_emission_per_append_without_catch_up() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()

    clock.now = 0.35
    session.append([2.0])
    assert session.short_term.snapshot() == [pytest.approx(2.0)]

    clock.now = 0.4
    session.append([1.0])
    assert len(session.short_term) == 1

    clock.now = 0.5
    session.append([1.0])
    assert session.short_term.snapshot()[-1] == pytest.approx(1.0)
    assert len(session.short_term) == 2


def test_windows_and_max_history() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()

    for k in range(1, 11):
        clock.now = float(k)
        session.append([float(k)])

    assert session.medium_term.snapshot() == [pytest.approx(float(k)) for k in range(1, 11)]
    assert len(session.short_term) == 10
    assert session.max_term.snapshot() == [pytest.approx(10.0)]

    clock.now = 11.0
    session.append([0.5])
    assert session.max_term.snapshot() == [pytest.approx(10.0), pytest.approx(10.0)]

    clock.now = 12.0
    session.append([0.25])
    # values 3..10, 0.5, 0.25 remain in the trailing window
    assert session.max_term.latest() == pytest.approx(10.0)


def test_short_term_rms_covers_samples_since_last_flush() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()

    clock.now = 0.05
    session.append([1.0, 1.0])
    clock.now = 0.12
    session.append([3.0, 3.0])

    assert session.short_term.snapshot() == [pytest.approx(math.sqrt(5.0))]


def test_display_buffer_is_bounded() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()
    clock.now = 0.01
    session.append(range(1500))

    values = session.values.snapshot()
    assert len(values) == 1000
    assert values[0] == 500.0
    assert values[-1] == 1499.0
    assert len(session.recorded_values) == 1500


def test_display_capacity_follows_config() -> None:
    session = _session(FakeClock(), config=RmsConfig(display_capacity=5))
    session.append(range(8))
    assert session.values.snapshot() == [3.0, 4.0, 5.0, 6.0, 7.0]


def test_stop_and_export_returns_artifact_and_goes_idle() -> None:
    clock = FakeClock(1.0)
    session = _session(clock)
    session.record()
    clock.now = 1.05
    session.append([0.5, -0.5])
    clock.now = 1.5

    text = session.stop_and_export()

    assert not session.is_recording
    lines = text.splitlines()
    assert lines[0] == "Recording Duration (s):,0.5"
    assert lines[1] == "Time (s),EMG (Raw Data),0.1s RMS,1s RMS,10s Max RMS"
    assert len(lines) == 4
    recording = session.last_recording
    assert recording is not None
    assert recording.values == [0.5, -0.5]
    assert recording.duration_s == pytest.approx(0.5)
    # histories stay readable after stopping
    assert session.values.snapshot() == [0.5, -0.5]


def test_append_after_stop_does_not_record() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()
    clock.now = 0.2
    session.append([1.0])
    session.stop_and_export()

    clock.now = 0.4
    session.append([2.0])

    assert session.recorded_values == [1.0]
    assert session.values.snapshot() == [1.0, 2.0]


def test_stop_while_idle_is_rejected(caplog: pytest.LogCaptureFixture) -> None:
    session = _session(FakeClock())
    with caplog.at_level(logging.WARNING):
        with pytest.raises(SessionStateError):
            session.stop_and_export()
    assert "idle" in caplog.text
    assert session.last_recording is None


def test_second_stop_is_rejected_and_keeps_data() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()
    clock.now = 0.3
    session.append([1.0, 2.0])
    first = session.stop_and_export()

    with pytest.raises(SessionStateError):
        session.stop_and_export()

    assert session.recorded_values == [1.0, 2.0]
    assert session.last_recording is not None
    assert len(session.last_recording) == 2
    assert len(first.splitlines()) == 4


def test_listeners_receive_snapshots_and_failures_are_logged(
    caplog: pytest.LogCaptureFixture,
) -> None:
    clock = FakeClock()
    session = _session(clock)
    received: list[DisplaySnapshot] = []

    def _broken(_snapshot: DisplaySnapshot) -> None:
        raise RuntimeError("renderer crashed")

    session.add_listener(_broken)
    session.add_listener(received.append)
    session.record()
    clock.now = 0.2
    with caplog.at_level(logging.ERROR):
        session.append([3.0])

    assert "renderer crashed" in caplog.text
    assert len(received) == 1
    assert received[0].values == (3.0,)
    assert received[0].short_term == (pytest.approx(3.0),)
    assert received[0].is_recording
    assert received[0].elapsed_s == pytest.approx(0.2)

    session.remove_listener(received.append)
    session.remove_listener(received.append)
    session.append([1.0])
    assert len(received) == 1


def test_snapshot_is_consistent_under_concurrent_appends() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()
    stop = threading.Event()
    torn: list[DisplaySnapshot] = []

    def _reader() -> None:
        while not stop.is_set():
            snap = session.snapshot()
            if len(snap.values) != len(snap.short_term) * 10:
                torn.append(snap)

    reader = threading.Thread(target=_reader, daemon=True)
    reader.start()
    for k in range(1, 90):
        clock.now = k * 0.25
        session.append([1.0] * 10)
    stop.set()
    reader.join(timeout=5.0)

    assert torn == []


def test_record_resets_windows_and_max_history_from_previous_session() -> None:
    clock = FakeClock()
    session = _session(clock)
    session.record()
    for k in range(1, 11):
        clock.now = float(k)
        session.append([float(k)])
    clock.now = 10.05
    session.append([7.0])
    assert len(session.max_term) == 1
    assert session._short.pending == [7.0]
    assert session._medium.pending == [7.0]
    session.stop_and_export()

    clock.now = 20.0
    session.record()

    snap = session.snapshot()
    assert snap.short_term == () and snap.medium_term == () and snap.max_term == ()
    assert session._short.pending == []
    assert session._medium.pending == []

    for k in range(1, 10):
        clock.now = 20.0 + k
        session.append([1.0])

    assert len(session.medium_term) == 9
    assert len(session.max_term) == 0

    clock.now = 30.0
    session.append([2.0])
    assert session.max_term.snapshot() == [pytest.approx(2.0)]


def test_export_rendering_does_not_hold_the_session_lock(monkeypatch: pytest.MonkeyPatch) -> None:
    from emgrms.core import session as session_module

    clock = FakeClock()
    session = _session(clock)
    session.record()
    clock.now = 0.2
    session.append([1.0])
    clock.now = 0.3

    real_render = session_module.render_export
    producer_done: list[bool] = []

    def _render_while_producer_appends(recording, config):
        producer = threading.Thread(
            target=lambda: (session.append([5.0]), producer_done.append(True)),
            daemon=True,
        )
        producer.start()
        producer.join(timeout=5.0)
        return real_render(recording, config)

    monkeypatch.setattr(session_module, "render_export", _render_while_producer_appends)
    text = session.stop_and_export()

    assert producer_done == [True]
    assert session.values.snapshot() == [1.0, 5.0]
    assert len(text.splitlines()) == 3
