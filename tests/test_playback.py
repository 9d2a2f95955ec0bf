from subtitle_studio.playback import PlaybackClock


class StubProvider:
    def __init__(self, t: float) -> None:
        self.t = t

    def current_time(self) -> float:
        return self.t


def test_clock_starts_at_zero() -> None:
    clock = PlaybackClock()

    assert clock.duration == 0.0
    assert clock.current_time == 0.0


def test_pushed_signals_pass_through_unvalidated() -> None:
    clock = PlaybackClock()
    clock.on_duration_resolved(10.0)
    clock.on_time_update(42.5)

    assert clock.duration == 10.0
    assert clock.current_time == 42.5


def test_poll_reads_injected_provider() -> None:
    provider = StubProvider(3.5)
    clock = PlaybackClock(provider)

    assert clock.poll() == 3.5
    provider.t = 4.0
    clock.poll()
    assert clock.current_time == 4.0


def test_poll_without_provider_keeps_last_pushed_time() -> None:
    clock = PlaybackClock()
    clock.on_time_update(2.0)

    assert clock.poll() == 2.0


def test_seed_range_uses_offset() -> None:
    clock = PlaybackClock(offset=2.5)
    clock.on_time_update(4.0)

    assert clock.seed_range() == (4.0, 6.5)


def test_default_offset_is_one_second() -> None:
    clock = PlaybackClock()
    clock.on_time_update(1.0)

    assert clock.seed_range() == (1.0, 2.0)


def test_reset_clears_duration_and_time() -> None:
    clock = PlaybackClock()
    clock.on_duration_resolved(9.0)
    clock.on_time_update(5.0)

    clock.reset()

    assert (clock.duration, clock.current_time) == (0.0, 0.0)
