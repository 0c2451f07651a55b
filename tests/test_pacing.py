import pytest

from core.pacing import FixedIntervalPacer, NoPacing, TokenBucketPacer


class FakeTime:
    """Clock that only moves when slept on or advanced."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def clock(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(round(seconds, 6))
        self.now += seconds


def test_fixed_interval_first_tick_never_waits():
    t = FakeTime()
    pacer = FixedIntervalPacer(0.5, sleep=t.sleep, clock=t.clock)

    pacer.wait()

    assert t.sleeps == []


def test_fixed_interval_spaces_ticks():
    t = FakeTime()
    pacer = FixedIntervalPacer(0.5, sleep=t.sleep, clock=t.clock)

    list(pacer.paced(["a", "b", "c"]))

    assert t.sleeps == [0.5, 0.5]


def test_fixed_interval_counts_work_time():
    t = FakeTime()
    pacer = FixedIntervalPacer(0.5, sleep=t.sleep, clock=t.clock)

    pacer.wait()
    t.now += 0.2  # work between calls
    pacer.wait()
    t.now += 1.0
    pacer.wait()

    assert t.sleeps == [0.3]


def test_fixed_interval_rejects_negative_interval():
    with pytest.raises(ValueError):
        FixedIntervalPacer(-1)


def test_token_bucket_allows_burst_then_waits():
    t = FakeTime()
    pacer = TokenBucketPacer(rate=2, capacity=3, sleep=t.sleep, clock=t.clock)

    for _ in range(4):
        pacer.wait()

    assert t.sleeps == [0.5]


def test_no_pacing_yields_everything():
    assert list(NoPacing().paced([1, 2, 3])) == [1, 2, 3]
