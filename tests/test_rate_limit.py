"""
Token bucket behaviour, driven by a fake clock.
"""

import threading

import pytest

from recipe_service.rate_limit import TokenBucketLimiter


def test_burst_then_reject(fake_clock):
    limiter = TokenBucketLimiter(refill_rate=1, burst=3, clock=fake_clock)

    results = [limiter.try_acquire() for _ in range(4)]

    assert results == [True, True, True, False]


def test_one_token_per_refill_interval(fake_clock):
    limiter = TokenBucketLimiter(refill_rate=1, burst=3, clock=fake_clock)
    for _ in range(3):
        assert limiter.try_acquire()
    assert not limiter.try_acquire()

    fake_clock.advance(1.0)

    assert limiter.try_acquire()
    assert not limiter.try_acquire()


def test_partial_interval_does_not_refill(fake_clock):
    limiter = TokenBucketLimiter(refill_rate=1, burst=1, clock=fake_clock)
    assert limiter.try_acquire()

    fake_clock.advance(0.5)
    assert not limiter.try_acquire()

    fake_clock.advance(0.5)
    assert limiter.try_acquire()


def test_refill_is_capped_at_burst(fake_clock):
    limiter = TokenBucketLimiter(refill_rate=1, burst=3, clock=fake_clock)
    for _ in range(3):
        limiter.try_acquire()

    fake_clock.advance(3600)

    assert limiter.available_tokens == 3
    assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]


def test_clock_going_backwards_adds_nothing(fake_clock):
    limiter = TokenBucketLimiter(refill_rate=1, burst=1, clock=fake_clock)
    assert limiter.try_acquire()

    fake_clock.advance(-10)

    assert not limiter.try_acquire()


def test_zero_burst_always_rejects(fake_clock):
    limiter = TokenBucketLimiter(refill_rate=5, burst=0, clock=fake_clock)
    fake_clock.advance(10)
    assert not limiter.try_acquire()


@pytest.mark.parametrize("refill_rate, burst", [(-1, 3), (1, -1)])
def test_invalid_parameters(refill_rate, burst):
    with pytest.raises(ValueError):
        TokenBucketLimiter(refill_rate=refill_rate, burst=burst)


def test_concurrent_callers_never_overspend():
    limiter = TokenBucketLimiter(refill_rate=0, burst=50)
    granted = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            if limiter.try_acquire():
                with lock:
                    granted.append(1)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(granted) == 50
