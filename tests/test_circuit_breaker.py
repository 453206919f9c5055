import pytest

from core.exceptions import FeedError
from integrations.circuit_breaker import CircuitBreaker


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def failing():
    raise FeedError("upstream down")


def test_opens_after_threshold_and_fails_fast():
    clock = FakeClock()
    breaker = CircuitBreaker(failure_threshold=2, recovery_time=30, clock=clock)
    calls = []

    for _ in range(2):
        with pytest.raises(FeedError):
            breaker.call(failing)
    assert breaker.state == "open"

    with pytest.raises(FeedError, match="circuit open"):
        breaker.call(lambda: calls.append(1))
    assert calls == []


def test_half_open_trial_closes_on_success():
    clock = FakeClock()
    breaker = CircuitBreaker(failure_threshold=1, recovery_time=30, clock=clock)

    with pytest.raises(FeedError):
        breaker.call(failing)
    clock.now += 31
    assert breaker.state == "half-open"

    assert breaker.call(lambda: "ok") == "ok"
    assert breaker.state == "closed"


def test_half_open_trial_failure_reopens():
    clock = FakeClock()
    breaker = CircuitBreaker(failure_threshold=1, recovery_time=30, clock=clock)

    with pytest.raises(FeedError):
        breaker.call(failing)
    clock.now += 31
    with pytest.raises(FeedError, match="upstream down"):
        breaker.call(failing)
    assert breaker.state == "open"


def test_other_exceptions_do_not_count():
    breaker = CircuitBreaker(failure_threshold=1)

    with pytest.raises(KeyError):
        breaker.call(lambda: {}["missing"])
    assert breaker.state == "closed"


def test_half_open_lets_one_trial_through():
    clock = FakeClock()
    breaker = CircuitBreaker(failure_threshold=1, recovery_time=30, clock=clock)
    with pytest.raises(FeedError):
        breaker.call(failing)
    clock.now += 31
    concurrent = []

    def trial():
        # A second caller arriving while the trial is still running.
        with pytest.raises(FeedError, match="circuit open"):
            breaker.call(lambda: concurrent.append(1))
        return "ok"

    assert breaker.call(trial) == "ok"
    assert concurrent == []
    assert breaker.state == "closed"


def test_trial_slot_released_after_unexpected_error():
    clock = FakeClock()
    breaker = CircuitBreaker(failure_threshold=1, recovery_time=30, clock=clock)
    with pytest.raises(FeedError):
        breaker.call(failing)
    clock.now += 31

    with pytest.raises(KeyError):
        breaker.call(lambda: {}["missing"])

    assert breaker.state == "half-open"
    assert breaker.call(lambda: "ok") == "ok"
