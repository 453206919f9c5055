import logging
import threading
import time

from core.exceptions import FeedError

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Stops calling the fixture feed after repeated ``FeedError``s.

    Once ``failure_threshold`` consecutive failures are seen the breaker opens
    and every call fails fast with ``FeedError`` until ``recovery_time``
    seconds have passed.  A single call is then let through as a trial;
    concurrent callers keep failing fast until that trial finishes.
    """

    def __init__(self, failure_threshold=5, recovery_time=60.0, clock=time.monotonic):
        self.failure_threshold = failure_threshold
        self.recovery_time = recovery_time
        self.failures = 0
        self.last_failure = None
        self._clock = clock
        self._lock = threading.Lock()
        self._trial_in_flight = False

    def _current_state(self) -> str:
        # Caller holds _lock.
        if self.failures < self.failure_threshold:
            return "closed"
        if self._clock() - self.last_failure < self.recovery_time:
            return "open"
        return "half-open"

    @property
    def state(self) -> str:
        with self._lock:
            return self._current_state()

    def call(self, func, *args, **kwargs):
        with self._lock:
            state = self._current_state()
            if state == "open" or (state == "half-open" and self._trial_in_flight):
                raise FeedError("fixture feed circuit open")
            is_trial = state == "half-open"
            if is_trial:
                self._trial_in_flight = True

        try:
            result = func(*args, **kwargs)
        except FeedError:
            with self._lock:
                self.failures += 1
                self.last_failure = self._clock()
                if self.failures == self.failure_threshold:
                    logger.warning(
                        "Fixture feed circuit opened after %d failures", self.failures
                    )
            raise
        finally:
            if is_trial:
                with self._lock:
                    self._trial_in_flight = False
        with self._lock:
            self.failures = 0
        return result
