import time
from dataclasses import dataclass
from typing import Callable, Dict, List

__all__ = ['RateLimitConfig', 'RateLimiter', 'LOGIN', 'REGISTER', 'ADD_EXPENSE']


@dataclass(frozen=True)
class RateLimitConfig:
    max_attempts: int
    window_seconds: float


LOGIN = RateLimitConfig(max_attempts=5, window_seconds=15 * 60)
REGISTER = RateLimitConfig(max_attempts=3, window_seconds=60 * 60)
ADD_EXPENSE = RateLimitConfig(max_attempts=30, window_seconds=60)


class RateLimiter:
    """Sliding-window attempt counter.

    Construct one per process (or per test) and pass it to whoever needs it;
    the clock is injectable so windows can be exercised without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._attempts: Dict[str, List[float]] = {}

    def _recent(self, key: str, config: RateLimitConfig, now: float) -> List[float]:
        window_start = now - config.window_seconds
        return [ts for ts in self._attempts.get(key, []) if ts > window_start]

    def check(self, key: str, config: RateLimitConfig) -> bool:
        """Record an attempt for ``key``; False once the window is full."""
        now = self._clock()
        attempts = self._recent(key, config, now)

        if len(attempts) >= config.max_attempts:
            self._attempts[key] = attempts
            return False

        attempts.append(now)
        self._attempts[key] = attempts
        return True

    def remaining_attempts(self, key: str, config: RateLimitConfig) -> int:
        attempts = self._recent(key, config, self._clock())
        return max(0, config.max_attempts - len(attempts))

    def reset(self, key: str) -> None:
        self._attempts.pop(key, None)

    def reset_all(self) -> None:
        self._attempts.clear()
