import functools
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, NamedTuple
from fastapi import HTTPException, Request
from vidrelay.config.settings import RateLimitConfig
from vidrelay.utils.locale import request_locale
from vidrelay.i18n import i18n

@dataclass
class RateLimitEntry:
    count: int
    reset_at: float

class RateLimitDecision(NamedTuple):
    allowed: bool
    retry_after: int

class InMemoryRateLimiter:
    """
    Per-address fixed window counter.
    An entry resets the first time it is observed past its expiry.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 15 * 60,
        sweep_threshold: int = 10000,
        enabled: bool = True,
        clock: Callable[[], float] = time.time
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_threshold = sweep_threshold
        self.enabled = enabled
        self.clock = clock
        self.entries: Dict[str, RateLimitEntry] = {}
        # Earliest reset_at as of the last sweep
        self._next_sweep_at = 0.0
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: RateLimitConfig, clock: Callable[[], float] = time.time) -> "InMemoryRateLimiter":
        return cls(
            max_requests=cfg.max_requests,
            window_seconds=cfg.window_seconds,
            sweep_threshold=cfg.sweep_threshold,
            enabled=cfg.enabled,
            clock=clock
        )

    def hit(self, key: str) -> RateLimitDecision:
        """Count one gated request for key"""
        if not self.enabled:
            return RateLimitDecision(True, 0)

        with self._lock:
            now = self.clock()
            entry = self.entries.get(key)

            if entry is None or now > entry.reset_at:
                if (
                    entry is None
                    and len(self.entries) >= self.sweep_threshold
                    and now > self._next_sweep_at
                ):
                    self._sweep(now)
                self.entries[key] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(True, 0)

            if entry.count < self.max_requests:
                entry.count += 1
                return RateLimitDecision(True, 0)

            return RateLimitDecision(False, max(1, math.ceil(entry.reset_at - now)))

    def sweep(self) -> int:
        """Drop expired entries, returning how many were removed"""
        with self._lock:
            return self._sweep(self.clock())

    def _sweep(self, now: float) -> int:
        expired = [k for k, e in self.entries.items() if now > e.reset_at]
        for k in expired:
            del self.entries[k]
        self._next_sweep_at = min(
            (e.reset_at for e in self.entries.values()),
            default=now + self.window_seconds
        )
        return len(expired)

def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"

async def enforce_rate_limit(request: Request):
    """Dependency gating a route on the app's rate limiter"""
    limiter: InMemoryRateLimiter = request.app.state.runtime.rate_limiter
    decision = limiter.hit(client_address(request))

    if not decision.allowed:
        locale = request_locale(request)
        _ = functools.partial(i18n.get, locale=locale)
        raise HTTPException(
            status_code=429,
            detail=_("error.rate_limit"),
            headers={"Retry-After": str(decision.retry_after)}
        )

    return True
