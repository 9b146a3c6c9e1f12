# core/rate_limiter.py

"""
Sliding-window throttle for the credential endpoints.

State lives in this process only; every worker keeps its own window.
"""

import time
from collections import defaultdict, deque
from threading import Lock
from typing import Deque, Dict, Optional, Tuple

from fastapi import HTTPException, Request


class SlidingWindow:
    def __init__(self):
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def hit(self, key: str, max_requests: int, window_seconds: int) -> Tuple[bool, int]:
        """
        Record one attempt for `key`.

        Returns (allowed, remaining). A refused attempt is not recorded.
        """
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()

            if len(hits) >= max_requests:
                return False, 0

            hits.append(now)
            return True, max_requests - len(hits)

    def reset(self):
        with self._lock:
            self._hits.clear()


_window = SlidingWindow()


def check_rate_limit(identifier: str, max_requests: int = 10, window_seconds: int = 60) -> Tuple[bool, int]:
    return _window.hit(identifier, max_requests, window_seconds)


def reset_rate_limits():
    _window.reset()


def get_rate_limit_identifier(request: Request, user_id: Optional[str] = None) -> str:
    """Throttle by account when one is named, otherwise by client address."""
    if user_id:
        return f"user:{user_id.lower()}"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return f"ip:{forwarded_for.split(',')[0].strip()}"

    return f"ip:{request.client.host if request.client else 'unknown'}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many attempts. Please try again later.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "Retry-After": str(window_seconds),
            },
        )
    return remaining
