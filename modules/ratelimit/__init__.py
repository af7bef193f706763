"""
Rate limiting module.

Per-action sliding-window limits keyed by (principal, action).

Public API:
- IRateLimiter: Interface for limiter backends
- InMemoryRateLimiter: Single-process implementation
- RateWindow, RateLimitDecision: Models
- RateLimitedError: Raised when a window is full
"""

from .interfaces import IRateLimiter
from .models import RateWindow, RateLimitDecision
from .service import InMemoryRateLimiter
from .exceptions import RateLimitedError

__all__ = [
    "IRateLimiter",
    "RateWindow",
    "RateLimitDecision",
    "InMemoryRateLimiter",
    "RateLimitedError",
]
