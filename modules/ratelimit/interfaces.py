"""
Rate limiting module interface.

Request handling depends on IRateLimiter, so the in-memory limiter can be
replaced by a shared-counter backend when running more than one process.
"""

from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from .models import RateLimitDecision


@runtime_checkable
class IRateLimiter(Protocol):
    """Sliding-window attempt counter keyed by (principal, action)."""

    def check(
        self,
        principal_id: str,
        action_key: str,
        now: datetime,
        max_attempts: int,
        window: timedelta,
    ) -> RateLimitDecision:
        """
        Record an attempt if the window still has room.

        Args:
            principal_id: Who is acting
            action_key: What they are doing (route or logical action name)
            now: Time of the attempt
            max_attempts: Attempts allowed inside the window
            window: Length of the trailing window

        Returns:
            RateLimitDecision for the admitted attempt

        Raises:
            RateLimitedError: If max_attempts were already made inside the window
        """
        ...

    def sweep(self, now: datetime) -> int:
        """
        Drop every window whose attempts have all aged out.

        Returns:
            Number of windows removed
        """
        ...
