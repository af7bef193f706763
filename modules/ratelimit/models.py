"""
Rate limiting module data models.
"""

import math
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pydantic import BaseModel, Field


@dataclass
class RateWindow:
    """
    Recent attempts for one (principal, action) pair.

    Timestamps are kept in arrival order. Anything at or before
    `now - window` has aged out and is dropped on the next access.
    """

    window: timedelta
    timestamps: deque[datetime] = field(default_factory=deque)

    def prune(self, now: datetime) -> None:
        cutoff = now - self.window
        while self.timestamps and self.timestamps[0] <= cutoff:
            self.timestamps.popleft()

    def retry_after_seconds(self, now: datetime) -> int:
        """Seconds until the oldest attempt ages out (at least 1)."""
        if not self.timestamps:
            return 0
        remaining = (self.timestamps[0] + self.window - now).total_seconds()
        return max(1, math.ceil(remaining))

    def __len__(self) -> int:
        return len(self.timestamps)


class RateLimitDecision(BaseModel):
    """Outcome of an allowed check."""

    allowed: bool = Field(default=True, description="Whether the attempt was admitted")
    remaining: int = Field(..., ge=0, description="Attempts left in the current window")
    limit: int = Field(..., ge=1, description="Maximum attempts per window")
    window_seconds: int = Field(..., ge=0, description="Window length")
