"""
Rate limiting module exceptions.
"""

from shared.exceptions import RateLimitError


class RateLimitedError(RateLimitError):
    """
    Raised when a principal exceeds the allowed attempts for an action.

    This is normal traffic shaping, not a fault: callers should wait
    `retry_after_seconds` and try again.
    """

    def __init__(
        self,
        action_key: str,
        retry_after_seconds: int,
        limit: int,
        window_seconds: int,
    ):
        super().__init__(
            "Too many attempts. Please try again later.",
            code="RATE_LIMITED",
            details={
                "action": action_key,
                "retry_after_seconds": retry_after_seconds,
                "limit": limit,
                "window_seconds": window_seconds,
            },
        )
        self.retry_after_seconds = retry_after_seconds
