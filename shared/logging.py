"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``. Security-relevant events
(denials, provider decisions) go to the dedicated ``solutil.audit`` logger so
operators can route them separately.
"""

import logging
import sys

AUDIT_LOGGER_NAME = "solutil.audit"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a stdout handler on the root logger once."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper())


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)


def audit(event: str, principal_id: str | None, **fields) -> None:
    """
    Record an audit event.

    Args:
        event: Short action name, e.g. "access_denied" or "provider_approved"
        principal_id: Caller the event is attributed to (None if unauthenticated)
        **fields: Extra key/value context (error kind, target id, ...)
    """
    extras = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
    get_audit_logger().info(
        f"{event} principal={principal_id or '-'} {extras}".rstrip()
    )
