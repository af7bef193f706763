"""
User stores and primary-store health.

The primary store is the Supabase `users` table. The fallback store is an
in-memory mock with the same lookup contract, used only while the primary
store is flagged unavailable. Its data is non-authoritative.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from supabase import Client

from shared.models import ProviderStatus, RoleKind
from shared.repository import BaseRepository

from .models import StoreKind, UserRecord

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreHealth:
    """
    Process-wide reachability flag for the primary user store.

    Reads are synchronous and never do I/O; the flag is flipped by the
    startup probe and by failed lookups. While the flag is down, one caller
    per `retry_after_seconds` is let through to the primary store again, and
    a successful lookup brings the flag back up. An outage marked
    `permanent` (no primary configured) is never retried.
    """

    def __init__(
        self,
        primary_available: bool = True,
        retry_after_seconds: float = 30.0,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._lock = threading.Lock()
        self._available = primary_available
        self._retry_after = timedelta(seconds=retry_after_seconds)
        self._clock = clock
        self._retry_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._changed_at = clock()

    def is_primary_available(self) -> bool:
        return self._available

    @property
    def retry_at(self) -> Optional[datetime]:
        """When the next primary attempt is due during an outage, if ever."""
        return self._retry_at

    def should_try_primary(self) -> bool:
        """
        Whether the next lookup should go to the primary store.

        True while the store is up. During an outage, true for exactly one
        caller once the retry time has passed; that caller's lookup decides
        whether the flag comes back up.
        """
        with self._lock:
            if self._available:
                return True
            if self._retry_at is None:
                return False
            now = self._clock()
            if now < self._retry_at:
                return False
            self._retry_at = now + self._retry_after
            return True

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def changed_at(self) -> datetime:
        return self._changed_at

    def mark_available(self) -> None:
        with self._lock:
            if not self._available:
                logger.info("Primary user store is reachable again")
                self._changed_at = self._clock()
            self._available = True
            self._retry_at = None
            self._last_error = None

    def mark_unavailable(self, reason: str, permanent: bool = False) -> None:
        with self._lock:
            now = self._clock()
            if self._available:
                logger.warning(
                    f"Primary user store marked unavailable, using fallback store: {reason}"
                )
                self._changed_at = now
            self._available = False
            self._retry_at = None if permanent else now + self._retry_after
            self._last_error = reason


class SupabaseUserStore(BaseRepository[UserRecord]):
    """Primary user store backed by a Supabase table."""

    kind = StoreKind.PRIMARY

    def __init__(self, db: Client, table: str = "users") -> None:
        super().__init__(db)
        self._table = table

    async def lookup_by_id(self, user_id: str) -> Optional[UserRecord]:
        result = self._execute(
            lambda: self._db.table(self._table).select("*").eq("id", user_id).limit(1).execute()
        )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    async def lookup_by_email(self, email: str) -> Optional[UserRecord]:
        result = self._execute(
            lambda: self._db.table(self._table)
            .select("*")
            .eq("email", email.strip().lower())
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_record(result.data[0])

    async def set_provider_status(self, user_id: str, status: ProviderStatus) -> None:
        self._execute(
            lambda: self._db.table(self._table)
            .update({"provider_status": status.value})
            .eq("id", user_id)
            .execute()
        )

    async def ping(self) -> None:
        """Cheap reachability probe; raises ExternalServiceError on failure."""
        self._execute(lambda: self._db.table(self._table).select("id").limit(1).execute())

    def _map_to_record(self, row: dict[str, Any]) -> UserRecord:
        status = row.get("provider_status")
        return UserRecord(
            id=str(row["id"]),
            email=row.get("email", ""),
            display_name=row.get("display_name") or row.get("name") or "",
            role=RoleKind(row.get("role", RoleKind.CLIENT.value)),
            is_active=row.get("is_active", True),
            is_email_verified=row.get("is_email_verified", False),
            provider_status=ProviderStatus(status) if status else None,
        )


class InMemoryUserStore:
    """
    User store held in process memory.

    Serves as the fallback store during primary outages, and as a primary
    stand-in for tests and local development.
    """

    def __init__(
        self,
        records: Iterable[UserRecord] = (),
        kind: StoreKind = StoreKind.FALLBACK,
    ):
        self.kind = kind
        self._records: dict[str, UserRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: UserRecord) -> UserRecord:
        self._records[record.id] = record
        return record

    def remove(self, user_id: str) -> None:
        self._records.pop(user_id, None)

    async def lookup_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._records.get(user_id)

    async def lookup_by_email(self, email: str) -> Optional[UserRecord]:
        wanted = email.strip().lower()
        for record in self._records.values():
            if record.email.lower() == wanted:
                return record
        return None

    async def set_provider_status(self, user_id: str, status: ProviderStatus) -> None:
        record = self._records.get(user_id)
        if record is not None:
            self._records[user_id] = record.model_copy(update={"provider_status": status})

    def __len__(self) -> int:
        return len(self._records)


# Demo accounts served by the fallback store in development.
DEMO_USERS = [
    UserRecord(
        id="64a1b2c3d4e5f6789012abc1",
        email="john@example.com",
        display_name="John Doe",
        role=RoleKind.CLIENT,
        is_email_verified=True,
    ),
    UserRecord(
        id="64a1b2c3d4e5f6789012abc3",
        email="jane.fundi@example.com",
        display_name="Jane Fundi",
        role=RoleKind.PROVIDER,
        is_email_verified=True,
        provider_status=ProviderStatus.PENDING,
    ),
]
