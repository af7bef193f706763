"""
Provider application repositories.

Encapsulates storage of the `provider_applications` table. Saves are
compare-and-set on `version` so two writers can never both apply a change
derived from the same snapshot.
"""

import asyncio
from typing import Any, Optional

from supabase import Client

from shared.models import ProviderStatus
from shared.repository import BaseRepository

from .models import ProviderApplication


class InMemoryApplicationRepository:
    """
    Application repository held in process memory.

    Used for tests, local development and when no database is configured.
    Stored applications are copied on the way in and out so callers can
    never alias stored state.
    """

    def __init__(self) -> None:
        self._applications: dict[str, ProviderApplication] = {}
        self._lock = asyncio.Lock()

    async def get(self, provider_id: str) -> Optional[ProviderApplication]:
        application = self._applications.get(provider_id)
        return application.model_copy(deep=True) if application else None

    async def create(self, application: ProviderApplication) -> ProviderApplication:
        async with self._lock:
            existing = self._applications.get(application.provider_id)
            if existing is not None:
                return existing.model_copy(deep=True)
            self._applications[application.provider_id] = application.model_copy(deep=True)
            return application

    async def save(self, application: ProviderApplication, expected_version: int) -> bool:
        async with self._lock:
            current = self._applications.get(application.provider_id)
            if current is None or current.version != expected_version:
                return False
            self._applications[application.provider_id] = application.model_copy(deep=True)
            return True

    async def list(
        self,
        status: Optional[ProviderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ProviderApplication]:
        matching = [
            app for app in self._applications.values()
            if status is None or app.status == status
        ]
        # Review queue order: oldest submission first, never-submitted last
        matching.sort(key=lambda app: (app.submitted_at is None, app.submitted_at or app.created_at))
        return [app.model_copy(deep=True) for app in matching[offset:offset + limit]]

    async def count(self, status: Optional[ProviderStatus] = None) -> int:
        return sum(
            1 for app in self._applications.values()
            if status is None or app.status == status
        )

    def __len__(self) -> int:
        return len(self._applications)


class SupabaseApplicationRepository(BaseRepository[ProviderApplication]):
    """
    Application repository backed by a Supabase table.

    Note: This repository does NOT perform authorization checks.
    The service layer and the state machine are responsible for that.
    """

    def __init__(self, db: Client, table: str = "provider_applications") -> None:
        super().__init__(db)
        self._table = table

    async def get(self, provider_id: str) -> Optional[ProviderApplication]:
        result = self._execute(
            lambda: self._db.table(self._table)
            .select("*")
            .eq("provider_id", provider_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_application(result.data[0])

    async def create(self, application: ProviderApplication) -> ProviderApplication:
        row = self._map_to_row(application)
        self._execute(
            lambda: self._db.table(self._table)
            .upsert(row, on_conflict="provider_id", ignore_duplicates=True)
            .execute()
        )
        stored = await self.get(application.provider_id)
        return stored or application

    async def save(self, application: ProviderApplication, expected_version: int) -> bool:
        row = self._map_to_row(application)
        result = self._execute(
            lambda: self._db.table(self._table)
            .update(row)
            .eq("provider_id", application.provider_id)
            .eq("version", expected_version)
            .execute()
        )
        return bool(result.data)

    async def list(
        self,
        status: Optional[ProviderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ProviderApplication]:
        def query():
            q = self._db.table(self._table).select("*")
            if status:
                q = q.eq("status", status.value)
            return (
                q.order("submitted_at", desc=False, nullsfirst=False)
                .range(offset, offset + limit - 1)
                .execute()
            )

        result = self._execute(query)
        return [self._map_to_application(row) for row in result.data]

    async def count(self, status: Optional[ProviderStatus] = None) -> int:
        def query():
            q = self._db.table(self._table).select("provider_id", count="exact")
            if status:
                q = q.eq("status", status.value)
            return q.execute()

        result = self._execute(query)
        return result.count or 0

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_row(self, application: ProviderApplication) -> dict[str, Any]:
        return application.model_dump(mode="json")

    def _map_to_application(self, row: dict[str, Any]) -> ProviderApplication:
        data = dict(row)
        data["provider_id"] = str(data["provider_id"])
        data["checklist"] = data.get("checklist") or {}
        return ProviderApplication.model_validate(data)
