"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and the translation of client failures into
ExternalServiceError.
"""

from typing import Any, Callable, TypeVar, Generic
from supabase import Client

from .exceptions import ExternalServiceError


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - _execute() which wraps a query so outages surface as ExternalServiceError

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class SupabaseUserStore(BaseRepository[UserRecord]):
            async def lookup_by_id(self, user_id: str) -> Optional[UserRecord]:
                result = self._execute(
                    lambda: self._db.table("users").select("*").eq("id", user_id).execute()
                )
                if not result.data:
                    return None
                return self._map_to_record(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, query: Callable[[], Any]) -> Any:
        """Run a Supabase query, re-raising client failures as ExternalServiceError."""
        try:
            return query()
        except ExternalServiceError:
            raise
        except Exception as e:
            raise ExternalServiceError(
                f"Supabase request failed: {e}",
                service="supabase",
                code="STORE_UNAVAILABLE",
            ) from e
