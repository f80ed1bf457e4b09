"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

from typing import Any, TypeVar, Generic
import logging

from supabase import Client

from .exceptions import StoreUnavailableError


T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - Failure translation to StoreUnavailableError via _execute()

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class StudentRepository(BaseRepository[Student]):
            def get_student(self, student_id: str) -> Optional[Student]:
                result = self._execute(
                    "get_student",
                    self._db.table("students").select("*").eq("id", student_id),
                )
                if not result.data:
                    return None
                return self._map_to_student(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, operation: str, query: Any) -> Any:
        """
        Execute a prepared query builder.

        Any client or transport failure is re-raised as StoreUnavailableError
        so callers can tell "store down" apart from "record missing".
        """
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Store query failed during {operation}: {e}")
            raise StoreUnavailableError(operation, reason=str(e)) from e
