"""Base repository with common database operations."""

from typing import Optional, List, Dict, Any
from abc import ABC, abstractmethod
import asyncpg


class BaseRepository(ABC):
    """Base repository providing common database operations."""

    def __init__(self, connection: asyncpg.Connection):
        self.connection = connection

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Return the table name for this repository."""
        pass

    async def find_by_id(self, id: str) -> Optional[Dict[str, Any]]:
        """Find a single record by ID."""
        query = f"SELECT * FROM {self.table_name} WHERE id = $1"
        row = await self.connection.fetchrow(query, id)
        return dict(row) if row else None

    async def exists(self, id: str) -> bool:
        """Check if a record exists by ID."""
        query = f"SELECT EXISTS(SELECT 1 FROM {self.table_name} WHERE id = $1)"
        return await self.connection.fetchval(query, id)

    async def execute_query(self, query: str, *params) -> List[Dict[str, Any]]:
        """Execute a custom query and return results."""
        rows = await self.connection.fetch(query, *params)
        return [dict(row) for row in rows]

    @staticmethod
    def _affected(result: str) -> bool:
        """Whether an UPDATE/INSERT status string reports at least one row."""
        return result.split()[-1] != "0"
