"""Repository for requesters and workers."""

from typing import Optional, Dict, Any
import uuid

from .base import BaseRepository


class UserRepository(BaseRepository):
    """Users are keyed by a unique opaque handle."""

    @property
    def table_name(self) -> str:
        return "users"

    async def find_by_handle(self, handle: str) -> Optional[Dict[str, Any]]:
        row = await self.connection.fetchrow("SELECT * FROM users WHERE handle = $1", handle)
        return dict(row) if row else None

    async def get_or_create(self, handle: str) -> Dict[str, Any]:
        """Return the user with this handle, creating it on first reference.

        A concurrent first reference to the same handle loses the insert
        on the unique constraint and re-reads the winner's row.
        """
        query = """
            INSERT INTO users (id, handle, created_at)
            VALUES ($1, $2, NOW())
            ON CONFLICT (handle) DO NOTHING
            RETURNING *
        """
        row = await self.connection.fetchrow(query, str(uuid.uuid4()), handle)
        if row:
            return dict(row)

        user = await self.find_by_handle(handle)
        if user is None:
            raise LookupError(f"User {handle!r} vanished after conflicting insert")
        return user
