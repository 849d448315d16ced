"""Repository for job escrows."""

from typing import Optional, Dict, Any
from datetime import datetime
import uuid

from .base import BaseRepository


class EscrowRepository(BaseRepository):
    """One escrow per job, locked on creation and released once."""

    @property
    def table_name(self) -> str:
        return "escrows"

    async def create(self, job_id: str, amount_tokens: int) -> Dict[str, Any]:
        query = """
            INSERT INTO escrows (id, job_id, amount_tokens, status, created_at)
            VALUES ($1, $2, $3, 'LOCKED', NOW())
            RETURNING *
        """
        row = await self.connection.fetchrow(query, str(uuid.uuid4()), job_id, amount_tokens)
        return dict(row)

    async def find_by_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        row = await self.connection.fetchrow("SELECT * FROM escrows WHERE job_id = $1", job_id)
        return dict(row) if row else None

    async def release(self, job_id: str, released_at: datetime) -> bool:
        """Release a locked escrow. Returns False if it was not LOCKED."""
        query = """
            UPDATE escrows
            SET status = 'RELEASED',
                released_at = $2
            WHERE job_id = $1 AND status = 'LOCKED'
        """
        result = await self.connection.execute(query, job_id, released_at)
        return self._affected(result)
