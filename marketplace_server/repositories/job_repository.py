"""Repository for job-related database operations."""

from typing import Optional, Dict, Any
from datetime import datetime
import uuid

from .base import BaseRepository


class JobRepository(BaseRepository):
    """Repository for managing jobs in the database."""

    @property
    def table_name(self) -> str:
        return "jobs"

    async def create(
        self,
        title: str,
        prompt: str,
        reward_tokens: int,
        deadline_at: datetime,
        requester_id: str,
    ) -> Dict[str, Any]:
        """Create a new open job."""
        job_id = str(uuid.uuid4())
        query = """
            INSERT INTO jobs (id, title, prompt, reward_tokens, deadline_at, status, requester_id, created_at)
            VALUES ($1, $2, $3, $4, $5, 'OPEN', $6, NOW())
            RETURNING *
        """
        row = await self.connection.fetchrow(
            query, job_id, title, prompt, reward_tokens, deadline_at, requester_id
        )
        return dict(row)

    async def lock_with_escrow(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Load a job joined with its escrow, row-locking both.

        Concurrent settlements of the same job queue up here; the loser
        reads the winner's committed state once the lock is released.
        """
        query = """
            SELECT j.id, j.reward_tokens, j.status,
                   e.id AS escrow_id, e.status AS escrow_status, e.amount_tokens AS escrow_amount_tokens
            FROM jobs j
            JOIN escrows e ON e.job_id = j.id
            WHERE j.id = $1
            FOR UPDATE OF j, e
        """
        row = await self.connection.fetchrow(query, job_id)
        return dict(row) if row else None

    async def lock_status(self, job_id: str) -> Optional[str]:
        """Share-lock a job row and return its status.

        Holders block settlement's FOR UPDATE until they commit, and wait
        for an in-flight settlement to finish before reading.
        """
        query = "SELECT status FROM jobs WHERE id = $1 FOR SHARE"
        return await self.connection.fetchval(query, job_id)

    async def mark_completed(self, job_id: str) -> bool:
        """Mark an open job as completed."""
        query = """
            UPDATE jobs
            SET status = 'COMPLETED',
                completed_at = NOW()
            WHERE id = $1 AND status = 'OPEN'
        """
        result = await self.connection.execute(query, job_id)
        return self._affected(result)
