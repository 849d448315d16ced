"""Repository for worker submissions."""

from typing import Optional, List, Dict, Any
import uuid

from .base import BaseRepository


class SubmissionRepository(BaseRepository):
    """Repository for managing submissions in the database."""

    @property
    def table_name(self) -> str:
        return "submissions"

    async def create(self, job_id: str, worker_id: str, content: str, latency_ms: int) -> Dict[str, Any]:
        """Create a pending submission."""
        query = """
            INSERT INTO submissions (id, job_id, worker_id, content, latency_ms, status, created_at)
            VALUES ($1, $2, $3, $4, $5, 'PENDING', NOW())
            RETURNING *
        """
        row = await self.connection.fetchrow(
            query, str(uuid.uuid4()), job_id, worker_id, content, latency_ms
        )
        return dict(row)

    async def find_for_job(self, submission_id: str, job_id: str) -> Optional[Dict[str, Any]]:
        """Find and row-lock a submission only if it belongs to the given job."""
        query = "SELECT * FROM submissions WHERE id = $1 AND job_id = $2 FOR UPDATE"
        row = await self.connection.fetchrow(query, submission_id, job_id)
        return dict(row) if row else None

    async def list_for_job(self, job_id: str) -> List[Dict[str, Any]]:
        query = "SELECT * FROM submissions WHERE job_id = $1 ORDER BY created_seq ASC"
        return await self.execute_query(query, job_id)

    async def list_scored(self, job_id: str) -> List[Dict[str, Any]]:
        """Scored submissions of a job in creation order."""
        query = """
            SELECT * FROM submissions
            WHERE job_id = $1 AND status = 'SCORED'
            ORDER BY created_seq ASC
        """
        return await self.execute_query(query, job_id)

    async def record_score(
        self,
        submission_id: str,
        quality: float,
        speed: float,
        final: float,
    ) -> Optional[Dict[str, Any]]:
        """Overwrite the score of a pending or scored submission.

        Returns None when the submission has already moved past SCORED.
        """
        query = """
            UPDATE submissions
            SET quality_score = $2,
                speed_score = $3,
                final_score = $4,
                status = 'SCORED',
                scored_at = NOW()
            WHERE id = $1 AND status IN ('PENDING', 'SCORED')
            RETURNING *
        """
        row = await self.connection.fetchrow(query, submission_id, quality, speed, final)
        return dict(row) if row else None

    async def mark_winner(self, submission_id: str) -> bool:
        query = """
            UPDATE submissions
            SET status = 'WINNER'
            WHERE id = $1 AND status = 'SCORED'
        """
        result = await self.connection.execute(query, submission_id)
        return self._affected(result)
