"""Repository for settlement payouts."""

from typing import List, Dict, Any
import uuid

from .base import BaseRepository


class PayoutRepository(BaseRepository):
    """Payouts are only written from inside a settlement transaction."""

    @property
    def table_name(self) -> str:
        return "payouts"

    async def create(self, job_id: str, user_id: str, amount_tokens: int, rank: int) -> Dict[str, Any]:
        query = """
            INSERT INTO payouts (id, job_id, user_id, amount_tokens, rank, status, created_at)
            VALUES ($1, $2, $3, $4, $5, 'PAID', NOW())
            RETURNING *
        """
        row = await self.connection.fetchrow(
            query, str(uuid.uuid4()), job_id, user_id, amount_tokens, rank
        )
        return dict(row)

    async def list_for_job(self, job_id: str) -> List[Dict[str, Any]]:
        query = "SELECT * FROM payouts WHERE job_id = $1 ORDER BY rank ASC"
        return await self.execute_query(query, job_id)
