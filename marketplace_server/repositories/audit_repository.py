"""Append-only audit log storage."""

from typing import Optional, List, Dict, Any
import uuid

from .base import BaseRepository


class AuditLogRepository(BaseRepository):
    """Audit entries are inserted, never updated or deleted."""

    @property
    def table_name(self) -> str:
        return "audit_logs"

    async def append(
        self,
        job_id: str,
        action: str,
        metadata: Dict[str, Any],
        actor_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        query = """
            INSERT INTO audit_logs (id, job_id, actor_id, action, metadata, created_at)
            VALUES ($1, $2, $3, $4, $5, NOW())
            RETURNING *
        """
        row = await self.connection.fetchrow(
            query, str(uuid.uuid4()), job_id, actor_id, action, metadata
        )
        return dict(row)

    async def list_for_job(self, job_id: str) -> List[Dict[str, Any]]:
        query = "SELECT * FROM audit_logs WHERE job_id = $1 ORDER BY seq ASC"
        return await self.execute_query(query, job_id)
