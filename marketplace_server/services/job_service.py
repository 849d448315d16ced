"""Job creation and lookup."""

from typing import List, Dict, Any
import asyncpg
import structlog

from marketplace_server.database import DatabaseManager
from marketplace_server.models.schemas import JobCreate
from marketplace_server.core.exceptions import JobNotFound, DatabaseError
from .audit import AuditLogWriter


logger = structlog.get_logger(__name__)


class JobService:
    """Service for job management operations."""

    def __init__(self, db_manager: DatabaseManager, system_requester_handle: str = "system-requester"):
        self.db = db_manager
        self.system_requester_handle = system_requester_handle

    async def create_job(self, job_data: JobCreate) -> Dict[str, Any]:
        """Create a job together with its locked escrow."""
        requester_handle = job_data.requesterHandle or self.system_requester_handle

        try:
            async with self.db.unit_of_work() as uow:
                requester = await uow.users.get_or_create(requester_handle)
                job = await uow.jobs.create(
                    title=job_data.title,
                    prompt=job_data.prompt,
                    reward_tokens=job_data.rewardTokens,
                    deadline_at=job_data.deadlineAt,
                    requester_id=requester["id"],
                )
                job["escrow"] = await uow.escrows.create(job["id"], job_data.rewardTokens)
                await AuditLogWriter(uow).job_created(job)

        except asyncpg.PostgresError as e:
            logger.error("Failed to create job", error=str(e))
            raise DatabaseError(operation="create_job") from e

        logger.info("Created job", job_id=job["id"], reward_tokens=job["reward_tokens"])
        return job

    async def get_job(self, job_id: str) -> Dict[str, Any]:
        """Get a job with its escrow, submissions and payouts."""
        try:
            async with self.db.unit_of_work() as uow:
                job = await uow.jobs.find_by_id(job_id)
                if not job:
                    raise JobNotFound(job_id)

                job["escrow"] = await uow.escrows.find_by_job(job_id)
                job["submissions"] = await uow.submissions.list_for_job(job_id)
                job["payouts"] = await uow.payouts.list_for_job(job_id)
                return job

        except asyncpg.PostgresError as e:
            logger.error("Failed to get job", job_id=job_id, error=str(e))
            raise DatabaseError(operation="get_job") from e

    async def get_audit_trail(self, job_id: str) -> List[Dict[str, Any]]:
        """Audit entries for a job, oldest first."""
        try:
            async with self.db.unit_of_work() as uow:
                if not await uow.jobs.exists(job_id):
                    raise JobNotFound(job_id)
                return await uow.audit_logs.list_for_job(job_id)

        except asyncpg.PostgresError as e:
            logger.error("Failed to get audit trail", job_id=job_id, error=str(e))
            raise DatabaseError(operation="get_audit_trail") from e
