"""Worker submissions and their scoring."""

from typing import Dict, Any
import asyncpg
import structlog

from marketplace_server.database import DatabaseManager
from marketplace_server.domain import JobStatus, SubmissionStatus
from marketplace_server.domain.lifecycle import ensure_submission_transition
from marketplace_server.domain.scoring import score_submission, SCORE_FORMULA
from marketplace_server.models.schemas import SubmissionCreate, SubmissionScore
from marketplace_server.core.exceptions import (
    JobNotFound,
    JobClosed,
    SubmissionNotFound,
    InvalidTransition,
    DatabaseError,
)
from .audit import AuditLogWriter


logger = structlog.get_logger(__name__)


class SubmissionService:
    """Service for submission intake and scoring."""

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    async def create_submission(self, job_id: str, submission_data: SubmissionCreate) -> Dict[str, Any]:
        """Record a worker's submission for an open job."""
        try:
            async with self.db.unit_of_work() as uow:
                job = await uow.jobs.find_by_id(job_id)
                if not job:
                    raise JobNotFound(job_id)
                if job["status"] == JobStatus.COMPLETED.value:
                    raise JobClosed(job_id)

                worker = await uow.users.get_or_create(submission_data.workerId)
                submission = await uow.submissions.create(
                    job_id=job_id,
                    worker_id=worker["id"],
                    content=submission_data.content,
                    latency_ms=submission_data.latencyMs,
                )
                await AuditLogWriter(uow).submission_created(submission)

        except asyncpg.PostgresError as e:
            logger.error("Failed to create submission", job_id=job_id, error=str(e))
            raise DatabaseError(operation="create_submission") from e

        logger.info("Created submission", job_id=job_id, submission_id=submission["id"])
        return submission

    async def score_submission(self, job_id: str, score_data: SubmissionScore) -> Dict[str, Any]:
        """Score a submission of this job, overwriting any earlier score."""
        submission_id = score_data.submissionId

        try:
            async with self.db.unit_of_work() as uow:
                job_status = await uow.jobs.lock_status(job_id)
                if job_status is None:
                    raise SubmissionNotFound(submission_id, job_id)
                if job_status == JobStatus.COMPLETED.value:
                    raise JobClosed(job_id)

                submission = await uow.submissions.find_for_job(submission_id, job_id)
                if not submission:
                    raise SubmissionNotFound(submission_id, job_id)

                ensure_submission_transition(submission["status"], SubmissionStatus.SCORED)

                breakdown = score_submission(
                    submission["latency_ms"], submission["content"], quality=score_data.quality
                )
                quality_source = "rated" if score_data.quality is not None else "estimated"

                updated = await uow.submissions.record_score(
                    submission_id, breakdown.quality, breakdown.speed, breakdown.score
                )
                if not updated:
                    raise InvalidTransition("submission", submission["status"], SubmissionStatus.SCORED.value)
                await AuditLogWriter(uow).submission_scored(updated, breakdown, quality_source)

        except asyncpg.PostgresError as e:
            logger.error("Failed to score submission", job_id=job_id, submission_id=submission_id, error=str(e))
            raise DatabaseError(operation="score_submission") from e

        logger.info(
            "Scored submission",
            job_id=job_id,
            submission_id=submission_id,
            score=breakdown.score,
            quality_source=quality_source,
        )
        return {
            "submission": updated,
            "quality": breakdown.quality,
            "speed": breakdown.speed,
            "score": breakdown.score,
            "formula": SCORE_FORMULA,
        }
