"""Audit trail writer.

Entries are written through the caller's unit of work, so they commit or
roll back together with the mutation they describe.
"""

from typing import Any, Dict, List, Optional

from marketplace_server.domain import AuditAction, PlannedPayout, ScoreBreakdown


class AuditLogWriter:
    """Append-only sink for state-changing operations."""

    def __init__(self, uow):
        self.uow = uow

    async def record(
        self,
        job_id: str,
        action: AuditAction,
        metadata: Dict[str, Any],
        actor_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.uow.audit_logs.append(job_id, action.value, metadata, actor_id=actor_id)

    async def job_created(self, job: Dict[str, Any]) -> Dict[str, Any]:
        return await self.record(
            job["id"],
            AuditAction.JOB_CREATED,
            {"rewardTokens": job["reward_tokens"]},
            actor_id=job["requester_id"],
        )

    async def submission_created(self, submission: Dict[str, Any]) -> Dict[str, Any]:
        return await self.record(
            submission["job_id"],
            AuditAction.SUBMISSION_CREATED,
            {"submissionId": submission["id"], "latencyMs": submission["latency_ms"]},
            actor_id=submission["worker_id"],
        )

    async def submission_scored(
        self,
        submission: Dict[str, Any],
        breakdown: ScoreBreakdown,
        quality_source: str,
    ) -> Dict[str, Any]:
        metadata = {"submissionId": submission["id"], "qualitySource": quality_source}
        metadata.update(breakdown.to_dict())
        return await self.record(
            submission["job_id"],
            AuditAction.SUBMISSION_SCORED,
            metadata,
            actor_id=submission["worker_id"],
        )

    async def job_settled(
        self,
        job_id: str,
        winner_submission_id: str,
        payouts: List[PlannedPayout],
        released_amount: int,
    ) -> Dict[str, Any]:
        return await self.record(
            job_id,
            AuditAction.JOB_SETTLED,
            {
                "winnerSubmissionId": winner_submission_id,
                "releasedTokens": released_amount,
                "paidTokens": sum(p.amount_tokens for p in payouts),
                "payouts": [p.to_dict() for p in payouts],
            },
        )
