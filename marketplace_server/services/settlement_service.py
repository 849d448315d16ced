"""Job settlement.

Settlement releases a job's escrow and pays the top-ranked submissions in a
single transaction. Either every write below commits, or none of them do:

    escrow RELEASED -> payouts PAID -> rank 1 WINNER -> job COMPLETED -> audit

Concurrent attempts on the same job serialize on the job/escrow row lock;
whoever comes second finds the job settled and fails with AlreadySettled.
Nothing here retries. A committed settlement can be retried by the caller
safely because the retry fails the same way.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Any
import structlog

from marketplace_server.database import DatabaseManager
from marketplace_server.domain import JobStatus, EscrowStatus, ScoredSubmission
from marketplace_server.domain.lifecycle import (
    ensure_escrow_transition,
    ensure_job_transition,
)
from marketplace_server.domain.settlement import rank_submissions, plan_payouts
from marketplace_server.core.exceptions import (
    ServiceError,
    ValidationError,
    JobOrEscrowNotFound,
    AlreadySettled,
    NoScoredSubmissions,
    TransactionAborted,
    SimulatedFailure,
)
from .audit import AuditLogWriter


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SettlementOptions:
    # Raise right after the escrow release, before any payout is written.
    simulate_failure_after_escrow_release: bool = False


class SettlementService:
    """Coordinates the settlement transaction for a job."""

    def __init__(self, db_manager: DatabaseManager, allow_fault_injection: bool = False):
        self.db = db_manager
        self.allow_fault_injection = allow_fault_injection

    async def settle(self, job_id: str, options: SettlementOptions = SettlementOptions()) -> Dict[str, Any]:
        """Release escrow and distribute the reward to the top submissions."""
        if options.simulate_failure_after_escrow_release and not self.allow_fault_injection:
            raise ValidationError(
                "Fault injection is disabled in this environment",
                field="simulateFailureAfterEscrowRelease",
            )

        try:
            async with self.db.unit_of_work() as uow:
                result = await self._settle_in_transaction(uow, job_id, options)

        except SimulatedFailure:
            logger.warning("Settlement aborted by injected failure, rolled back", job_id=job_id)
            raise
        except ServiceError as e:
            logger.info("Settlement rejected", job_id=job_id, error=e.code)
            raise
        except Exception as e:
            logger.error("Settlement transaction aborted, rolled back", job_id=job_id, error=str(e))
            raise TransactionAborted(f"Settlement of job {job_id} was aborted and rolled back") from e

        logger.info(
            "Settled job",
            job_id=job_id,
            payouts_count=result["payouts_count"],
            winner_submission_id=result["winner_submission_id"],
        )
        return result

    async def _settle_in_transaction(self, uow, job_id: str, options: SettlementOptions) -> Dict[str, Any]:
        job = await uow.jobs.lock_with_escrow(job_id)
        if not job:
            raise JobOrEscrowNotFound(job_id)

        if job["status"] == JobStatus.COMPLETED.value or job["escrow_status"] == EscrowStatus.RELEASED.value:
            raise AlreadySettled(job_id)

        scored = [ScoredSubmission.from_row(row) for row in await uow.submissions.list_scored(job_id)]
        ranked = rank_submissions(scored)
        if not ranked:
            raise NoScoredSubmissions(job_id)

        ensure_job_transition(job["status"], JobStatus.COMPLETED)
        ensure_escrow_transition(job["escrow_status"], EscrowStatus.RELEASED)

        payouts = plan_payouts(job["reward_tokens"], ranked)
        winner = ranked[0]

        if not await uow.escrows.release(job_id, datetime.now(timezone.utc)):
            raise AlreadySettled(job_id)

        if options.simulate_failure_after_escrow_release:
            raise SimulatedFailure(job_id)

        for payout in payouts:
            await uow.payouts.create(job_id, payout.user_id, payout.amount_tokens, payout.rank)

        if not await uow.submissions.mark_winner(winner.id):
            raise TransactionAborted(f"Submission {winner.id} could not be promoted to winner")

        if not await uow.jobs.mark_completed(job_id):
            raise AlreadySettled(job_id)

        await AuditLogWriter(uow).job_settled(
            job_id,
            winner_submission_id=winner.id,
            payouts=payouts,
            released_amount=job["escrow_amount_tokens"],
        )

        return {
            "job_id": job_id,
            "payouts_count": len(payouts),
            "winner_submission_id": winner.id,
        }
