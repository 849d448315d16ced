"""Domain entities representing core business objects."""

from dataclasses import dataclass
from typing import Any, Mapping
from enum import Enum


class JobStatus(str, Enum):
    """Job lifecycle status."""
    OPEN = "OPEN"
    COMPLETED = "COMPLETED"


class EscrowStatus(str, Enum):
    """Escrow lifecycle status."""
    LOCKED = "LOCKED"
    RELEASED = "RELEASED"


class SubmissionStatus(str, Enum):
    """Submission lifecycle status."""
    PENDING = "PENDING"
    SCORED = "SCORED"
    WINNER = "WINNER"


class PayoutStatus(str, Enum):
    """Payouts are only ever written by a committed settlement."""
    PAID = "PAID"


class AuditAction(str, Enum):
    """Audit log action tags."""
    JOB_CREATED = "JOB_CREATED"
    SUBMISSION_CREATED = "SUBMISSION_CREATED"
    SUBMISSION_SCORED = "SUBMISSION_SCORED"
    JOB_SETTLED = "JOB_SETTLED"


@dataclass(frozen=True)
class ScoredSubmission:
    """A scored submission as seen by the settlement ranking."""
    id: str
    worker_id: str
    final_score: float
    created_seq: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'ScoredSubmission':
        if row["final_score"] is None:
            raise ValueError(f"Submission {row['id']} has no final score")
        return cls(
            id=row["id"],
            worker_id=row["worker_id"],
            final_score=float(row["final_score"]),
            created_seq=int(row["created_seq"]),
        )


@dataclass(frozen=True)
class PlannedPayout:
    """Payout computed for one ranked submission before it is persisted."""
    rank: int
    submission_id: str
    user_id: str
    amount_tokens: int

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "submissionId": self.submission_id,
            "userId": self.user_id,
            "amountTokens": self.amount_tokens,
        }
