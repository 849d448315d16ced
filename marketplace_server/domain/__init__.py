"""Domain models representing business entities."""

from .entities import (
    JobStatus,
    EscrowStatus,
    SubmissionStatus,
    PayoutStatus,
    AuditAction,
    ScoredSubmission,
    PlannedPayout,
)
from .value_objects import PayoutSplit, ScoreBreakdown

__all__ = [
    "JobStatus",
    "EscrowStatus",
    "SubmissionStatus",
    "PayoutStatus",
    "AuditAction",
    "ScoredSubmission",
    "PlannedPayout",
    "PayoutSplit",
    "ScoreBreakdown",
]
