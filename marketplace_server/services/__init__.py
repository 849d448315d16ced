"""Business logic services."""

from .audit import AuditLogWriter
from .job_service import JobService
from .submission_service import SubmissionService
from .settlement_service import SettlementService, SettlementOptions

__all__ = [
    "AuditLogWriter",
    "JobService",
    "SubmissionService",
    "SettlementService",
    "SettlementOptions"
]
