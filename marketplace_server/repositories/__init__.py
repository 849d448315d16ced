"""Repository layer for data access abstraction."""

from .base import BaseRepository
from .job_repository import JobRepository
from .escrow_repository import EscrowRepository
from .submission_repository import SubmissionRepository
from .payout_repository import PayoutRepository
from .user_repository import UserRepository
from .audit_repository import AuditLogRepository
from .unit_of_work import UnitOfWork, create_unit_of_work

__all__ = [
    "BaseRepository",
    "JobRepository",
    "EscrowRepository",
    "SubmissionRepository",
    "PayoutRepository",
    "UserRepository",
    "AuditLogRepository",
    "UnitOfWork",
    "create_unit_of_work"
]
