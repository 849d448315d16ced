"""Unit of Work pattern for managing database transactions."""

from typing import Optional
from contextlib import asynccontextmanager
import asyncpg

from .job_repository import JobRepository
from .escrow_repository import EscrowRepository
from .submission_repository import SubmissionRepository
from .payout_repository import PayoutRepository
from .user_repository import UserRepository
from .audit_repository import AuditLogRepository


class UnitOfWork:
    """Unit of Work pattern implementation for transaction management.

    All repositories share the one connection, so everything done through
    them commits or rolls back together.
    """

    def __init__(self, connection: asyncpg.Connection):
        self.connection = connection
        self._jobs: Optional[JobRepository] = None
        self._escrows: Optional[EscrowRepository] = None
        self._submissions: Optional[SubmissionRepository] = None
        self._payouts: Optional[PayoutRepository] = None
        self._users: Optional[UserRepository] = None
        self._audit_logs: Optional[AuditLogRepository] = None

    @property
    def jobs(self) -> JobRepository:
        """Get job repository instance."""
        if self._jobs is None:
            self._jobs = JobRepository(self.connection)
        return self._jobs

    @property
    def escrows(self) -> EscrowRepository:
        """Get escrow repository instance."""
        if self._escrows is None:
            self._escrows = EscrowRepository(self.connection)
        return self._escrows

    @property
    def submissions(self) -> SubmissionRepository:
        """Get submission repository instance."""
        if self._submissions is None:
            self._submissions = SubmissionRepository(self.connection)
        return self._submissions

    @property
    def payouts(self) -> PayoutRepository:
        """Get payout repository instance."""
        if self._payouts is None:
            self._payouts = PayoutRepository(self.connection)
        return self._payouts

    @property
    def users(self) -> UserRepository:
        """Get user repository instance."""
        if self._users is None:
            self._users = UserRepository(self.connection)
        return self._users

    @property
    def audit_logs(self) -> AuditLogRepository:
        """Get audit log repository instance."""
        if self._audit_logs is None:
            self._audit_logs = AuditLogRepository(self.connection)
        return self._audit_logs


@asynccontextmanager
async def create_unit_of_work(db_pool: asyncpg.Pool):
    """Create a unit of work with transaction support.

    Leaving the block with an exception rolls the transaction back.
    """
    async with db_pool.acquire() as connection:
        async with connection.transaction():
            yield UnitOfWork(connection)
