"""FastAPI dependency injection helpers."""

from fastapi import Depends

from marketplace_server.core.config import Config, get_config
from marketplace_server.core.dependencies import get_dependencies
from marketplace_server.core.exceptions import ServiceUnavailable
from marketplace_server.database import DatabaseManager
from marketplace_server.services import JobService, SubmissionService, SettlementService


async def get_database() -> DatabaseManager:
    """Get database manager instance."""
    deps = get_dependencies()
    if not deps.db_manager.pool:
        raise ServiceUnavailable("Database not available")
    return deps.db_manager


async def get_job_service(
    db: DatabaseManager = Depends(get_database),
    config: Config = Depends(get_config)
) -> JobService:
    """Get job service instance."""
    return JobService(db, system_requester_handle=config.system_requester_handle)


async def get_submission_service(
    db: DatabaseManager = Depends(get_database)
) -> SubmissionService:
    """Get submission service instance."""
    return SubmissionService(db)


async def get_settlement_service(
    db: DatabaseManager = Depends(get_database),
    config: Config = Depends(get_config)
) -> SettlementService:
    """Get settlement service instance."""
    return SettlementService(db, allow_fault_injection=config.fault_injection_enabled)
