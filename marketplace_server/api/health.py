"""Health check endpoints."""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from marketplace_server.core.config import Config, get_config

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(config: Config = Depends(get_config)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": config.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
