"""Dependency injection container."""

from typing import Optional
import structlog

from .config import Config
from marketplace_server.database import DatabaseManager


class Dependencies:
    """Dependency injection container for application services."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = structlog.get_logger(__name__)
        self.db_manager = DatabaseManager(
            config.database_url,
            min_size=config.db_pool_min_size,
            max_size=config.db_pool_max_size,
            command_timeout=config.db_command_timeout,
        )

    async def initialize(self):
        """Initialize all async dependencies."""
        await self.db_manager.initialize()
        self.logger.info("Dependencies initialized successfully")

    async def cleanup(self):
        """Clean up all dependencies."""
        await self.db_manager.close()
        self.logger.info("Dependencies cleaned up successfully")


# Global dependencies instance
_dependencies: Optional[Dependencies] = None


def get_dependencies() -> Dependencies:
    """Get the global dependencies instance."""
    global _dependencies
    if _dependencies is None:
        from .config import get_config
        _dependencies = Dependencies(get_config())
    return _dependencies
