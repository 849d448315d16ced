"""
Job marketplace settlement service.

Layered the usual way: API -> Service -> Repository -> Database. Requesters
post jobs with a token reward held in escrow, workers submit, submissions
are scored, and settlement pays the top three in one transaction.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from marketplace_server.core.config import get_config
from marketplace_server.core.dependencies import get_dependencies
from marketplace_server.core.exceptions import ServiceError, service_error_handler

from marketplace_server.api.jobs import router as jobs_router
from marketplace_server.api.health import router as health_router


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    config = get_config()
    logger.info("Starting job marketplace service", version="1.0.0", environment=config.environment)

    deps = get_dependencies()
    await deps.initialize()

    logger.info("Application started successfully")

    yield

    await deps.cleanup()
    logger.info("Application shutdown completed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_config()
    configure_logging(config.log_level)

    app = FastAPI(
        title="Job Marketplace Settlement Service",
        version="1.0.0",
        description="Jobs, escrowed rewards, scored submissions and atomic settlement",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        return service_error_handler(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "category": "validation",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "InternalServerError", "message": "Unexpected error", "category": "internal"},
        )

    app.include_router(health_router)
    app.include_router(jobs_router)

    return app


app = create_app()


if __name__ == "__main__":
    config = get_config()
    uvicorn.run(
        "marketplace_server.main:app",
        host=config.host,
        port=config.port,
        reload=config.reload,
        log_config=None  # Use our custom logging
    )
