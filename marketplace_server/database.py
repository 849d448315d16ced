import asyncpg
import json
import structlog
from contextlib import asynccontextmanager

from marketplace_server.repositories import create_unit_of_work

logger = structlog.get_logger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    handle TEXT NOT NULL UNIQUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS jobs (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    prompt TEXT NOT NULL,
    reward_tokens INTEGER NOT NULL CHECK (reward_tokens > 0),
    deadline_at TIMESTAMPTZ NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('OPEN', 'COMPLETED')),
    requester_id TEXT NOT NULL REFERENCES users(id),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    completed_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS escrows (
    id TEXT PRIMARY KEY,
    job_id TEXT NOT NULL UNIQUE REFERENCES jobs(id) ON DELETE CASCADE,
    amount_tokens INTEGER NOT NULL CHECK (amount_tokens > 0),
    status TEXT NOT NULL CHECK (status IN ('LOCKED', 'RELEASED')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    released_at TIMESTAMPTZ,
    CHECK ((status = 'RELEASED') = (released_at IS NOT NULL))
);

CREATE TABLE IF NOT EXISTS submissions (
    id TEXT PRIMARY KEY,
    created_seq BIGSERIAL NOT NULL UNIQUE,
    job_id TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    worker_id TEXT NOT NULL REFERENCES users(id),
    content TEXT NOT NULL,
    latency_ms INTEGER NOT NULL CHECK (latency_ms >= 0),
    quality_score DOUBLE PRECISION CHECK (quality_score BETWEEN 0 AND 1),
    speed_score DOUBLE PRECISION CHECK (speed_score BETWEEN 0 AND 1),
    final_score DOUBLE PRECISION CHECK (final_score BETWEEN 0 AND 1),
    status TEXT NOT NULL CHECK (status IN ('PENDING', 'SCORED', 'WINNER')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    scored_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS payouts (
    id TEXT PRIMARY KEY,
    job_id TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    user_id TEXT NOT NULL REFERENCES users(id),
    amount_tokens INTEGER NOT NULL CHECK (amount_tokens >= 0),
    rank INTEGER NOT NULL CHECK (rank BETWEEN 1 AND 3),
    status TEXT NOT NULL CHECK (status IN ('PAID')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (job_id, rank)
);

CREATE TABLE IF NOT EXISTS audit_logs (
    id TEXT PRIMARY KEY,
    seq BIGSERIAL NOT NULL UNIQUE,
    job_id TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    actor_id TEXT REFERENCES users(id),
    action TEXT NOT NULL,
    metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_submissions_job_status ON submissions(job_id, status);
CREATE INDEX IF NOT EXISTS idx_payouts_job_id ON payouts(job_id);
CREATE INDEX IF NOT EXISTS idx_audit_logs_job_id ON audit_logs(job_id);

-- At most one winner per job
CREATE UNIQUE INDEX IF NOT EXISTS idx_submissions_one_winner ON submissions(job_id) WHERE status = 'WINNER';
"""


async def _init_connection(conn: asyncpg.Connection):
    """Decode and encode JSONB columns as Python objects."""
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


class DatabaseManager:
    def __init__(self, database_url: str, min_size: int = 2, max_size: int = 10, command_timeout: float = 30.0):
        self.database_url = database_url
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.pool = None

    async def initialize(self):
        """Initialize database connection pool and schema"""
        try:
            self.pool = await asyncpg.create_pool(
                self.database_url,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
                init=_init_connection,
            )

            async with self.get_connection() as conn:
                await conn.execute(SCHEMA)

            logger.info("PostgreSQL database initialized")

        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    @asynccontextmanager
    async def get_connection(self):
        """Get a database connection from pool"""
        if not self.pool:
            raise RuntimeError("Database pool not initialized")

        async with self.pool.acquire() as conn:
            yield conn

    def unit_of_work(self):
        """Open a transaction-scoped unit of work."""
        if not self.pool:
            raise RuntimeError("Database pool not initialized")
        return create_unit_of_work(self.pool)

    async def close(self):
        """Close the database connection pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database connection pool closed")
