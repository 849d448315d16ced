import asyncio
import asyncpg
import pytest

from marketplace_server.core.exceptions import AlreadySettled, JobClosed, SimulatedFailure
from marketplace_server.services import SettlementOptions, SettlementService


pytestmark = [pytest.mark.asyncio, pytest.mark.postgres]


async def count(db, table):
    async with db.get_connection() as conn:
        return await conn.fetchval(f"SELECT COUNT(*) FROM {table}")


async def three_scored(marketplace):
    job = await marketplace.post_job(reward_tokens=1000)
    high = await marketplace.scored_submission(job["id"], "alice", quality=1.0)
    await marketplace.scored_submission(job["id"], "bob", quality=0.5)
    await marketplace.scored_submission(job["id"], "carol", quality=0.0)
    return job, high


class TestDatabaseSchema:
    """Test schema constraints backing the settlement invariants"""

    async def test_tables_exist(self, pg_db):
        async with pg_db.get_connection() as conn:
            rows = await conn.fetch("""
                SELECT table_name FROM information_schema.tables
                WHERE table_schema = 'public'
            """)
        tables = {r["table_name"] for r in rows}
        assert {"users", "jobs", "escrows", "submissions", "payouts", "audit_logs"} <= tables

    async def test_initialize_is_idempotent(self, pg_db):
        async with pg_db.get_connection() as conn:
            await conn.execute("SELECT 1")
        await pg_db.close()
        await pg_db.initialize()
        assert pg_db.pool is not None

    async def test_job_status_constraint(self, pg_marketplace, pg_db):
        job = await pg_marketplace.post_job()
        async with pg_db.get_connection() as conn:
            with pytest.raises(asyncpg.CheckViolationError):
                await conn.execute("UPDATE jobs SET status = 'CANCELLED' WHERE id = $1", job["id"])

    async def test_one_escrow_per_job(self, pg_marketplace, pg_db):
        job = await pg_marketplace.post_job()
        with pytest.raises(asyncpg.UniqueViolationError):
            async with pg_db.unit_of_work() as uow:
                await uow.escrows.create(job["id"], 10)

    async def test_handles_are_unique_and_reused(self, pg_db):
        async with pg_db.unit_of_work() as uow:
            first = await uow.users.get_or_create("alice")
            second = await uow.users.get_or_create("alice")
        assert first["id"] == second["id"]
        assert await count(pg_db, "users") == 1

    async def test_concurrent_first_reference_to_handle(self, pg_db):
        async def resolve():
            async with pg_db.unit_of_work() as uow:
                return await uow.users.get_or_create("new-worker")

        users = await asyncio.gather(*(resolve() for _ in range(4)))

        assert len({u["id"] for u in users}) == 1
        assert await count(pg_db, "users") == 1

    async def test_audit_metadata_round_trips_as_json(self, pg_marketplace):
        job = await pg_marketplace.post_job(reward_tokens=42)
        trail = await pg_marketplace.jobs.get_audit_trail(job["id"])
        assert trail[0]["metadata"] == {"rewardTokens": 42}


class TestSettlementOnPostgres:

    async def test_settlement(self, pg_marketplace, pg_db):
        job, high = await three_scored(pg_marketplace)

        result = await pg_marketplace.settlement.settle(job["id"])

        assert result["winner_submission_id"] == high["id"]
        loaded = await pg_marketplace.jobs.get_job(job["id"])
        assert loaded["status"] == "COMPLETED"
        assert loaded["escrow"]["status"] == "RELEASED"
        assert [p["amount_tokens"] for p in loaded["payouts"]] == [800, 150, 50]

    async def test_simulated_failure_rolls_back_escrow_release(self, pg_marketplace, pg_db):
        job, _ = await three_scored(pg_marketplace)
        audit_before = await count(pg_db, "audit_logs")

        with pytest.raises(SimulatedFailure):
            await pg_marketplace.settlement.settle(
                job["id"], SettlementOptions(simulate_failure_after_escrow_release=True)
            )

        loaded = await pg_marketplace.jobs.get_job(job["id"])
        assert loaded["status"] == "OPEN"
        assert loaded["escrow"]["status"] == "LOCKED"
        assert loaded["escrow"]["released_at"] is None
        assert loaded["payouts"] == []
        assert await count(pg_db, "audit_logs") == audit_before

    async def test_concurrent_settlements_commit_once(self, pg_marketplace, pg_db):
        job, _ = await three_scored(pg_marketplace)
        services = [SettlementService(pg_db) for _ in range(4)]

        results = await asyncio.gather(
            *(service.settle(job["id"]) for service in services),
            return_exceptions=True,
        )

        assert len([r for r in results if isinstance(r, dict)]) == 1
        assert all(isinstance(r, AlreadySettled) for r in results if not isinstance(r, dict))
        assert await count(pg_db, "payouts") == 3

        async with pg_db.get_connection() as conn:
            settled = await conn.fetchval(
                "SELECT COUNT(*) FROM audit_logs WHERE job_id = $1 AND action = 'JOB_SETTLED'", job["id"]
            )
        assert settled == 1

    async def test_scoring_after_settlement_is_rejected(self, pg_marketplace, pg_db):
        job, high = await three_scored(pg_marketplace)
        pending = await pg_marketplace.submit(job["id"], "dave")
        await pg_marketplace.settlement.settle(job["id"])
        audit_before = await count(pg_db, "audit_logs")

        for submission_id in (high["id"], pending["id"]):
            with pytest.raises(JobClosed):
                await pg_marketplace.score(job["id"], submission_id, quality=0.0)

        loaded = await pg_marketplace.jobs.get_job(job["id"])
        statuses = {s["id"]: s["status"] for s in loaded["submissions"]}
        assert statuses[high["id"]] == "WINNER"
        assert statuses[pending["id"]] == "PENDING"
        assert await count(pg_db, "audit_logs") == audit_before

    async def test_scoring_racing_settlement_keeps_the_winner(self, pg_marketplace, pg_db):
        job, high = await three_scored(pg_marketplace)

        settled, scored = await asyncio.gather(
            pg_marketplace.settlement.settle(job["id"]),
            pg_marketplace.score(job["id"], high["id"], quality=1.0),
            return_exceptions=True,
        )

        assert isinstance(settled, dict)
        assert isinstance(scored, (dict, JobClosed))
        async with pg_db.get_connection() as conn:
            winners = await conn.fetch(
                "SELECT id FROM submissions WHERE job_id = $1 AND status = 'WINNER'", job["id"]
            )
        assert [w["id"] for w in winners] == [settled["winner_submission_id"]]
