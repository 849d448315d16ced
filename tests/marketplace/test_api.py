import pytest

from marketplace_server.api.dependencies import get_database
from marketplace_server.main import app


JOB = {
    "title": "Label the dataset",
    "prompt": "Label each row as positive or negative.",
    "rewardTokens": 1000,
    "deadlineAt": "2030-01-01T00:00:00Z",
}


def post_job(client, **overrides):
    response = client.post("/jobs", json={**JOB, **overrides})
    assert response.status_code == 201
    return response.json()


def post_submission(client, job_id, worker="alice", content="my answer", latency_ms=1000):
    response = client.post(
        f"/jobs/{job_id}/submissions",
        json={"workerId": worker, "content": content, "latencyMs": latency_ms},
    )
    assert response.status_code == 201
    return response.json()


class TestHealthCheck:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert data["environment"] == "test"
        assert "timestamp" in data


class TestJobEndpoints:

    def test_create_job(self, client):
        job = post_job(client)

        assert job["status"] == "OPEN"
        assert job["reward_tokens"] == 1000
        assert job["escrow"]["status"] == "LOCKED"
        assert job["escrow"]["amount_tokens"] == 1000

    @pytest.mark.parametrize("field,value", [
        ("rewardTokens", 0),
        ("rewardTokens", -5),
        ("title", "ab"),
        ("prompt", ""),
        ("deadlineAt", "not a date"),
    ])
    def test_create_job_validation(self, client, db, field, value):
        response = client.post("/jobs", json={**JOB, field: value})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "ValidationError"
        assert data["category"] == "validation"
        assert any(field in issue["loc"] for issue in data["details"])
        assert db.rows("jobs") == []

    def test_get_job(self, client):
        job = post_job(client)
        submission = post_submission(client, job["id"])

        response = client.get(f"/jobs/{job['id']}")
        assert response.status_code == 200

        data = response.json()
        assert data["id"] == job["id"]
        assert data["escrow"]["status"] == "LOCKED"
        assert [s["id"] for s in data["submissions"]] == [submission["id"]]
        assert data["payouts"] == []

    def test_get_nonexistent_job(self, client):
        response = client.get("/jobs/nonexistent")

        assert response.status_code == 404
        assert response.json()["error"] == "JobNotFound"

    def test_audit_trail(self, client):
        job = post_job(client)
        post_submission(client, job["id"])

        response = client.get(f"/jobs/{job['id']}/audit")
        assert response.status_code == 200
        assert [e["action"] for e in response.json()] == ["JOB_CREATED", "SUBMISSION_CREATED"]


class TestSubmissionEndpoints:

    def test_submission_for_unknown_job(self, client):
        response = client.post(
            "/jobs/missing/submissions",
            json={"workerId": "alice", "content": "x", "latencyMs": 10},
        )
        assert response.status_code == 404
        assert response.json()["error"] == "JobNotFound"

    def test_negative_latency_rejected(self, client):
        job = post_job(client)
        response = client.post(
            f"/jobs/{job['id']}/submissions",
            json={"workerId": "alice", "content": "x", "latencyMs": -1},
        )
        assert response.status_code == 400

    def test_score_submission(self, client):
        job = post_job(client)
        submission = post_submission(client, job["id"], latency_ms=5000)

        response = client.post(
            f"/jobs/{job['id']}/score",
            json={"submissionId": submission["id"], "quality": 0.8},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["score"] == 0.71
        assert data["quality"] == 0.8
        assert data["speed"] == pytest.approx(0.5)
        assert data["formula"] == "quality*0.7 + speed*0.3"
        assert data["submission"]["status"] == "SCORED"

    def test_score_without_quality_uses_estimate(self, client):
        job = post_job(client)
        submission = post_submission(client, job["id"], content="short", latency_ms=0)

        response = client.post(f"/jobs/{job['id']}/score", json={"submissionId": submission["id"]})

        assert response.status_code == 200
        assert response.json()["quality"] == 0.35

    def test_quality_out_of_range(self, client):
        job = post_job(client)
        submission = post_submission(client, job["id"])

        response = client.post(
            f"/jobs/{job['id']}/score",
            json={"submissionId": submission["id"], "quality": 1.5},
        )
        assert response.status_code == 400

    def test_score_submission_of_other_job(self, client):
        job = post_job(client)
        other = post_job(client)
        submission = post_submission(client, other["id"])

        response = client.post(
            f"/jobs/{job['id']}/score",
            json={"submissionId": submission["id"], "quality": 0.5},
        )
        assert response.status_code == 404
        assert response.json()["error"] == "SubmissionNotFound"


class TestSettlementEndpoints:

    def score(self, client, job_id, worker, quality):
        submission = post_submission(client, job_id, worker=worker, latency_ms=0)
        response = client.post(
            f"/jobs/{job_id}/score",
            json={"submissionId": submission["id"], "quality": quality},
        )
        assert response.status_code == 200
        return submission

    def test_settle_job(self, client):
        job = post_job(client)
        winner = self.score(client, job["id"], "alice", 0.9)
        self.score(client, job["id"], "bob", 0.5)
        self.score(client, job["id"], "carol", 0.1)

        response = client.post(f"/jobs/{job['id']}/settle")
        assert response.status_code == 200
        assert response.json() == {
            "job_id": job["id"],
            "payouts_count": 3,
            "winner_submission_id": winner["id"],
        }

        data = client.get(f"/jobs/{job['id']}").json()
        assert data["status"] == "COMPLETED"
        assert data["escrow"]["status"] == "RELEASED"
        assert [p["amount_tokens"] for p in data["payouts"]] == [800, 150, 50]

    def test_settle_twice(self, client):
        job = post_job(client)
        self.score(client, job["id"], "alice", 0.9)
        assert client.post(f"/jobs/{job['id']}/settle").status_code == 200

        response = client.post(f"/jobs/{job['id']}/settle")

        assert response.status_code == 409
        assert response.json()["error"] == "AlreadySettled"
        assert response.json()["category"] == "precondition"

    def test_settle_without_scored_submissions(self, client):
        job = post_job(client)
        post_submission(client, job["id"])

        response = client.post(f"/jobs/{job['id']}/settle")

        assert response.status_code == 422
        assert response.json()["error"] == "NoScoredSubmissions"

    def test_settle_unknown_job(self, client):
        response = client.post("/jobs/missing/settle")

        assert response.status_code == 404
        assert response.json()["error"] == "JobOrEscrowNotFound"

    def test_simulated_failure_rolls_back(self, client):
        job = post_job(client)
        self.score(client, job["id"], "alice", 0.9)

        response = client.post(
            f"/jobs/{job['id']}/settle",
            json={"simulateFailureAfterEscrowRelease": True},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "SimulatedFailure"
        assert data["category"] == "transaction_abort"
        assert data["rolled_back"] is True

        state = client.get(f"/jobs/{job['id']}").json()
        assert state["status"] == "OPEN"
        assert state["escrow"]["status"] == "LOCKED"
        assert state["payouts"] == []

        actions = [e["action"] for e in client.get(f"/jobs/{job['id']}/audit").json()]
        assert "JOB_SETTLED" not in actions

    def test_fault_injection_refused_in_production(self, client, test_config):
        test_config.environment = "production"
        job = post_job(client)
        self.score(client, job["id"], "alice", 0.9)

        response = client.post(
            f"/jobs/{job['id']}/settle",
            json={"simulateFailureAfterEscrowRelease": True},
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "simulateFailureAfterEscrowRelease"}

    def test_score_after_settlement_refused(self, client):
        job = post_job(client)
        self.score(client, job["id"], "alice", 0.9)
        loser = self.score(client, job["id"], "bob", 0.2)
        assert client.post(f"/jobs/{job['id']}/settle").status_code == 200
        audit_before = client.get(f"/jobs/{job['id']}/audit").json()

        response = client.post(
            f"/jobs/{job['id']}/score",
            json={"submissionId": loser["id"], "quality": 1.0},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "JobClosed"
        submissions = {s["id"]: s for s in client.get(f"/jobs/{job['id']}").json()["submissions"]}
        assert submissions[loser["id"]]["final_score"] == pytest.approx(0.44)
        assert client.get(f"/jobs/{job['id']}/audit").json() == audit_before


class TestDatabaseUnavailable:

    def test_uses_error_envelope(self, client):
        del app.dependency_overrides[get_database]

        response = client.get("/jobs/some-job")

        assert response.status_code == 503
        assert response.json() == {
            "error": "ServiceUnavailable",
            "message": "Database not available",
            "category": "internal",
        }
