"""Pydantic schemas for request/response validation."""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator


# Request schemas
class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200, description="Job title")
    prompt: str = Field(..., min_length=1, max_length=10000, description="Task prompt for workers")
    rewardTokens: int = Field(..., gt=0, description="Reward locked in escrow, in tokens")
    deadlineAt: datetime = Field(..., description="Submission deadline")
    requesterHandle: Optional[str] = Field(
        default=None, min_length=1, max_length=64, description="Requester handle, system requester if omitted"
    )

    @field_validator("deadlineAt")
    @classmethod
    def deadline_defaults_to_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SubmissionCreate(BaseModel):
    workerId: str = Field(..., min_length=1, max_length=64, description="Worker handle")
    content: str = Field(..., min_length=1, max_length=20000, description="Submitted work")
    latencyMs: int = Field(..., ge=0, description="Time the worker took, in milliseconds")


class SubmissionScore(BaseModel):
    submissionId: str = Field(..., min_length=1, description="Submission identifier")
    quality: Optional[float] = Field(
        default=None, ge=0, le=1, description="Explicit quality rating, estimated from content if omitted"
    )


class SettlementRequest(BaseModel):
    simulateFailureAfterEscrowRelease: bool = Field(
        default=False, description="Abort after releasing escrow to exercise rollback (non-production only)"
    )


# Response schemas
class EscrowResponse(BaseModel):
    id: str
    job_id: str
    amount_tokens: int
    status: str
    created_at: datetime
    released_at: Optional[datetime] = None


class SubmissionResponse(BaseModel):
    id: str
    job_id: str
    worker_id: str
    content: str
    latency_ms: int
    quality_score: Optional[float] = None
    speed_score: Optional[float] = None
    final_score: Optional[float] = None
    status: str
    created_at: datetime
    scored_at: Optional[datetime] = None


class PayoutResponse(BaseModel):
    id: str
    job_id: str
    user_id: str
    amount_tokens: int
    rank: int
    status: str
    created_at: datetime


class JobResponse(BaseModel):
    id: str
    title: str
    prompt: str
    reward_tokens: int
    deadline_at: datetime
    status: str
    requester_id: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    escrow: Optional[EscrowResponse] = None


class JobDetailResponse(JobResponse):
    submissions: List[SubmissionResponse] = Field(default_factory=list)
    payouts: List[PayoutResponse] = Field(default_factory=list)


class ScoreResponse(BaseModel):
    submission: SubmissionResponse
    quality: float
    speed: float
    score: float
    formula: str


class SettlementResponse(BaseModel):
    job_id: str
    payouts_count: int
    winner_submission_id: str


class AuditLogResponse(BaseModel):
    id: str
    job_id: str
    actor_id: Optional[str] = None
    action: str
    metadata: Dict[str, Any]
    created_at: datetime
