"""Data models and schemas for the job marketplace."""

from .schemas import (
    JobCreate,
    SubmissionCreate,
    SubmissionScore,
    SettlementRequest,
    EscrowResponse,
    SubmissionResponse,
    PayoutResponse,
    JobResponse,
    JobDetailResponse,
    ScoreResponse,
    SettlementResponse,
    AuditLogResponse
)

__all__ = [
    "JobCreate",
    "SubmissionCreate",
    "SubmissionScore",
    "SettlementRequest",
    "EscrowResponse",
    "SubmissionResponse",
    "PayoutResponse",
    "JobResponse",
    "JobDetailResponse",
    "ScoreResponse",
    "SettlementResponse",
    "AuditLogResponse"
]
