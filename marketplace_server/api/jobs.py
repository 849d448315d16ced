"""Job marketplace API endpoints."""

from typing import List
from fastapi import APIRouter, Depends, status

from marketplace_server.models.schemas import (
    JobCreate, SubmissionCreate, SubmissionScore, SettlementRequest,
    JobResponse, JobDetailResponse, SubmissionResponse, ScoreResponse,
    SettlementResponse, AuditLogResponse
)
from marketplace_server.services import JobService, SubmissionService, SettlementService, SettlementOptions
from .dependencies import get_job_service, get_submission_service, get_settlement_service


router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=JobResponse)
async def create_job(
    job_data: JobCreate,
    job_service: JobService = Depends(get_job_service)
):
    """Post a job and lock its reward in escrow."""
    return await job_service.create_job(job_data)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: str,
    job_service: JobService = Depends(get_job_service)
):
    """Get a job with its escrow, submissions and payouts."""
    return await job_service.get_job(job_id)


@router.get("/{job_id}/audit", response_model=List[AuditLogResponse])
async def get_audit_trail(
    job_id: str,
    job_service: JobService = Depends(get_job_service)
):
    """Get the audit trail of a job."""
    return await job_service.get_audit_trail(job_id)


@router.post("/{job_id}/submissions", status_code=status.HTTP_201_CREATED, response_model=SubmissionResponse)
async def create_submission(
    job_id: str,
    submission_data: SubmissionCreate,
    submission_service: SubmissionService = Depends(get_submission_service)
):
    """Submit work for a job."""
    return await submission_service.create_submission(job_id, submission_data)


@router.post("/{job_id}/score", response_model=ScoreResponse)
async def score_submission(
    job_id: str,
    score_data: SubmissionScore,
    submission_service: SubmissionService = Depends(get_submission_service)
):
    """Score a submission of this job."""
    return await submission_service.score_submission(job_id, score_data)


@router.post("/{job_id}/settle", response_model=SettlementResponse)
async def settle_job(
    job_id: str,
    settlement_data: SettlementRequest = SettlementRequest(),
    settlement_service: SettlementService = Depends(get_settlement_service)
):
    """Release escrow and pay the top submissions."""
    options = SettlementOptions(
        simulate_failure_after_escrow_release=settlement_data.simulateFailureAfterEscrowRelease
    )
    return await settlement_service.settle(job_id, options)
