"""Lifecycle state machine for jobs, escrows and submissions.

Transitions are fail-closed: anything not listed here is rejected before
the caller mutates state.
"""

from enum import Enum
from typing import FrozenSet, Tuple, Union

from marketplace_server.core.exceptions import InvalidTransition
from .entities import JobStatus, EscrowStatus, SubmissionStatus


_JOB_TRANSITIONS: FrozenSet[Tuple[JobStatus, JobStatus]] = frozenset({
    (JobStatus.OPEN, JobStatus.COMPLETED),
})

_ESCROW_TRANSITIONS: FrozenSet[Tuple[EscrowStatus, EscrowStatus]] = frozenset({
    (EscrowStatus.LOCKED, EscrowStatus.RELEASED),
})

_SUBMISSION_TRANSITIONS: FrozenSet[Tuple[SubmissionStatus, SubmissionStatus]] = frozenset({
    (SubmissionStatus.PENDING, SubmissionStatus.SCORED),
    # Re-scoring overwrites the previous score
    (SubmissionStatus.SCORED, SubmissionStatus.SCORED),
    (SubmissionStatus.SCORED, SubmissionStatus.WINNER),
})


def _check(entity: str, transitions, enum_type, current: Union[str, Enum], target: Union[str, Enum]):
    current = enum_type(current)
    target = enum_type(target)
    if (current, target) not in transitions:
        raise InvalidTransition(entity, current.value, target.value)
    return target


def can_transition_job(current, target) -> bool:
    return (JobStatus(current), JobStatus(target)) in _JOB_TRANSITIONS


def can_transition_escrow(current, target) -> bool:
    return (EscrowStatus(current), EscrowStatus(target)) in _ESCROW_TRANSITIONS


def can_transition_submission(current, target) -> bool:
    return (SubmissionStatus(current), SubmissionStatus(target)) in _SUBMISSION_TRANSITIONS


def ensure_job_transition(current, target) -> JobStatus:
    """Validate a job transition, returning the target status."""
    return _check("job", _JOB_TRANSITIONS, JobStatus, current, target)


def ensure_escrow_transition(current, target) -> EscrowStatus:
    """Validate an escrow transition, returning the target status."""
    return _check("escrow", _ESCROW_TRANSITIONS, EscrowStatus, current, target)


def ensure_submission_transition(current, target) -> SubmissionStatus:
    """Validate a submission transition, returning the target status."""
    return _check("submission", _SUBMISSION_TRANSITIONS, SubmissionStatus, current, target)
