"""Custom exceptions for the application.

Every error carries a stable ``code`` that is reported to callers as the
error identifier, and a ``category`` that tells them whether nothing
happened (validation, not_found, precondition) or whether a transaction
was started and rolled back (transaction_abort).
"""

from typing import Optional, Any, Dict
from fastapi import status
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    """Base exception for service layer errors."""

    category = "internal"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error": self.code or "InternalServerError",
            "message": self.message,
            "category": self.category,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    category = "validation"

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Any] = None):
        if details is None and field:
            details = {"field": field}
        super().__init__(message, code="ValidationError", details=details)
        self.field = field


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    category = "not_found"

    def __init__(
        self,
        resource: str,
        resource_id: str,
        code: Optional[str] = None,
        message: Optional[str] = None,
    ):
        message = message or f"{resource} with ID {resource_id} not found"
        super().__init__(message, code=code or f"{resource}NotFound")
        self.resource = resource
        self.resource_id = resource_id


class JobNotFound(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__("Job", job_id)


class SubmissionNotFound(NotFoundError):
    def __init__(self, submission_id: str, job_id: str):
        super().__init__(
            "Submission",
            submission_id,
            message=f"Submission with ID {submission_id} not found for job {job_id}",
        )
        self.job_id = job_id


class JobOrEscrowNotFound(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__("Job or escrow", job_id, code="JobOrEscrowNotFound")


class ConflictError(ServiceError):
    """Raised when a resource conflict occurs."""

    category = "precondition"

    def __init__(self, message: str, resource: Optional[str] = None, code: str = "Conflict"):
        super().__init__(message, code=code)
        self.resource = resource


class AlreadySettled(ConflictError):
    """The job was completed or its escrow released by an earlier settlement."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} has already been settled", resource="Job", code="AlreadySettled")
        self.job_id = job_id


class BusinessRuleViolation(ServiceError):
    """Raised when business rules are violated."""

    category = "precondition"

    def __init__(self, message: str, rule: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, code=rule or "BusinessRuleViolation", details=details)
        self.rule = rule


class NoScoredSubmissions(BusinessRuleViolation):
    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} has no scored submissions", rule="NoScoredSubmissions")
        self.job_id = job_id


class JobClosed(BusinessRuleViolation):
    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} is completed and can no longer change", rule="JobClosed")
        self.job_id = job_id


class InvalidTransition(BusinessRuleViolation):
    """Raised when a lifecycle transition is not allowed."""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"Illegal {entity} transition: {current} -> {target}",
            rule="InvalidTransition",
            details={"entity": entity, "from": current, "to": target},
        )
        self.entity = entity
        self.current = current
        self.target = target


class TransactionAborted(ServiceError):
    """Raised when a transaction failed part-way and every mutation was rolled back."""

    category = "transaction_abort"

    def __init__(self, message: str, code: str = "TransactionAborted"):
        super().__init__(message, code=code)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["rolled_back"] = True
        return result


class SimulatedFailure(TransactionAborted):
    """Injected failure after escrow release, used to exercise rollback."""

    def __init__(self, job_id: str):
        super().__init__(
            f"Simulated failure after escrow release for job {job_id}",
            code="SimulatedFailure",
        )
        self.job_id = job_id


class DatabaseError(ServiceError):
    """Raised when database operations fail."""

    category = "internal"

    def __init__(self, message: str = "Unexpected error", operation: Optional[str] = None):
        super().__init__(message, code="InternalServerError")
        self.operation = operation


class ServiceUnavailable(ServiceError):
    """Raised when a backing service such as the database pool is not ready."""

    category = "internal"

    def __init__(self, message: str = "Database not available"):
        super().__init__(message, code="ServiceUnavailable")


def service_error_handler(error: ServiceError) -> JSONResponse:
    """Convert service errors to HTTP responses."""
    status_map = {
        ValidationError: status.HTTP_400_BAD_REQUEST,
        NotFoundError: status.HTTP_404_NOT_FOUND,
        ConflictError: status.HTTP_409_CONFLICT,
        BusinessRuleViolation: status.HTTP_422_UNPROCESSABLE_ENTITY,
        TransactionAborted: status.HTTP_500_INTERNAL_SERVER_ERROR,
        DatabaseError: status.HTTP_500_INTERNAL_SERVER_ERROR,
        ServiceUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type in type(error).__mro__:
        if error_type in status_map:
            status_code = status_map[error_type]
            break

    return JSONResponse(status_code=status_code, content=error.to_dict())
