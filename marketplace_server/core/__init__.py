"""Core configuration and error types."""

from .config import Config, get_config
from .exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    ConflictError,
    BusinessRuleViolation,
    TransactionAborted,
    DatabaseError,
    ServiceUnavailable
)

__all__ = [
    "Config",
    "get_config",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "BusinessRuleViolation",
    "TransactionAborted",
    "DatabaseError",
    "ServiceUnavailable"
]
