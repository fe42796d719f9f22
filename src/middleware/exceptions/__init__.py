"""Exception handling for the single-table store service."""

from typing import Any, Dict, Optional


class TableServiceError(Exception):
    """Base exception for all single-table store service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code


from .api import BadRequestError
from .storage import (
    ConflictingFieldOpError,
    CorruptKeyError,
    EmptyPatchError,
    InvalidKeyError,
    RecordNotFoundError,
    ReservedFieldError,
    StorageError,
    StorageValidationError,
)

__all__ = [
    # Base
    "TableServiceError",
    # API Errors
    "BadRequestError",
    # Storage Errors
    "StorageError",
    "ConflictingFieldOpError",
    "CorruptKeyError",
    "EmptyPatchError",
    "InvalidKeyError",
    "RecordNotFoundError",
    "ReservedFieldError",
    "StorageValidationError",
]
