"""Storage-related exceptions raised by the record store engine."""

from typing import Any, Dict, Iterable, Optional

from . import TableServiceError


class StorageError(TableServiceError):
    """Base class for storage-related errors."""

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=status_code,
        )


class InvalidKeyError(StorageError):
    """Raised when a partition key or sort key has an invalid shape."""

    def __init__(
        self,
        message: str = "Invalid key",
        code: str = "INVALID_KEY",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code, details, status_code=400)


class CorruptKeyError(StorageError):
    """Raised when an encoded storage key cannot be decoded."""

    def __init__(
        self,
        key: str,
        message: str = "Corrupt storage key",
        code: str = "CORRUPT_KEY",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            details={"key": key, **(details or {})},
        )


class RecordNotFoundError(StorageError):
    """Error when no live record exists at a key."""

    def __init__(
        self,
        partition_key: str,
        sort_key: str,
        message: str = "Record not found",
        code: str = "RECORD_NOT_FOUND",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            details={
                "partition_key": partition_key,
                "sort_key": sort_key,
                **(details or {}),
            },
            status_code=404,
        )


class ReservedFieldError(StorageError):
    """Raised when a write touches a store-managed attribute."""

    def __init__(
        self,
        fields: Iterable[str],
        message: str = "Reserved fields cannot be written",
        code: str = "RESERVED_FIELD",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            details={"fields": sorted(fields), **(details or {})},
            status_code=400,
        )


class ConflictingFieldOpError(StorageError):
    """Raised when a patch both sets and removes the same field."""

    def __init__(
        self,
        fields: Iterable[str],
        message: str = "Fields cannot be both set and removed",
        code: str = "CONFLICTING_FIELD_OP",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            details={"fields": sorted(fields), **(details or {})},
            status_code=400,
        )


class EmptyPatchError(StorageError):
    """Raised when a patch carries no caller-supplied changes."""

    def __init__(
        self,
        message: str = "No fields to update provided",
        code: str = "EMPTY_PATCH",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code, details, status_code=400)


class StorageValidationError(StorageError):
    """Error when an attribute value is not acceptable to the store."""

    def __init__(
        self,
        message: str = "Storage validation error",
        code: str = "STORAGE_VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code, details, status_code=400)
