from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Optional

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.middleware_factory import lambda_handler_decorator
from pydantic import BaseModel, ValidationError

from .api import APIErrorResponse
from .exceptions import (
    BadRequestError,
    ConflictingFieldOpError,
    CorruptKeyError,
    EmptyPatchError,
    InvalidKeyError,
    RecordNotFoundError,
    ReservedFieldError,
    StorageError,
    StorageValidationError,
    TableServiceError,
)

logger = Logger()


class ErrorCode(Enum):
    # Validation errors
    VALIDATION_INVALID_INPUT = "VALIDATION_INVALID_INPUT"

    # API errors
    BAD_REQUEST = "BAD_REQUEST"

    # Storage errors
    STORAGE_ERROR = "STORAGE_ERROR"
    INVALID_KEY = "INVALID_KEY"
    CORRUPT_KEY = "CORRUPT_KEY"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    RESERVED_FIELD = "RESERVED_FIELD"
    CONFLICTING_FIELD_OP = "CONFLICTING_FIELD_OP"
    EMPTY_PATCH = "EMPTY_PATCH"
    STORAGE_VALIDATION_ERROR = "STORAGE_VALIDATION_ERROR"

    # System errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_INTERNAL_ERROR"

    @property
    def default_message(self) -> str:
        messages: Dict["ErrorCode", str] = {
            ErrorCode.VALIDATION_INVALID_INPUT: "Invalid input",
            ErrorCode.BAD_REQUEST: "Bad request",
            ErrorCode.STORAGE_ERROR: "Storage operation failed",
            ErrorCode.INVALID_KEY: "Invalid key",
            ErrorCode.CORRUPT_KEY: "Corrupt storage key",
            ErrorCode.RECORD_NOT_FOUND: "Record not found",
            ErrorCode.RESERVED_FIELD: "Reserved fields cannot be written",
            ErrorCode.CONFLICTING_FIELD_OP: "Fields cannot be both set and removed",
            ErrorCode.EMPTY_PATCH: "No fields to update provided",
            ErrorCode.STORAGE_VALIDATION_ERROR: "Storage validation error",
            ErrorCode.SYSTEM_INTERNAL_ERROR: "An unexpected error occurred",
        }
        return messages[self]

    @classmethod
    def from_exception(cls, e: Exception) -> "ErrorCode":
        """Map exceptions to error codes."""
        mappings: Dict[type, "ErrorCode"] = {
            ValidationError: ErrorCode.VALIDATION_INVALID_INPUT,
            BadRequestError: ErrorCode.BAD_REQUEST,
            InvalidKeyError: ErrorCode.INVALID_KEY,
            CorruptKeyError: ErrorCode.CORRUPT_KEY,
            RecordNotFoundError: ErrorCode.RECORD_NOT_FOUND,
            ReservedFieldError: ErrorCode.RESERVED_FIELD,
            ConflictingFieldOpError: ErrorCode.CONFLICTING_FIELD_OP,
            EmptyPatchError: ErrorCode.EMPTY_PATCH,
            StorageValidationError: ErrorCode.STORAGE_VALIDATION_ERROR,
            StorageError: ErrorCode.STORAGE_ERROR,
        }
        return mappings.get(type(e), ErrorCode.SYSTEM_INTERNAL_ERROR)


class ErrorResponse(BaseModel):
    message: str
    code: ErrorCode
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_code(
        cls, code: ErrorCode, details: Optional[Dict[str, Any]] = None
    ) -> "ErrorResponse":
        return cls(message=code.default_message, code=code, details=details)

    @classmethod
    def from_exception(cls, e: Exception) -> "ErrorResponse":
        """Create an ErrorResponse from an exception."""
        code = ErrorCode.from_exception(e)
        message = str(e) if str(e) else code.default_message
        details = getattr(e, "details", None)

        return cls(message=message, code=code, details=details)


def create_error_response(
    status_code: HTTPStatus,
    error_response: ErrorResponse,
) -> Dict[str, Any]:
    """Helper to create standardized error responses with error codes."""
    api_error = APIErrorResponse(
        message=error_response.message,
        code=error_response.code.value,
        details=error_response.details,
    )

    return {
        "statusCode": int(status_code),
        "body": api_error.model_dump_json(),
        "headers": {"Content-Type": "application/json"},
    }


@lambda_handler_decorator
def error_handler_middleware(handler, event, context):
    """Middleware to handle exceptions and format error responses with error codes."""
    try:
        return handler(event, context)

    # --- TableServiceError exceptions (our custom exceptions) ---
    except TableServiceError as e:
        log_level = "warning" if e.status_code < 500 else "error"
        getattr(logger, log_level)(
            f"{e.__class__.__name__}: {str(e)}",
            extra={"code": e.code, "details": e.details},
        )

        error_response = ErrorResponse.from_exception(e)
        return create_error_response(HTTPStatus(e.status_code), error_response)

    # --- Input Validation Errors ---
    except ValidationError as e:
        logger.warning(f"Input validation failed: {e}", exc_info=True)
        error_response = ErrorResponse.from_code(
            ErrorCode.VALIDATION_INVALID_INPUT,
            details={"errors": e.errors(include_url=False, include_context=False)},
        )
        return create_error_response(HTTPStatus.BAD_REQUEST, error_response)

    # --- Generic Fallback Error ---
    except Exception as e:
        logger.exception(f"Unhandled error: {e.__class__.__name__}: {str(e)}")
        error_response = ErrorResponse.from_code(
            ErrorCode.SYSTEM_INTERNAL_ERROR, details={"error": str(e)}
        )
        return create_error_response(HTTPStatus.INTERNAL_SERVER_ERROR, error_response)
