"""
Standardized error handling utilities for API endpoints.
"""
from functools import wraps
from typing import Callable, Any
from uuid import UUID
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
import logging

from smartleave.core.config import settings
from smartleave.core.exceptions import (
    ConsistencyError,
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    LeaveEngineError,
    LeaveValidationError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)

ENGINE_ERROR_STATUS = {
    LeaveValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ConsistencyError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def parse_uuid(uuid_string: str, entity_name: str = "ID") -> UUID:
    """
    Parse a UUID string and raise a standardized error if invalid.

    Args:
        uuid_string: String to parse as UUID
        entity_name: Name of the entity (for error message)

    Returns:
        Parsed UUID

    Raises:
        InvalidRequestError: If UUID is invalid
    """
    try:
        return UUID(uuid_string)
    except ValueError:
        raise InvalidRequestError(
            f"Invalid {entity_name.lower()}: '{uuid_string}'. Must be a valid UUID."
        )


def verdict_response(verdict) -> JSONResponse:
    """400 body for a rejected verdict, with the reason as the machine-readable code."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": verdict.message, "code": verdict.reason.value},
    )


def engine_error_response(exc: LeaveEngineError) -> JSONResponse:
    headers = None
    if isinstance(exc, StorageError):
        if exc.retryable:
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            headers = {"Retry-After": str(settings.STORAGE_RETRY_AFTER_SECONDS)}
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        status_code = next(
            (code for exc_type, code in ENGINE_ERROR_STATUS.items() if isinstance(exc, exc_type)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LeaveEngineError)
    async def leave_engine_exception_handler(request: Request, exc: LeaveEngineError):
        if isinstance(exc, ConsistencyError):
            # Already written to the consistency log by the service; keep a trail per request too
            logger.error(
                f"Consistency error on {request.method} {request.url.path}: {exc.message}",
                extra={"request_id": str(exc.request_id), "user_id": str(exc.user_id)},
            )
        elif isinstance(exc, StorageError):
            logger.warning(f"Storage error on {request.method} {request.url.path} (retryable={exc.retryable})")
        return engine_error_response(exc)


def handle_endpoint_errors(
    operation_name: str = None,
    log_error: bool = True,
):
    """
    Decorator to standardize error handling across all endpoints.

    Engine errors and HTTPExceptions pass through to their registered
    handlers; anything unexpected is logged and returned as a 500.

    Args:
        operation_name: Name of the operation (for logging)
        log_error: Whether to log errors (default: True)

    Usage:
        @handle_endpoint_errors(operation_name="approve_leave_request")
        async def approve_leave_request_endpoint(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            try:
                return await func(*args, **kwargs)
            except (HTTPException, LeaveEngineError):
                raise
            except ValueError as e:
                if log_error:
                    logger.warning(f"Value error in {op_name}: {str(e)}")
                raise InvalidRequestError(f"Invalid input: {str(e)}")
            except Exception as e:
                error_detail = str(e)
                error_type = type(e).__name__

                if log_error:
                    logger.error(
                        f"Unexpected error in {op_name}",
                        exc_info=True,
                        extra={
                            "operation": op_name,
                            "error": error_detail,
                            "error_type": error_type
                        }
                    )

                if settings.is_production:
                    detail_msg = "An unexpected error occurred while processing your request. Please try again later."
                else:
                    detail_msg = f"Error in {op_name}: {error_type}: {error_detail}"

                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=detail_msg,
                )
        return wrapper
    return decorator
