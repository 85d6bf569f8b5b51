"""
Error handling for propagated validation failures.
Renders ``ContainerValidationError`` in a standardized JSON error envelope.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from route_validator.app.core.exceptions import ContainerValidationError
from route_validator.app.utils.logging import get_logger

logger = get_logger("error_handler")


class ValidationErrorHandler:
    """
    Exception handling for validators running in propagate mode.

    Features:
    - Standardized error response format
    - Per-detail field, message and type
    - Correlation ID tracking
    """

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        """
        Register the ``ContainerValidationError`` handler on the application.
        """

        @app.exception_handler(ContainerValidationError)
        async def container_validation_exception_handler(
            request: Request, exc: ContainerValidationError
        ) -> JSONResponse:
            """Handle validation errors raised by pipeline steps."""
            return ValidationErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type="validation_error",
                message=exc.message,
                container=exc.kind.value,
                details={"validation_errors": exc.errors()},
            )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        container: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        """
        Create a standardized error response.

        Args:
            request: The incoming request
            status_code: HTTP status code
            error_type: Type of error for categorization
            message: Human-readable error message
            container: Container that failed validation
            details: Additional error details

        Returns:
            JSONResponse with standardized error format
        """
        correlation_id = getattr(request.state, "correlation_id", "unknown")

        error_response: Dict[str, Any] = {
            "error": {
                "type": error_type,
                "message": message,
                "container": container,
                "correlation_id": correlation_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        }

        if details:
            error_response["error"]["details"] = details

        logger.warning(
            f"Client error: {error_type}",
            extra={
                "correlation_id": correlation_id,
                "status_code": status_code,
                "error_type": error_type,
                "container": container,
                "path": request.url.path,
                "method": request.method,
                "event_type": "client_error",
            },
        )

        return JSONResponse(status_code=status_code, content=error_response)


def setup_validation_error_handling(app: FastAPI) -> None:
    """
    Convenience function to setup validation error handling.

    Args:
        app: FastAPI application instance
    """
    ValidationErrorHandler.setup_error_handlers(app)

    logger.info(
        "Validation error handling configured",
        extra={"event_type": "error_handler_setup"},
    )
