import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ErrorCode:
    """Error codes returned alongside the HTTP status"""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_CODE_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_500_INTERNAL_SERVER_ERROR: ErrorCode.INTERNAL_ERROR,
}


class AppError(Exception):
    """
    Application error carrying an HTTP status, an error code and optional
    extra fields that are merged into the error response body.
    """

    def __init__(self, message: str, status_code: int = 500, code: str = ErrorCode.INTERNAL_ERROR, **details: Any):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message, "code": self.code}
        body.update(self.details)
        return body


class ValidationError(AppError):
    def __init__(self, message: str, **details: Any):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, ErrorCode.VALIDATION_ERROR, **details)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "User not authenticated", **details: Any):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, ErrorCode.UNAUTHORIZED, **details)


class ForbiddenError(AppError):
    def __init__(self, message: str, **details: Any):
        super().__init__(message, status.HTTP_403_FORBIDDEN, ErrorCode.FORBIDDEN, **details)


class NotFoundError(AppError):
    def __init__(self, message: str, **details: Any):
        super().__init__(message, status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, **details)


class InternalError(AppError):
    def __init__(self, message: str, **details: Any):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, **details)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": str(exc.detail),
            "code": _CODE_BY_STATUS.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request data",
            "code": ErrorCode.VALIDATION_ERROR,
            "errors": errors,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error", "code": ErrorCode.INTERNAL_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
