from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)


class ReportGenerationError(Exception):
    """An audit for ``url`` failed. Terminal for the request that triggered it."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Error generating the report for {url}: {reason}" if reason else f"Error generating the report for {url}")


class ReportNotFoundError(Exception):
    """No report has been generated for ``url`` yet."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No report found for {url}. Generate one first.")


class AuditExecutionError(Exception):
    """Raised by the audit executor: browser launch, navigation or Lighthouse failure."""


def add_exception_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(
            message=str(exc.detail) or "Error",
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(ReportGenerationError)
    async def report_generation_handler(request: Request, exc: ReportGenerationError):
        return api_response(
            message=str(exc),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            data={"url": exc.url},
        )

    @app.exception_handler(ReportNotFoundError)
    async def report_not_found_handler(request: Request, exc: ReportNotFoundError):
        return api_response(
            message=str(exc),
            status_code=status.HTTP_404_NOT_FOUND,
            data={"url": exc.url},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
