from typing import Optional

from fastapi import HTTPException, Request, status

from app.features.reports.services.report_service import ReportService
from app.platform.utils.url_validator import validate_url


def get_report_service(request: Request) -> ReportService:
    """The ReportService built in the app lifespan."""
    return request.app.state.report_service


def require_url(url: Optional[str] = None) -> str:
    """
    Query-parameter dependency: rejects a missing or malformed ``url``
    with 400 and returns it normalized otherwise.
    """
    is_valid, url_str, error_message = validate_url(url)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_message)
    return url_str
