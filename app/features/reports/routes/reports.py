import asyncio

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status

from app.features.reports.dependencies.report import get_report_service, require_url
from app.features.reports.schemas.report import ReportEmailOut, ReportEmailRequest, ReportEmailResponse
from app.features.reports.services.pdf_report import build_report_pdf
from app.features.reports.services.report_email import report_filename, send_report_email
from app.features.reports.services.report_service import ReportService
from app.platform.exceptions import ReportNotFoundError
from app.platform.logger import get_logger
from app.platform.response import api_response
from app.platform.schemas import ErrorResponse
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)

router = APIRouter(tags=["Reports"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/generate-report", responses=ERROR_RESPONSES)
async def generate_report(
    refresh: bool = False,
    url: str = Depends(require_url),
    service: ReportService = Depends(get_report_service),
):
    """
    Return the Lighthouse report for ``url``.

    Cached reports are returned immediately. Otherwise the request joins the
    audit queue and the response is sent once its audit has run.
    ``refresh=true`` skips the cache and overwrites the stored report.
    """
    return await service.request_report(url, refresh=refresh)


@router.get("/report", responses=ERROR_RESPONSES)
async def get_report(
    url: str = Depends(require_url),
    service: ReportService = Depends(get_report_service),
):
    report = service.cache.get(url)
    if report is None:
        raise ReportNotFoundError(url)
    return report


@router.get(
    "/report/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}, **ERROR_RESPONSES},
)
async def get_report_pdf(
    url: str = Depends(require_url),
    service: ReportService = Depends(get_report_service),
):
    report = service.cache.get(url)
    if report is None:
        raise ReportNotFoundError(url)

    pdf_bytes = await asyncio.to_thread(build_report_pdf, url, report)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(url)}"'},
    )


@router.post(
    "/report/email",
    response_model=ReportEmailResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses=ERROR_RESPONSES,
)
async def email_report(
    payload: ReportEmailRequest,
    background_tasks: BackgroundTasks,
    service: ReportService = Depends(get_report_service),
):
    is_valid, url_str, error_message = validate_url(payload.url)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_message)

    report = service.cache.get(url_str)
    if report is None:
        raise ReportNotFoundError(url_str)

    background_tasks.add_task(send_report_email, payload.email, url_str, report)
    logger.info(f"Report email for {url_str} scheduled to {payload.email}")

    return api_response(
        data=ReportEmailOut(url=url_str, email=payload.email),
        message="Report will be emailed shortly",
        status_code=status.HTTP_202_ACCEPTED,
    )
