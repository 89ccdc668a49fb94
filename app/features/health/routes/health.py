from fastapi import APIRouter, Depends, status

from app.features.reports.dependencies.report import get_report_service
from app.features.reports.schemas.report import QueueStatus
from app.features.reports.services.report_service import ReportService
from app.platform.response import api_response


router = APIRouter()

@router.get("/health", tags=["health"])
async def health_check(service: ReportService = Depends(get_report_service)):
    return api_response(
        data={
            "status": "ok",
            "service": "Site Report",
            "reports": QueueStatus(**service.status()),
        },
        message="Service is healthy",
        status_code=status.HTTP_200_OK,
    )
