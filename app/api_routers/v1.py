from fastapi import APIRouter

from app.features.colors.routes.colors import router as colors_router
from app.features.health.routes.health import router as health_router
from app.features.mailing_list.routes.mailing_list import router as mailing_list_router
from app.features.reports.routes.reports import router as reports_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(health_router)
api_router.include_router(reports_router)
api_router.include_router(mailing_list_router)
api_router.include_router(colors_router)
