import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.mailing_list.services.mailing_list import MailingList
from app.features.reports.services.lighthouse_executor import LighthouseAuditExecutor
from app.features.reports.services.report_service import AuditExecutor, ReportService
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import get_logger

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


def create_app(executor: Optional[AuditExecutor] = None) -> FastAPI:
    """
    Build the application. ``executor`` replaces the Lighthouse executor,
    which tests use to avoid launching a browser.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.report_service = ReportService(executor or LighthouseAuditExecutor())
        app.state.mailing_list = MailingList()
        logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
        yield
        await app.state.report_service.aclose()
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Lighthouse audits for any website, with PDF and email delivery",
        version=APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    @app.get("/", tags=["Info"])
    def root():
        return {
            "app_name": settings.APP_NAME,
            "description": "Generate performance, accessibility and SEO reports for any website.",
            "version": APP_VERSION,
            "docs_url": "/docs",
        }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()
