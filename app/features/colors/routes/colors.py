import asyncio

from fastapi import APIRouter, Depends, status
from selenium.common.exceptions import WebDriverException

from app.features.colors.services.color_extractor import ColorExtractorService
from app.features.reports.dependencies.report import require_url
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(tags=["Colors"])


@router.get("/extract-colors")
async def extract_colors(url: str = Depends(require_url)):
    """Computed CSS colours of ``url``. Runs outside the report queue."""
    try:
        colors = await asyncio.to_thread(ColorExtractorService.extract_colors, url)
    except WebDriverException as e:
        logger.error(f"Colour extraction failed for {url}: {e.msg or e}")
        return api_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=f"Error extracting colors: {e.msg or e}",
            data={"url": url},
        )

    return api_response(data={"url": url, "colors": colors}, message="Colors extracted")
