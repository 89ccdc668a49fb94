from collections import Counter
from typing import Dict, Iterable, List, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.chrome.webdriver import WebDriver

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

# Computed colours of every rendered element, one entry per property use
COLLECT_COLORS_SCRIPT = """
const props = ['color', 'backgroundColor', 'borderTopColor', 'borderRightColor',
               'borderBottomColor', 'borderLeftColor', 'outlineColor', 'fill', 'stroke'];
const values = [];
for (const el of document.querySelectorAll('*')) {
    const style = window.getComputedStyle(el);
    if (style.display === 'none' || style.visibility === 'hidden') continue;
    for (const prop of props) {
        const value = style[prop];
        if (value) values.push({property: prop, value: value});
    }
}
return values;
"""

TRANSPARENT = {"transparent", "rgba(0, 0, 0, 0)", "none", ""}


class ColorExtractorService:
    """One-shot browser run collecting the CSS colours a page actually renders."""

    @staticmethod
    def _create_driver() -> WebDriver:
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")

        if settings.CHROME_BINARY_PATH:
            chrome_options.binary_location = settings.CHROME_BINARY_PATH

        if settings.CHROMEDRIVER_PATH:
            driver = webdriver.Chrome(service=Service(executable_path=settings.CHROMEDRIVER_PATH), options=chrome_options)
        else:
            driver = webdriver.Chrome(options=chrome_options)

        driver.set_page_load_timeout(settings.PAGE_LOAD_TIMEOUT)
        return driver

    @staticmethod
    def normalize_color(value: str) -> Optional[str]:
        """``rgb(255, 0, 0)`` -> ``#ff0000``; keeps alpha as ``#rrggbbaa``. None for transparent."""
        value = value.strip().lower()
        if value in TRANSPARENT:
            return None

        if value.startswith("rgb"):
            inner = value[value.find("(") + 1:value.rfind(")")]
            # rgb(1, 2, 3) and rgb(1 2 3 / 0.5) both occur
            parts = inner.replace(",", " ").replace("/", " ").split()
            try:
                r, g, b = (int(float(p)) for p in parts[:3])
                alpha = float(parts[3]) if len(parts) > 3 else 1.0
            except ValueError:
                return value
            if alpha == 0:
                return None
            hex_value = f"#{r:02x}{g:02x}{b:02x}"
            if alpha < 1:
                hex_value += f"{int(round(alpha * 255)):02x}"
            return hex_value

        return value

    @staticmethod
    def tally_colors(entries: Iterable[Dict[str, str]]) -> List[Dict]:
        counts: Counter = Counter()
        properties: Dict[str, set] = {}

        for entry in entries:
            color = ColorExtractorService.normalize_color(entry.get("value", ""))
            if color is None:
                continue
            counts[color] += 1
            properties.setdefault(color, set()).add(entry.get("property", ""))

        return [
            {"color": color, "count": count, "properties": sorted(properties[color])}
            for color, count in counts.most_common()
        ]

    @staticmethod
    def extract_colors(url: str) -> List[Dict]:
        """
        Load ``url`` and return its colours, most used first.

        Blocking; the route runs it in a worker thread.
        Raises TimeoutException / WebDriverException on browser failures.
        """
        driver = ColorExtractorService._create_driver()
        try:
            driver.get(url)
            entries = driver.execute_script(COLLECT_COLORS_SCRIPT) or []
            logger.info(f"Collected {len(entries)} colour declarations from {url}")
            return ColorExtractorService.tally_colors(entries)
        except TimeoutException as e:
            raise TimeoutException(f"Page load timeout after {settings.PAGE_LOAD_TIMEOUT} seconds for URL: {url}") from e
        finally:
            try:
                driver.quit()
            except WebDriverException as e:
                logger.warning(f"Browser did not shut down cleanly: {e}")
