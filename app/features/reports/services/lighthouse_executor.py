import asyncio
import json
import socket
from typing import List, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service

from app.features.reports.services.report_cache import Report
from app.platform.config import settings
from app.platform.exceptions import AuditExecutionError
from app.platform.logger import get_logger

logger = get_logger(__name__)


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class LighthouseAuditExecutor:
    """
    Runs one Lighthouse audit per call.

    A headless Chrome is started through Selenium with a known remote
    debugging port, the Lighthouse CLI attaches to that port, and the
    browser is torn down whatever the outcome.
    """

    def __init__(
        self,
        lighthouse_bin: Optional[str] = None,
        timeout: Optional[int] = None,
        categories: Optional[List[str]] = None,
    ):
        self.lighthouse_bin = lighthouse_bin or settings.LIGHTHOUSE_BIN
        self.timeout = timeout or settings.LIGHTHOUSE_TIMEOUT
        self.categories = categories or list(settings.LIGHTHOUSE_CATEGORIES)

    async def execute(self, url: str) -> Report:
        port = find_free_port()
        driver = await self.start_browser(port)
        try:
            return await self.run_lighthouse(url, port)
        finally:
            await asyncio.to_thread(self.close_browser, driver)

    async def start_browser(self, port: int):
        """Launch Chrome in a worker thread.

        A cancelled caller cannot stop the thread, so the driver it eventually
        returns is quit before the cancellation propagates.
        """
        launch = asyncio.ensure_future(asyncio.to_thread(self.launch_browser, port))
        try:
            return await asyncio.shield(launch)
        except asyncio.CancelledError:
            try:
                driver = await launch
            except AuditExecutionError as e:
                logger.warning(f"Browser launch failed after cancellation: {e}")
            else:
                await asyncio.to_thread(self.close_browser, driver)
            raise

    @staticmethod
    def build_options(port: int) -> Options:
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-setuid-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument(f"--remote-debugging-port={port}")

        if settings.CHROME_BINARY_PATH:
            chrome_options.binary_location = settings.CHROME_BINARY_PATH

        return chrome_options

    @staticmethod
    def launch_browser(port: int) -> webdriver.Chrome:
        chrome_options = LighthouseAuditExecutor.build_options(port)
        try:
            if settings.CHROMEDRIVER_PATH:
                driver_service = Service(executable_path=settings.CHROMEDRIVER_PATH)
                return webdriver.Chrome(service=driver_service, options=chrome_options)
            return webdriver.Chrome(options=chrome_options)
        except WebDriverException as e:
            raise AuditExecutionError(f"Could not launch browser: {e.msg or e}") from e

    @staticmethod
    def close_browser(driver: webdriver.Chrome) -> None:
        try:
            driver.quit()
        except WebDriverException as e:
            logger.warning(f"Browser did not shut down cleanly: {e}")

    def build_command(self, url: str, port: int) -> List[str]:
        return [
            self.lighthouse_bin,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            "--quiet",
            f"--only-categories={','.join(self.categories)}",
        ]

    async def run_lighthouse(self, url: str, port: int) -> Report:
        command = self.build_command(url, port)
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise AuditExecutionError(f"Lighthouse CLI not found: {self.lighthouse_bin}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await self.reap(proc)
            raise AuditExecutionError(f"Lighthouse timed out after {self.timeout}s") from e
        except BaseException:
            await self.reap(proc)
            raise

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip().splitlines()
            raise AuditExecutionError(
                f"Lighthouse exited with code {proc.returncode}: {detail[-1] if detail else 'no output'}"
            )

        return self.parse_output(stdout)

    @staticmethod
    async def reap(proc) -> None:
        if proc.returncode is not None:
            return
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()

    @staticmethod
    def parse_output(stdout: bytes) -> Report:
        try:
            lhr = json.loads(stdout)
        except ValueError as e:
            raise AuditExecutionError(f"Lighthouse produced invalid JSON: {e}") from e

        if not isinstance(lhr, dict):
            raise AuditExecutionError("Lighthouse produced an unexpected result")

        runtime_error = lhr.get("runtimeError")
        if runtime_error:
            raise AuditExecutionError(
                f"{runtime_error.get('code', 'RUNTIME_ERROR')}: {runtime_error.get('message', '')}"
            )

        return lhr
