"""
Test configuration and fixtures for the Site Report API.

The real executor launches Chrome and Lighthouse, so every test runs against
``FakeExecutor``: it records calls, tracks how many audits overlap, and can be
told to fail or to block on a gate until the test releases it.
"""

import asyncio
from typing import Dict, Generator, Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from app.main import create_app


def make_report(url: str, performance: float = 0.92) -> dict:
    """A trimmed-down Lighthouse result."""
    return {
        "lighthouseVersion": "12.0.0",
        "requestedUrl": url,
        "finalDisplayedUrl": url,
        "fetchTime": "2026-10-18T10:00:00.000Z",
        "categories": {
            "performance": {"title": "Performance", "score": performance},
            "accessibility": {"title": "Accessibility", "score": 0.87},
            "best-practices": {"title": "Best Practices", "score": 1},
            "seo": {"title": "SEO", "score": 0.45},
        },
        "audits": {
            "first-contentful-paint": {
                "title": "First Contentful Paint",
                "score": 0.98,
                "scoreDisplayMode": "numeric",
                "displayValue": "0.8 s",
            },
            "largest-contentful-paint": {
                "title": "Largest Contentful Paint",
                "score": 0.61,
                "scoreDisplayMode": "numeric",
                "displayValue": "3.1 s",
            },
            "image-alt": {
                "title": "Image elements do not have [alt] attributes",
                "score": 0,
                "scoreDisplayMode": "binary",
            },
            "meta-description": {
                "title": "Document does not have a meta description",
                "score": 0,
                "scoreDisplayMode": "binary",
            },
            "font-size": {
                "title": "Document uses legible font sizes",
                "score": 1,
                "scoreDisplayMode": "binary",
            },
            "diagnostics": {
                "title": "Diagnostics",
                "score": None,
                "scoreDisplayMode": "informative",
            },
        },
    }


class FakeExecutor:
    def __init__(self, fail_for: Iterable[str] = (), delay: float = 0.0):
        self.calls = []
        self.fail_for = set(fail_for)
        self.delay = delay
        self.gates: Dict[str, asyncio.Event] = {}
        self.active = 0
        self.max_active = 0

    def hold(self, url: str) -> asyncio.Event:
        """Block the audit of ``url`` until the returned event is set."""
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate

    async def execute(self, url: str) -> dict:
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            gate: Optional[asyncio.Event] = self.gates.get(url)
            if gate is not None:
                await gate.wait()
            await asyncio.sleep(self.delay)
            if url in self.fail_for:
                raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
            return make_report(url)
        finally:
            self.active -= 1


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def test_app(fake_executor):
    """FastAPI application wired to the fake executor."""
    return create_app(executor=fake_executor)


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    TestClient used as a context manager so the lifespan builds the
    report service and mailing list, and one event loop serves every
    request of the test.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
def report_factory():
    return make_report


@pytest.fixture
def executor_factory():
    return FakeExecutor
