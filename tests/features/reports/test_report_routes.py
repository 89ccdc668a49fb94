import asyncio
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from app.features.reports.services.report_service import ReportService
from app.main import create_app

URL = "https://example.com"


def test_generate_report_end_to_end(client, fake_executor, report_factory):
    response = client.get("/generate-report", params={"url": URL})

    assert response.status_code == 200
    assert response.json() == report_factory(URL)
    assert fake_executor.calls == [URL]
    assert URL in client.app.state.report_service.cache

    again = client.get("/generate-report", params={"url": URL})

    assert again.status_code == 200
    assert again.json() == response.json()
    assert fake_executor.calls == [URL]


def test_generate_report_requires_url(client, fake_executor):
    response = client.get("/generate-report")

    assert response.status_code == 400
    payload = response.json()
    assert payload["status"] == "error"
    assert payload["message"] == "Please provide a URL as a query parameter."
    assert fake_executor.calls == []


def test_generate_report_rejects_empty_and_non_http_urls(client, fake_executor):
    assert client.get("/generate-report", params={"url": "  "}).status_code == 400
    assert client.get("/generate-report", params={"url": "ftp://example.com"}).status_code == 400
    assert fake_executor.calls == []


def test_generate_report_normalizes_missing_scheme(client, fake_executor):
    client.get("/generate-report", params={"url": "example.com"})
    client.get("/generate-report", params={"url": URL})

    assert fake_executor.calls == [URL]


def test_generate_report_failure_is_server_error(client, fake_executor):
    fake_executor.fail_for.add(URL)

    response = client.get("/generate-report", params={"url": URL})

    assert response.status_code == 500
    payload = response.json()
    assert payload["status"] == "error"
    assert payload["message"].startswith(f"Error generating the report for {URL}")
    assert payload["data"] == {"url": URL}
    assert URL not in client.app.state.report_service.cache

    fake_executor.fail_for.clear()
    assert client.get("/generate-report", params={"url": URL}).status_code == 200
    assert fake_executor.calls == [URL, URL]


def test_generate_report_refresh(client, fake_executor):
    client.get("/generate-report", params={"url": URL})
    response = client.get("/generate-report", params={"url": URL, "refresh": "true"})

    assert response.status_code == 200
    assert fake_executor.calls == [URL, URL]


def test_get_report_before_and_after_generation(client, report_factory):
    missing = client.get("/report", params={"url": URL})
    assert missing.status_code == 404
    assert missing.json()["data"] == {"url": URL}

    client.get("/generate-report", params={"url": URL})
    found = client.get("/report", params={"url": URL})

    assert found.status_code == 200
    assert found.json() == report_factory(URL)


def test_report_pdf(client):
    assert client.get("/report/pdf", params={"url": URL}).status_code == 404

    client.get("/generate-report", params={"url": URL})
    response = client.get("/report/pdf", params={"url": URL})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="report-example.com.pdf"' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_email_report_schedules_delivery(client, report_factory):
    client.get("/generate-report", params={"url": URL})

    with patch("app.features.reports.routes.reports.send_report_email") as mock_send:
        response = client.post("/report/email", json={"url": URL, "email": "owner@example.com"})

    assert response.status_code == 202
    payload = response.json()
    assert payload["message"] == "Report will be emailed shortly"
    assert payload["data"] == {"url": URL, "email": "owner@example.com"}
    mock_send.assert_called_once_with("owner@example.com", URL, report_factory(URL))


def test_email_report_requires_existing_report(client):
    with patch("app.features.reports.routes.reports.send_report_email") as mock_send:
        response = client.post("/report/email", json={"url": URL, "email": "owner@example.com"})

    assert response.status_code == 404
    mock_send.assert_not_called()


def test_email_report_validates_body(client):
    response = client.post("/report/email", json={"url": URL, "email": "not-an-email"})

    assert response.status_code == 422
    assert response.json()["message"] == "Validation failed"


@pytest.mark.asyncio
async def test_concurrent_http_requests_share_one_audit(executor_factory):
    executor = executor_factory(delay=0.02)
    app = create_app(executor=executor)
    app.state.report_service = ReportService(executor, coalesce=True)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        responses = await asyncio.wait_for(
            asyncio.gather(*(ac.get("/generate-report", params={"url": URL}) for _ in range(3))),
            timeout=5,
        )

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert executor.calls == [URL]
    assert executor.max_active == 1


@pytest.mark.asyncio
async def test_concurrent_http_requests_for_distinct_urls_are_serialized(executor_factory):
    executor = executor_factory(delay=0.01)
    app = create_app(executor=executor)
    app.state.report_service = ReportService(executor)
    urls = [f"https://site{i}.example.com" for i in range(4)]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        responses = await asyncio.wait_for(
            asyncio.gather(*(ac.get("/generate-report", params={"url": url}) for url in urls)),
            timeout=5,
        )

    assert [r.json()["requestedUrl"] for r in responses] == urls
    assert sorted(executor.calls) == sorted(urls)
    assert executor.max_active == 1
