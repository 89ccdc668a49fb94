from app.features.reports.utils.report_parser import (
    extract_categories,
    extract_failed_audits,
    extract_metrics,
    get_rating,
    summarize_report,
    to_score,
)


def test_to_score_and_rating():
    assert to_score(None) is None
    assert to_score(0.924) == 92
    assert get_rating(None) == "n/a"
    assert get_rating(95) == "good"
    assert get_rating(50) == "needs improvement"
    assert get_rating(49) == "poor"


def test_categories_in_lighthouse_order(report_factory):
    categories = extract_categories(report_factory("https://example.com"))

    assert [c["key"] for c in categories] == ["performance", "accessibility", "best-practices", "seo"]
    assert categories[0] == {"key": "performance", "title": "Performance", "score": 92, "rating": "good"}
    assert categories[3]["rating"] == "poor"


def test_metrics_skip_missing_audits(report_factory):
    metrics = extract_metrics(report_factory("https://example.com"))

    assert [m["id"] for m in metrics] == ["first-contentful-paint", "largest-contentful-paint"]
    assert metrics[1]["display_value"] == "3.1 s"


def test_failed_audits_ignore_passing_and_informative(report_factory):
    failed = extract_failed_audits(report_factory("https://example.com"))

    ids = [a["id"] for a in failed]
    assert "font-size" not in ids
    assert "diagnostics" not in ids
    assert "first-contentful-paint" not in ids
    assert ids[-1] == "largest-contentful-paint"
    assert set(ids[:2]) == {"image-alt", "meta-description"}


def test_summarize_empty_report():
    summary = summarize_report("https://example.com", {})

    assert summary["final_url"] == "https://example.com"
    assert summary["categories"] == []
    assert summary["metrics"] == []
    assert summary["failed_audits"] == []
