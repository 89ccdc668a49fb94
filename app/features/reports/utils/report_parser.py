from typing import Any, Dict, List, Optional

CATEGORY_ORDER = ["performance", "accessibility", "best-practices", "seo", "pwa"]

KEY_METRICS = [
    ("first-contentful-paint", "First Contentful Paint"),
    ("largest-contentful-paint", "Largest Contentful Paint"),
    ("total-blocking-time", "Total Blocking Time"),
    ("cumulative-layout-shift", "Cumulative Layout Shift"),
    ("speed-index", "Speed Index"),
    ("interactive", "Time to Interactive"),
]


def to_score(raw: Optional[float]) -> Optional[int]:
    """Lighthouse scores are 0..1 (or null when not applicable)."""
    if raw is None:
        return None
    return int(round(raw * 100))


def get_rating(score: Optional[int]) -> str:
    """Lighthouse colour bands."""
    if score is None:
        return "n/a"
    if score >= 90:
        return "good"
    elif score >= 50:
        return "needs improvement"
    else:
        return "poor"


def extract_categories(report: Dict[str, Any]) -> List[Dict[str, Any]]:
    categories = report.get("categories") or {}
    ordered = [key for key in CATEGORY_ORDER if key in categories]
    ordered += [key for key in categories if key not in ordered]

    result = []
    for key in ordered:
        category = categories[key] or {}
        score = to_score(category.get("score"))
        result.append({
            "key": key,
            "title": category.get("title", key),
            "score": score,
            "rating": get_rating(score),
        })
    return result


def extract_metrics(report: Dict[str, Any]) -> List[Dict[str, Any]]:
    audits = report.get("audits") or {}
    metrics = []
    for audit_id, label in KEY_METRICS:
        audit = audits.get(audit_id)
        if not audit:
            continue
        metrics.append({
            "id": audit_id,
            "title": label,
            "display_value": audit.get("displayValue", ""),
            "score": to_score(audit.get("score")),
        })
    return metrics


def extract_failed_audits(report: Dict[str, Any], limit: int = 15) -> List[Dict[str, Any]]:
    """Scored audits below 0.9, worst first."""
    audits = report.get("audits") or {}
    failed = []
    for audit_id, audit in audits.items():
        mode = audit.get("scoreDisplayMode")
        score = audit.get("score")
        if mode in ("notApplicable", "manual", "informative") or score is None:
            continue
        if score >= 0.9:
            continue
        failed.append({
            "id": audit_id,
            "title": audit.get("title", audit_id),
            "score": to_score(score),
            "display_value": audit.get("displayValue", ""),
        })

    failed.sort(key=lambda item: item["score"])
    return failed[:limit]


def summarize_report(url: str, report: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a Lighthouse result into what the PDF and the email render."""
    return {
        "url": url,
        "final_url": report.get("finalDisplayedUrl") or report.get("finalUrl") or url,
        "fetch_time": report.get("fetchTime", ""),
        "lighthouse_version": report.get("lighthouseVersion", ""),
        "categories": extract_categories(report),
        "metrics": extract_metrics(report),
        "failed_audits": extract_failed_audits(report),
    }
