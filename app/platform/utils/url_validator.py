from typing import Optional, Tuple
from urllib.parse import urlparse


def normalize_url(url: str) -> Tuple[str, bool]:
    """Prefix ``https://`` when no scheme is given. Returns (url, was_modified)."""
    url = url.strip()

    if "://" not in url:
        return f"https://{url}", True

    return url, False


def validate_url(url: Optional[str]) -> Tuple[bool, str, str]:
    """
    Returns (is_valid, normalized_url, error_message).

    The normalized URL is what reports are cached under, so
    ``example.com`` and ``https://example.com`` share one entry.
    """
    if not url or not url.strip():
        return False, "", "Please provide a URL as a query parameter."

    normalized_url, _ = normalize_url(url)

    try:
        parsed = urlparse(normalized_url)
    except ValueError as e:
        return False, normalized_url, f"URL parsing error: {str(e)}"

    if parsed.scheme not in ["http", "https"]:
        return False, normalized_url, f"Invalid URL scheme: {parsed.scheme} (must be http or https)"

    if not parsed.netloc:
        return False, normalized_url, "Invalid URL format: missing domain"

    return True, normalized_url, ""
