"""Address bar parsing and link resolution."""

from urllib.parse import urljoin, urlparse

from .models import HOME_URL

FALLBACK_BASE = "https://example.com"


def hostname(url: str) -> str:
    """Hostname used as a site's default title."""
    if url == HOME_URL:
        return url
    return urlparse(url).hostname or url


def parse_address(text: str) -> tuple[str, str] | None:
    """Classify address bar input.

    Returns ("search", query), ("url", url) or None for empty input. Input
    without a dot, or containing a space, is treated as a search query.
    """
    value = text.strip()
    if not value:
        return None
    if value == HOME_URL:
        return ("url", HOME_URL)
    if "." not in value or " " in value:
        return ("search", value)
    if not value.startswith("http"):
        value = f"https://{value}"
    return ("url", value)


def resolve_href(current_url: str, href: str | None) -> str | None:
    """Resolve an in-page link against the current page.

    Returns None for links that go nowhere.
    """
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith("#") or href.lower().startswith("javascript:"):
        return None
    if href.startswith(("http://", "https://")):
        return href

    base = current_url if current_url.startswith(("http://", "https://")) else FALLBACK_BASE
    try:
        return urljoin(base, href)
    except ValueError:
        return f"{FALLBACK_BASE}/{href.lstrip('/')}"
