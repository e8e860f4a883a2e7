"""URL helpers shared by the classifier, the controller and the tab listing.

None of these raise on malformed input: a URL that cannot be parsed degrades
to "unknown" / no keywords / not-a-web-page.
"""

from __future__ import annotations

from urllib.parse import urlparse

UNKNOWN_DOMAIN = "unknown"

WEB_SCHEMES = ("http://", "https://")

# Browser-internal pages and non-network documents never get processed
SKIP_URL_PREFIXES = (
    "chrome://",
    "chrome-extension://",
    "moz-extension://",
    "about:",
    "data:",
    "javascript:",
    "file://",
)


def _hostname(url: str | None) -> str | None:
    if not url:
        return None
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    return hostname


def extract_domain(url: str | None) -> str:
    """Host name without a leading ``www.``; "unknown" when unparseable."""
    hostname = _hostname(url)
    if hostname is None:
        return UNKNOWN_DOMAIN
    return hostname.removeprefix("www.")


def extract_url_keywords(url: str | None) -> list[str]:
    """First domain label plus path segments longer than 2 characters.

    >>> extract_url_keywords("https://www.github.com/psf/requests")
    ['github', 'psf', 'requests']
    """
    hostname = _hostname(url)
    if hostname is None:
        return []
    domain = hostname.removeprefix("www.")
    path = urlparse(url).path
    path_keywords = [segment.lower() for segment in path.split("/") if len(segment) > 2]
    return [domain.split(".")[0], *path_keywords]


def is_web_url(url: str | None) -> bool:
    return bool(url) and url.startswith(WEB_SCHEMES)


def is_processable_url(url: str | None) -> bool:
    """http(s) and not on the internal-page skip list."""
    if not is_web_url(url):
        return False
    return not url.startswith(SKIP_URL_PREFIXES)
