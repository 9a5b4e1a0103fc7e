"""
Utility functions for the deep search agent.
"""

from urllib.parse import urlparse

from .types import CrawlResult

# Domains that are never crawled
BLOCKED_DOMAINS = [
    # Anonymous calls to the jina reader get rate limited quickly, and models
    # tend to fall back to it whenever a site blocks them.
    "r.jina.ai",
]


def is_valid_url(url: str) -> bool:
    """Check if URL format is valid."""
    if not url.startswith(("http://", "https://")):
        return False
    try:
        return bool(urlparse(url).hostname)
    except ValueError:
        # urlparse rejects malformed netlocs such as an unclosed IPv6 bracket
        return False


def is_url_blocked(url: str) -> bool:
    """
    Check if a URL should be blocked from crawling.

    Args:
        url: The URL to check

    Returns:
        True if the URL's host is, or is a subdomain of, a blocked domain
    """
    host = (urlparse(url).hostname or "").lower()
    return any(
        host == domain or host.endswith(f".{domain}") for domain in BLOCKED_DOMAINS
    )


def crawl_error(error: str) -> CrawlResult:
    """Create a standardized failed crawl result."""
    return {"success": False, "error": error}
