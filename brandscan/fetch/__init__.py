# brandscan/fetch/__init__.py
"""
Page fetcher: URL normalization, browser-like headers, https → http fallback.

Pipeline-facing API:
  - fetch_page(raw_url: str) -> FetchedPage

Other public entry points:
  - PageFetcher, FetchedPage
  - normalize_url, origin_of
"""

from .client import (
    BROWSER_HEADERS,
    FetchedPage,
    PageFetcher,
    fetch_page,
    normalize_url,
    origin_of,
)

__all__ = [
    "fetch_page",
    "PageFetcher",
    "FetchedPage",
    "BROWSER_HEADERS",
    "normalize_url",
    "origin_of",
]
