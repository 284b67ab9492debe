# brandscan/exceptions.py
"""
Shared exception classes used across the pipeline.

Only InvalidURLError and FetchFailedError ever escape extract_brand();
every other failure mode degrades to a best-effort profile.
"""

from __future__ import annotations


class BrandExtractionError(Exception):
    """Base class for errors reported to the caller of the pipeline."""

    code: str = "BRAND_EXTRACTION_ERROR"


class InvalidURLError(BrandExtractionError):
    """
    Raised when the input cannot be parsed as a URL, even after
    prefixing a default https:// scheme.

    Examples:
        - empty input
        - whitespace or illegal characters in the host
        - a non-http(s) scheme (ftp://, mailto:)
    """

    code = "INVALID_URL"


class FetchFailedError(BrandExtractionError):
    """
    Raised when the page could not be fetched.

    Either every attempted scheme failed at the network level, or the final
    response was not 2xx (status_code is set in that case).
    """

    code = "FETCH_FAILED"

    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class EnhancementError(Exception):
    """Internal to brandscan.enhance; never propagated past the client."""

    pass


__all__ = [
    "BrandExtractionError",
    "InvalidURLError",
    "FetchFailedError",
    "EnhancementError",
]
