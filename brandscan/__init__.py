# brandscan/__init__.py
from __future__ import annotations

from .exceptions import BrandExtractionError, FetchFailedError, InvalidURLError
from .pipeline import extract_brand
from .resolve.profile import BrandProfile

"""
brandscan: derive a brand profile from a company website.

Public API:
- extract_brand(url: str) -> BrandProfile
- BrandProfile.to_dict() -> JSON-ready dict
- InvalidURLError / FetchFailedError: the only errors extract_brand raises
"""

__all__ = [
    "BrandExtractionError",
    "BrandProfile",
    "FetchFailedError",
    "InvalidURLError",
    "extract_brand",
]

__version__ = "0.1.0"
