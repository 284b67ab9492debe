# brandscan/extract/__init__.py
from __future__ import annotations

from .fields import ExtractedFields, extract_fields
from .logos import add_fallback_candidates, find_logo_candidates
from .vocab import DEFAULT_VOCABULARY, Vocabulary

"""
Pure HTML → signals extraction (no network).

Public API:
- extract_fields(html: str, origin: str) -> ExtractedFields
- find_logo_candidates(html: str, origin: str) -> list[str]
- add_fallback_candidates(found, company_name, origin) -> list[str]
- Vocabulary / DEFAULT_VOCABULARY: injectable keyword, color and path tables
"""

__all__ = [
    "DEFAULT_VOCABULARY",
    "ExtractedFields",
    "Vocabulary",
    "add_fallback_candidates",
    "extract_fields",
    "find_logo_candidates",
]
