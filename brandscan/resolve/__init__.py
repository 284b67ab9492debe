# brandscan/resolve/__init__.py
from __future__ import annotations

from .profile import (
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    BrandProfile,
    resolve_profile,
    select_colors,
)

"""
Resolve package

  - `profile` merges heuristic fields, ranked logo candidates and the
    optional AI suggestion into the final BrandProfile.
"""

__all__ = [
    "BrandProfile",
    "DEFAULT_PRIMARY_COLOR",
    "DEFAULT_SECONDARY_COLOR",
    "resolve_profile",
    "select_colors",
]
