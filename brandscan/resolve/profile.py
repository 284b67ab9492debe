# brandscan/resolve/profile.py
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from brandscan.enhance.client import Enhancement
from brandscan.extract.fields import ExtractedFields
from brandscan.scoring.logo import LogoCandidate

DEFAULT_PRIMARY_COLOR = "#8b5cf6"
DEFAULT_SECONDARY_COLOR = "#06b6d4"
MAX_KEYWORDS = 4

_HEX6_RE = re.compile(r"^#[0-9a-f]{6}$")


@dataclass(frozen=True)
class BrandProfile:
    """
    Final, immutable result of one extraction.

    logo_url is either "" or an absolute http(s) URL. keywords has at most
    4 entries with no duplicates.
    """

    company_name: str
    description: str
    industry: str
    primary_color: str
    secondary_color: str
    logo_url: str
    fonts: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """JSON shape returned to callers (camelCase keys)."""
        return {
            "companyName": self.company_name,
            "description": self.description,
            "industry": self.industry,
            "primaryColor": self.primary_color,
            "secondaryColor": self.secondary_color,
            "logo": self.logo_url,
            "fonts": list(self.fonts),
            "keywords": list(self.keywords),
        }


def select_colors(colors: Sequence[str]) -> tuple[str, str]:
    """
    Heuristic primary/secondary from extracted tokens. Only #rrggbb tokens take
    part; rgba()/var() references can't be rendered as a swatch on their own.

      []                         -> defaults
      [a]                        -> (a, default secondary)
      [a, a, b]                  -> (a, b)
    """
    palette = [c for c in colors if _HEX6_RE.match(c)]
    if not palette:
        return DEFAULT_PRIMARY_COLOR, DEFAULT_SECONDARY_COLOR

    primary = palette[0]
    secondary = next((c for c in palette[1:] if c != primary), DEFAULT_SECONDARY_COLOR)
    return primary, secondary


def _dedup_keywords(words: Sequence[str]) -> tuple[str, ...]:
    out: list[str] = []
    for w in words:
        k = w.strip().lower()
        if k and k not in out:
            out.append(k)
    return tuple(out[:MAX_KEYWORDS])


def resolve_profile(
    fields: ExtractedFields,
    ranked: Sequence[LogoCandidate],
    enhancement: Enhancement | None = None,
) -> BrandProfile:
    """
    Merge heuristic signals with the (possibly empty) AI suggestion.

    Precedence:
      - logo: best probed candidate, else AI logo, else ""
      - colors: AI per field, else heuristic palette, else defaults
      - everything else: AI value when non-empty, else heuristic
    Never raises; always returns a complete profile.
    """
    ai = enhancement or Enhancement()
    primary, secondary = select_colors(fields.colors)

    if ranked:
        logo = ranked[0].url
    else:
        logo = ai.logo or ""

    return BrandProfile(
        company_name=ai.company_name or fields.company_name,
        description=ai.description or fields.best_description,
        industry=ai.industry or fields.industry,
        primary_color=ai.primary_color or primary,
        secondary_color=ai.secondary_color or secondary,
        logo_url=logo,
        fonts=tuple(ai.fonts or fields.fonts),
        keywords=_dedup_keywords(ai.keywords or fields.keywords),
    )


__all__ = [
    "BrandProfile",
    "DEFAULT_PRIMARY_COLOR",
    "DEFAULT_SECONDARY_COLOR",
    "resolve_profile",
    "select_colors",
]
