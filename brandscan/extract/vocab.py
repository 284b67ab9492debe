"""
Static vocabulary and denylist tables used by the field extractor and the
candidate normalizer.

These are tuning data, not behaviour: extractors take them bundled in a
Vocabulary defaulting to the tables below, so tests and callers can swap
them without touching the matching code. Tuple order is significant where
a table is scanned in order (first matches win once the keyword cap is hit).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

# Neutral chrome colors (normalized #rrggbb) that never count as brand colors.
GENERIC_COLORS: frozenset[str] = frozenset(
    {
        "#ffffff",
        "#000000",
        "#f8f9fa",
        "#f5f5f5",
        "#f1f3f4",
        "#e9ecef",
        "#dee2e6",
        "#ced4da",
        "#adb5bd",
        "#6c757d",
        "#495057",
        "#343a40",
        "#212529",
        "#fafafa",
        "#eeeeee",
        "#dddddd",
        "#cccccc",
        "#999999",
        "#666666",
        "#333333",
        "#111111",
    }
)

# Matched against the meta description.
BUSINESS_KEYWORDS: tuple[str, ...] = (
    "software",
    "technology",
    "business",
    "service",
    "solution",
    "platform",
    "digital",
    "innovation",
    "development",
    "consulting",
    "marketing",
    "design",
    "web",
    "mobile",
    "app",
    "cloud",
    "data",
    "analytics",
    "ecommerce",
    "finance",
    "healthcare",
    "education",
    "entertainment",
    "media",
    "social",
    "security",
    "ai",
    "machine learning",
    "blockchain",
)

# Matched against <title> + first <h1>, company name removed first.
ACTION_KEYWORDS: tuple[str, ...] = (
    "create",
    "build",
    "develop",
    "design",
    "manage",
    "optimize",
    "analyze",
    "automate",
    "integrate",
    "transform",
    "innovate",
    "deliver",
    "provide",
    "enable",
    "empower",
    "streamline",
    "enhance",
    "accelerate",
)

# Padding when fewer than three keywords were found.
FALLBACK_KEYWORDS: tuple[str, ...] = ("professional", "quality", "reliable", "innovative")

# Stripped from titles when deriving the company name.
GENERIC_TITLE_WORDS: tuple[str, ...] = ("homepage", "home", "welcome")

# Business vocabulary -> industry label. First match (in BUSINESS_KEYWORDS order) wins.
INDUSTRY_BY_KEYWORD: dict[str, str] = {
    "healthcare": "Healthcare",
    "finance": "Finance",
    "education": "Education",
    "ecommerce": "E-commerce",
    "entertainment": "Entertainment",
    "media": "Media",
    "consulting": "Consulting",
    "marketing": "Marketing",
    "security": "Cybersecurity",
    "blockchain": "Blockchain",
}
DEFAULT_INDUSTRY = "Technology"

# CSS generic families and keywords that say nothing about a brand's typography.
GENERIC_FONT_FAMILIES: frozenset[str] = frozenset(
    {
        "serif",
        "sans-serif",
        "monospace",
        "cursive",
        "fantasy",
        "system-ui",
        "ui-sans-serif",
        "ui-serif",
        "ui-monospace",
        "ui-rounded",
        "-apple-system",
        "blinkmacsystemfont",
        "segoe ui",
        "helvetica",
        "helvetica neue",
        "arial",
        "inherit",
        "initial",
        "unset",
        "emoji",
        "math",
    }
)

# Conventional logo locations probed when the markup gives nothing better.
# SVG first: on a score tie, earlier wins.
FALLBACK_LOGO_PATHS: tuple[str, ...] = (
    "/icon.svg",
    "/logo.svg",
    "/logo.png",
    "/logo.jpg",
    "/logo.jpeg",
    "/logo.webp",
    "/Icon.svg",
    "/Logo.svg",
    "/Logo.png",
    "/Logo.jpg",
    "/assets/logo.svg",
    "/assets/logo.png",
    "/assets/images/logo.svg",
    "/assets/images/logo.png",
    "/images/logo.svg",
    "/images/logo.png",
    "/images/brand/logo.svg",
    "/images/brand/logo.png",
    "/static/logo.svg",
    "/static/logo.png",
    "/static/images/logo.svg",
    "/static/images/logo.png",
    "/img/logo.svg",
    "/img/logo.png",
    "/img/brand/logo.svg",
    "/img/brand/logo.png",
    "/media/logo.svg",
    "/media/logo.png",
    "/uploads/logo.svg",
    "/uploads/logo.png",
    "/content/logo.svg",
    "/content/logo.png",
    "/wp-content/uploads/logo.svg",
    "/wp-content/uploads/logo.png",
    "/dist/images/logo.svg",
    "/dist/images/logo.png",
    "/build/images/logo.svg",
    "/build/images/logo.png",
)


@dataclass(frozen=True)
class Vocabulary:
    """The tables above, bundled so a caller can inject a tuned set in one argument."""

    generic_colors: frozenset[str] = GENERIC_COLORS
    business_keywords: tuple[str, ...] = BUSINESS_KEYWORDS
    action_keywords: tuple[str, ...] = ACTION_KEYWORDS
    fallback_keywords: tuple[str, ...] = FALLBACK_KEYWORDS
    generic_title_words: tuple[str, ...] = GENERIC_TITLE_WORDS
    industry_by_keyword: Mapping[str, str] = field(
        default_factory=lambda: dict(INDUSTRY_BY_KEYWORD)
    )
    default_industry: str = DEFAULT_INDUSTRY
    generic_font_families: frozenset[str] = GENERIC_FONT_FAMILIES


DEFAULT_VOCABULARY = Vocabulary()


__all__ = [
    "GENERIC_COLORS",
    "BUSINESS_KEYWORDS",
    "ACTION_KEYWORDS",
    "FALLBACK_KEYWORDS",
    "GENERIC_TITLE_WORDS",
    "INDUSTRY_BY_KEYWORD",
    "DEFAULT_INDUSTRY",
    "GENERIC_FONT_FAMILIES",
    "FALLBACK_LOGO_PATHS",
    "Vocabulary",
    "DEFAULT_VOCABULARY",
]
