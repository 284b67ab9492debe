"""
HTML field extractor (pattern matching, no DOM).

Given raw HTML and the resolved origin, pull best-effort brand signals:
  - <title>, meta description, og:title / og:description
  - a cleaned company name
  - up to 10 color tokens (hex normalized to #rrggbb, neutrals dropped)
  - up to 4 keywords
  - up to 5 font families
  - a heuristic industry label
  - markup-derived logo candidate URLs

Every string returned here comes from untrusted markup. Nothing in this module
raises on odd input; a page with no usable markup yields empty fields.
"""

# brandscan/extract/fields.py
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from html import unescape

from .logos import find_logo_candidates
from .vocab import DEFAULT_VOCABULARY, Vocabulary

log = logging.getLogger(__name__)

MAX_COLORS = 10
MAX_KEYWORDS = 4
MIN_KEYWORDS = 3
MAX_META_KEYWORDS = 3
MAX_FONTS = 5

# --- Public data model -------------------------------------------------------


@dataclass
class ExtractedFields:
    """
    Heuristic signals extracted from one HTML page.

    Fields:
      - title / description / og_title / og_description: raw tag values (unescaped)
      - company_name: og:title or <title> with suffixes and generic words removed
      - colors: color tokens in discovery order; hex is always "#rrggbb" lowercase
      - keywords: <= 4 lowercase keywords, no duplicates
      - fonts: <= 5 font family names
      - industry: label inferred from the description vocabulary
      - logo_candidates: absolute URLs found in markup (no fallbacks yet)
    """

    title: str = ""
    description: str = ""
    og_title: str = ""
    og_description: str = ""
    company_name: str = ""
    colors: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    fonts: list[str] = field(default_factory=list)
    industry: str = ""
    logo_candidates: list[str] = field(default_factory=list)

    @property
    def best_description(self) -> str:
        return self.og_description or self.description


# --- Heuristics & regexes ----------------------------------------------------

_TITLE_RE = re.compile(r"<title\b[^>]*>([^<]+)</title>", re.IGNORECASE)
_H1_RE = re.compile(r"<h1\b[^>]*>([\s\S]*?)</h1>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

# Quoted attribute value honouring the opening quote, so content="Acme's" survives
_QUOTED = r"""(?P<q>["'])(?P<v>[\s\S]*?)(?P=q)"""

_STYLE_BLOCK_RE = re.compile(r"<style\b[^>]*>([\s\S]*?)</style>", re.IGNORECASE)
_STYLE_ATTR_RE = re.compile(rf"\bstyle={_QUOTED}", re.IGNORECASE)

# "&#038;" is an entity, not a color: no '&' or word char right before '#'
_HEX = r"(?<![&\w])#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b"
_HEX_RE = re.compile(_HEX)
_COLOR_TOKEN_RE = re.compile(
    rf"{_HEX}|rgba?\([^)]*\)|hsla?\([^)]*\)|var\(--[^)]+\)",
    re.IGNORECASE,
)
_CSS_VAR_COLOR_RE = re.compile(r"--[\w-]+\s*:\s*(#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3}))\b")
_RGB_RE = re.compile(
    r"rgba?\(\s*(\d{1,3})\s*[,\s]\s*(\d{1,3})\s*[,\s]\s*(\d{1,3})\s*(?:[,/]\s*([\d.]+)(%?)\s*)?\)",
    re.IGNORECASE,
)

_TITLE_SEP_RE = re.compile(r"\s+[-–—|]\s+|\s*\|\s*")

_FONT_FAMILY_RE = re.compile(r"font-family\s*:\s*([^;}]+)", re.IGNORECASE)
_GOOGLE_FONTS_RE = re.compile(r"fonts\.googleapis\.com/css2?\?([^\"'>\s]+)", re.IGNORECASE)
_GOOGLE_FAMILY_RE = re.compile(r"family=([^&:;]+)")


def _clean_text(s: str | None) -> str:
    return _WS_RE.sub(" ", unescape(s or "")).strip()


def meta_content(html: str, key: str, *, attr: str = "name") -> str:
    """
    Value of <meta {attr}="{key}" content="...">, either attribute order.
    Returns "" when absent or blank.
    """
    k = re.escape(key)
    for rx in (
        rf"<meta\b[^>]*\b{attr}=[\"']{k}[\"'][^>]*\bcontent={_QUOTED}",
        rf"<meta\b[^>]*\bcontent={_QUOTED}[^>]*\b{attr}=[\"']{k}[\"']",
    ):
        m = re.search(rx, html, re.IGNORECASE)
        if m:
            value = _clean_text(m.group("v"))
            if value:
                return value
    return ""


def _term_re(term: str) -> re.Pattern[str]:
    # Whole word, allowing simple inflections: solution(s), build(s), manage(d)
    return re.compile(rf"\b{re.escape(term)}(?:s|es|d|ed|ing)?\b")


# --- Company name ------------------------------------------------------------


def derive_company_name(
    og_title: str,
    title: str,
    *,
    generic_words: Sequence[str] = DEFAULT_VOCABULARY.generic_title_words,
) -> str:
    """
    Prefer og:title over <title>; drop " - ..." / " | ..." suffixes and
    generic homepage words.

    "Acme Corp - Home"    -> "Acme Corp"
    "Home | Acme"         -> "Acme"
    "Welcome"             -> ""
    """
    raw = _clean_text(og_title or title)
    if not raw:
        return ""

    generic_rx = re.compile(
        r"\b(?:" + "|".join(re.escape(w) for w in generic_words) + r")\b",
        re.IGNORECASE,
    )
    for segment in _TITLE_SEP_RE.split(raw):
        cleaned = _WS_RE.sub(" ", generic_rx.sub(" ", segment)).strip(" -|,:")
        if cleaned:
            return cleaned
    return ""


# --- Colors ------------------------------------------------------------------


def normalize_color(token: str) -> str:
    """
    "#ABC"                 -> "#aabbcc"
    "rgb(139, 92, 246)"    -> "#8b5cf6"
    "rgba(0,0,0,0.5)"      -> "rgba(0,0,0,0.5)"   (translucent: kept as written)
    "var(--brand)"         -> "var(--brand)"
    """
    t = _WS_RE.sub(" ", token.strip())
    low = t.lower()
    if _HEX_RE.fullmatch(t):
        h = low[1:]
        if len(h) == 3:
            h = "".join(c * 2 for c in h)
        return f"#{h}"

    m = _RGB_RE.fullmatch(t)
    if m:
        r, g, b = (int(m.group(i)) for i in (1, 2, 3))
        alpha_raw, pct = m.group(4), m.group(5)
        opaque = True
        if alpha_raw is not None:
            try:
                alpha = float(alpha_raw) / (100.0 if pct else 1.0)
            except ValueError:
                alpha = 0.0
            opaque = alpha >= 1.0
        if opaque and max(r, g, b) <= 255:
            return f"#{r:02x}{g:02x}{b:02x}"
    return low


def extract_colors(
    html: str,
    *,
    generic_colors: Iterable[str] = DEFAULT_VOCABULARY.generic_colors,
    limit: int = MAX_COLORS,
) -> list[str]:
    """
    Color tokens from <style> blocks, style="" attributes, bare hex anywhere in
    the markup, CSS custom properties and <meta name="theme-color">, in that
    order. Deduplicated case-insensitively after normalization; neutrals dropped.
    """
    raw_tokens: list[str] = []

    style_texts = [m.group(1) for m in _STYLE_BLOCK_RE.finditer(html)]
    style_texts += [m.group("v") for m in _STYLE_ATTR_RE.finditer(html)]
    for block in style_texts:
        raw_tokens.extend(m.group(0) for m in _COLOR_TOKEN_RE.finditer(block))

    raw_tokens.extend(m.group(0) for m in _HEX_RE.finditer(html))
    raw_tokens.extend(m.group(1) for m in _CSS_VAR_COLOR_RE.finditer(html))

    theme = meta_content(html, "theme-color")
    if theme.startswith("#"):
        raw_tokens.append(theme)

    deny = {c.lower() for c in generic_colors}
    seen: set[str] = set()
    out: list[str] = []
    for tok in raw_tokens:
        color = normalize_color(tok)
        if color in seen or color in deny:
            continue
        seen.add(color)
        out.append(color)
        if len(out) >= limit:
            break
    return out


# --- Keywords ----------------------------------------------------------------


def extract_keywords(
    html: str,
    company_name: str,
    *,
    vocab: Vocabulary = DEFAULT_VOCABULARY,
) -> list[str]:
    """
    Layered keyword sources, stopping at 4:
      (a) <meta name="keywords"> (first 3 entries)
      (b) business vocabulary found in the meta description
      (c) action verbs in <title> + first <h1>, company name removed
    When fewer than 3 were found, padded from the static fallback list up to 4.
    """
    keywords: list[str] = []

    def _add(word: str) -> bool:
        w = word.strip().lower()
        if w and w not in keywords:
            keywords.append(w)
        return len(keywords) >= MAX_KEYWORDS

    meta_kw = meta_content(html, "keywords")
    if meta_kw:
        for kw in [k for k in meta_kw.split(",") if k.strip()][:MAX_META_KEYWORDS]:
            _add(kw)

    description = meta_content(html, "description").lower()
    if description and len(keywords) < MAX_KEYWORDS:
        for term in vocab.business_keywords:
            if _term_re(term).search(description) and _add(term):
                break

    if len(keywords) < MAX_KEYWORDS:
        title_m = _TITLE_RE.search(html)
        h1_m = _H1_RE.search(html)
        title_text = _clean_text(title_m.group(1) if title_m else "")
        h1_text = _clean_text(_TAG_RE.sub(" ", h1_m.group(1)) if h1_m else "")
        text = f"{title_text} {h1_text}".lower()
        if company_name:
            # Keep "Build Co" from turning into the keyword "build"
            text = text.replace(company_name.lower(), " ")
        for term in vocab.action_keywords:
            if _term_re(term).search(text) and _add(term):
                break

    if len(keywords) < MIN_KEYWORDS:
        for term in vocab.fallback_keywords:
            if _add(term):
                break

    return keywords[:MAX_KEYWORDS]


# --- Fonts / industry --------------------------------------------------------


def extract_fonts(
    html: str,
    *,
    generic_families: Iterable[str] = DEFAULT_VOCABULARY.generic_font_families,
    limit: int = MAX_FONTS,
) -> list[str]:
    """Google Fonts families first, then font-family declarations; generics removed."""
    generic = {g.lower() for g in generic_families}
    names: list[str] = []

    for m in _GOOGLE_FONTS_RE.finditer(html):
        query = unescape(m.group(1))
        for fam in _GOOGLE_FAMILY_RE.findall(query):
            names.extend(f.replace("+", " ") for f in fam.split("|"))

    style_texts = [m.group(1) for m in _STYLE_BLOCK_RE.finditer(html)]
    style_texts += [m.group("v") for m in _STYLE_ATTR_RE.finditer(html)]
    for block in style_texts:
        for decl in _FONT_FAMILY_RE.findall(block):
            decl = decl.replace("!important", "")
            names.extend(decl.split(","))

    out: list[str] = []
    seen: set[str] = set()
    for name in names:
        n = _WS_RE.sub(" ", unescape(name)).strip().strip("'\"").strip()
        key = n.lower()
        if not n or key in generic or key in seen or key.startswith("var("):
            continue
        seen.add(key)
        out.append(n)
        if len(out) >= limit:
            break
    return out


def infer_industry(description: str, *, vocab: Vocabulary = DEFAULT_VOCABULARY) -> str:
    text = (description or "").lower()
    for term in vocab.business_keywords:
        label = vocab.industry_by_keyword.get(term)
        if label and _term_re(term).search(text):
            return label
    return vocab.default_industry


# --- Public API --------------------------------------------------------------


def extract_fields(
    html: str,
    origin: str,
    *,
    vocab: Vocabulary = DEFAULT_VOCABULARY,
) -> ExtractedFields:
    """
    Pure HTML → ExtractedFields. No network, never raises on bad markup.
    """
    html = html or ""
    title_m = _TITLE_RE.search(html)
    title = _clean_text(title_m.group(1)) if title_m else ""
    description = meta_content(html, "description")
    og_title = meta_content(html, "og:title", attr="property")
    og_description = meta_content(html, "og:description", attr="property")

    company_name = derive_company_name(
        og_title, title, generic_words=vocab.generic_title_words
    )

    fields = ExtractedFields(
        title=title,
        description=description,
        og_title=og_title,
        og_description=og_description,
        company_name=company_name,
        colors=extract_colors(html, generic_colors=vocab.generic_colors),
        keywords=extract_keywords(html, company_name, vocab=vocab),
        fonts=extract_fonts(html, generic_families=vocab.generic_font_families),
        industry=infer_industry(og_description or description, vocab=vocab),
        logo_candidates=find_logo_candidates(html, origin),
    )
    log.debug(
        "extracted fields: name=%r colors=%d keywords=%r logos=%d",
        fields.company_name,
        len(fields.colors),
        fields.keywords,
        len(fields.logo_candidates),
    )
    return fields


__all__ = [
    "ExtractedFields",
    "extract_fields",
    "derive_company_name",
    "normalize_color",
    "extract_colors",
    "extract_keywords",
    "extract_fonts",
    "infer_industry",
    "meta_content",
]
