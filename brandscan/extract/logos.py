"""
Logo candidate discovery.

Two pure stages, no network:

  find_logo_candidates(html, origin)
      Runs an ordered battery of regexes over raw markup (favicons, <img>
      tagged logo/brand, header/nav images, named logo containers, logo-ish
      filenames, og:image, any .svg reference, CMS/schema.org conventions)
      and returns absolute URLs in discovery order, deduplicated by exact
      string.

  add_fallback_candidates(found, company_name, origin)
      Appends conventional logo paths (/logo.svg, /assets/logo.png, ...)
      plus company-name and domain-label slugs, skipping anything already
      found. Order is preserved, so markup-derived candidates win score ties.
"""

# brandscan/extract/logos.py
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from html import unescape
from urllib.parse import urljoin, urlsplit

import tldextract

from .vocab import FALLBACK_LOGO_PATHS

log = logging.getLogger(__name__)

# Public Suffix handling: use bundled snapshot only (no network fetch)
_EXTRACT = tldextract.TLDExtract(cache_dir=False, suffix_list_urls=())

_SKIP_PREFIXES: tuple[str, ...] = ("data:", "javascript:", "mailto:", "tel:", "blob:", "about:")

# --- Pattern battery ---------------------------------------------------------

_SRC = r"""\bsrc=["']([^"']+)["']"""
# Max markup between an opening container tag and the <img> it owns
_NEAR = r"[\s\S]{0,2000}?"
_HREF = r"""\bhref=["']([^"']+)["']"""


def _tagged(word: str) -> str:
    """class/alt/id attribute whose value mentions `word`."""
    return rf"""\b(?:class|alt|id)=["'][^"']*{word}[^"']*["']"""


def _container(tag: str, word: str) -> str:
    """First <img> after a <tag> whose class/id mentions `word`."""
    return rf"""<{tag}\b[^>]*\b(?:class|id)=["'][^"']*{word}[^"']*["']{_NEAR}<img\b[^>]*?{_SRC}"""


def _within(tag: str) -> str:
    """First <img> inside a <tag>...</tag> element."""
    return rf"""<{tag}\b[^>]*>(?:(?!</{tag}>)[\s\S])*?<img\b[^>]*?{_SRC}"""


_ICON_REL = r"""\brel=["'](?:shortcut\s+)?icon["']"""
_TOUCH_REL = r"""\brel=["']apple-touch-icon(?:-precomposed)?["']"""
_OG_IMAGE = r"""\bproperty=["']og:image(?::url)?["']"""
_CONTENT = r"""\bcontent=["']([^"']+)["']"""

LOGO_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (name, re.compile(rx, re.IGNORECASE))
    for name, rx in (
        # Favicons / touch icons
        ("link_icon", rf"<link\b[^>]*{_ICON_REL}[^>]*{_HREF}"),
        ("link_icon_rev", rf"<link\b[^>]*{_HREF}[^>]*{_ICON_REL}"),
        ("apple_touch_icon", rf"<link\b[^>]*{_TOUCH_REL}[^>]*{_HREF}"),
        ("apple_touch_icon_rev", rf"<link\b[^>]*{_HREF}[^>]*{_TOUCH_REL}"),
        # <img> explicitly tagged logo / brand
        ("img_logo_attr", rf"<img\b[^>]*{_tagged('logo')}[^>]*{_SRC}"),
        ("img_logo_attr_rev", rf"<img\b[^>]*{_SRC}[^>]*{_tagged('logo')}"),
        ("img_brand_attr", rf"<img\b[^>]*{_tagged('brand')}[^>]*{_SRC}"),
        ("img_brand_attr_rev", rf"<img\b[^>]*{_SRC}[^>]*{_tagged('brand')}"),
        # Header / nav containers
        ("header_img", _within("header")),
        ("header_div_img", _container("div", "header")),
        ("nav_img", _within("nav")),
        ("nav_div_img", _container("div", "nav")),
        # Named logo containers
        (
            "named_container_img",
            _container("(?:div|a|span)", "(?:site-logo|site-brand|brand-logo|company-logo)"),
        ),
        # Logo-ish filenames anywhere
        ("img_logo_filename", rf"""<img\b[^>]*\bsrc=["']([^"']*(?:logo|brand|header|identity)[^"']*)["']"""),
        # Open Graph image
        ("og_image", rf"<meta\b[^>]*{_OG_IMAGE}[^>]*{_CONTENT}"),
        ("og_image_rev", rf"<meta\b[^>]*{_CONTENT}[^>]*{_OG_IMAGE}"),
        # Icon SVGs referenced from link/meta
        ("link_icon_svg", r"""<link\b[^>]*\bhref=["']([^"']*icon[^"']*\.svg[^"']*)["']"""),
        ("meta_icon_svg", r"""<meta\b[^>]*\bcontent=["']([^"']*icon[^"']*\.svg[^"']*)["']"""),
        # Any SVG reference
        ("any_svg", r"""\b(?:href|src)=["']([^"']*\.svg[^"']*)["']"""),
        # <picture> sources for logo/brand
        ("picture_logo", rf"""<picture\b{_NEAR}<img\b[^>]*\bsrc=["']([^"']*(?:logo|brand)[^"']*)["']"""),
        # WordPress
        (
            "wordpress_logo",
            rf"""<img\b[^>]*\bclass=["'][^"']*(?:custom-logo|wp-image)[^"']*["'][^>]*{_SRC}""",
        ),
        # schema.org
        ("itemprop_logo", rf"""<img\b[^>]*\bitemprop=["']logo["'][^>]*{_SRC}"""),
        (
            "schema_organization_img",
            rf"""<div\b[^>]*\bitemtype=["'][^"']*Organization[^"']*["']{_NEAR}<img\b[^>]*?{_SRC}""",
        ),
    )
)


# --- URL helpers -------------------------------------------------------------


def absolutize(raw: str, origin: str) -> str | None:
    """
    Resolve an attribute value against the page origin.

    Returns None for values that can never be an image URL
    (data:, javascript:, fragments, empty) and for values urllib refuses
    to parse (e.g. an unbalanced "[" in the host).
    """
    u = unescape(raw or "").strip()
    if not u or u.startswith("#"):
        return None
    low = u.lower()
    if low.startswith(_SKIP_PREFIXES):
        return None
    try:
        if u.startswith("//"):
            return f"{urlsplit(origin).scheme}:{u}"
        if low.startswith(("http://", "https://")):
            return u
        return urljoin(origin.rstrip("/") + "/", u)
    except ValueError:
        log.debug("unparseable logo reference skipped: %r", u)
        return None


def _dedup(urls: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for u in urls:
        if u in seen:
            continue
        seen.add(u)
        out.append(u)
    return out


# --- Public API --------------------------------------------------------------


def find_logo_candidates(
    html: str,
    origin: str,
    *,
    patterns: Sequence[tuple[str, re.Pattern[str]]] = LOGO_PATTERNS,
) -> list[str]:
    """Markup-derived logo URLs, absolute, in discovery order, no duplicates."""
    found: list[str] = []
    for name, rx in patterns:
        for m in rx.finditer(html or ""):
            url = absolutize(m.group(1), origin)
            if url:
                log.debug("logo candidate via %s: %s", name, url)
                found.append(url)
    return _dedup(found)


def _slug_source(company_name: str) -> str:
    s = re.sub(r"[^a-z0-9\s_-]+", "", (company_name or "").lower())
    return re.sub(r"\s+", " ", s).strip()


def company_logo_paths(company_name: str) -> list[str]:
    """
    Filename guesses from the company name.
    e.g. "Acme Corp" -> /acme-corp-logo.png, /acmecorp-logo.png, /acme_corp_logo.png
    """
    name = _slug_source(company_name)
    if not name:
        return []
    return [
        f"/{name.replace(' ', '-')}-logo.png",
        f"/{name.replace(' ', '')}-logo.png",
        f"/{name.replace(' ', '_')}_logo.png",
    ]


def domain_logo_paths(origin: str) -> list[str]:
    """Filename guesses from the registrable domain label (blog.acme.co.uk -> acme)."""
    host = urlsplit(origin).hostname or ""
    if not host:
        return []
    ext = _EXTRACT(host)
    # No public suffix: IP literal, localhost, intranet name
    if not ext.suffix or not ext.domain:
        return []
    label = ext.domain.lower()
    return [f"/{label}-logo.svg", f"/{label}-logo.png"]


def add_fallback_candidates(
    found: Sequence[str],
    company_name: str,
    origin: str,
    *,
    fallback_paths: Sequence[str] = FALLBACK_LOGO_PATHS,
) -> list[str]:
    """
    Append conventional logo locations to `found`, deduplicated against it.
    Pure and deterministic; never performs I/O.
    """
    base = origin.rstrip("/")
    extra = [
        f"{base}{path}"
        for path in (
            *fallback_paths,
            *company_logo_paths(company_name),
            *domain_logo_paths(origin),
        )
    ]
    out = _dedup([*found, *extra])
    log.info("logo candidates: %d from markup, %d total", len(found), len(out))
    return out


__all__ = [
    "LOGO_PATTERNS",
    "absolutize",
    "find_logo_candidates",
    "company_logo_paths",
    "domain_logo_paths",
    "add_fallback_candidates",
]
