"""
Logo prober & scorer.

Each candidate URL is probed with a HEAD request (no body transfer). Candidates
whose probe fails (transport error, non-2xx) are dropped: most are speculative
fallback paths, so a miss is expected and carries no penalty.

Surviving candidates get an additive, deterministic score from URL substrings,
file extension, probed content-type/size, directory and path shape. The
constants live in ScoringProfile and can be overridden from YAML
(docs/logo-scoring.yaml), see brandscan.config.load_logo_scoring_config.
"""

# brandscan/scoring/logo.py
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, fields, replace
from typing import Any
from urllib.parse import urlsplit

import httpx

from brandscan.config import ProbeConfig, settings

log = logging.getLogger(__name__)

_CONTENT_RANGE_TOTAL_RE = re.compile(r"/\s*(\d+)\s*$")
_ROOT_FILE_RE = re.compile(r"^https?://[^/]+/[^/]+\.(?:svg|png|webp|jpg)$")


# --- Data model --------------------------------------------------------------


@dataclass
class ProbeResult:
    ok: bool
    status: int | None = None
    content_type: str = ""
    content_length: int = 0
    error: str | None = None


@dataclass
class LogoCandidate:
    """A probed, scored logo URL. Lives only for the duration of one pipeline run."""

    url: str
    score: int = 0
    content_type: str = ""
    content_length: int = 0
    probed_ok: bool = False
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScoringProfile:
    """
    Additive logo scoring weights.

    The defaults were tuned by hand against real marketing sites; they are a
    starting point, not ground truth.
    """

    url_keywords: Mapping[str, int] = field(
        default_factory=lambda: {"logo": 15, "brand": 12, "identity": 10, "header": 8}
    )
    svg_icon_bonus: int = 12
    company_name_bonus: int = 20
    extensions: Mapping[str, int] = field(
        default_factory=lambda: {".svg": 15, ".png": 8, ".webp": 6, ".jpg": 4, ".jpeg": 4}
    )
    content_types: Mapping[str, int] = field(
        default_factory=lambda: {"image/svg": 8, "image/png": 6, "image/webp": 4}
    )
    html_penalty: int = -50
    size_band: tuple[int, int, int] = (1_000, 500_000, 5)
    size_sweet_spot: tuple[int, int, int] = (5_000, 100_000, 3)
    directories: tuple[tuple[tuple[str, ...], int], ...] = (
        (("/assets/", "/images/", "/img/"), 4),
        (("/static/", "/media/"), 3),
        (("/uploads/", "/content/"), 2),
    )
    filename_adjustments: Mapping[str, int] = field(
        default_factory=lambda: {
            "favicon": -3,
            "icon-16": -5,
            "icon-32": -5,
            "apple-touch-icon": 2,
        }
    )
    shallow_path: tuple[int, int] = (4, 3)  # (max slashes in URL, bonus)
    shallower_path: tuple[int, int] = (3, 2)
    root_file_bonus: int = 5

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any] | None) -> ScoringProfile:
        """Overlay a parsed YAML mapping onto the defaults; unknown keys are ignored."""
        base = cls()
        if not cfg:
            return base

        known = {f.name for f in fields(cls)}
        updates: dict[str, Any] = {}
        for key, value in cfg.items():
            if key not in known or value is None:
                continue
            if key in ("size_band", "size_sweet_spot"):
                updates[key] = (int(value["min"]), int(value["max"]), int(value["bonus"]))
            elif key in ("shallow_path", "shallower_path"):
                updates[key] = (int(value["max_slashes"]), int(value["bonus"]))
            elif key == "directories":
                updates[key] = tuple(
                    (tuple(str(p) for p in d["paths"]), int(d["bonus"])) for d in value
                )
            elif isinstance(getattr(base, key), Mapping):
                updates[key] = {str(k): int(v) for k, v in value.items()}
            else:
                updates[key] = int(value)
        return replace(base, **updates)


@dataclass
class ScoreResult:
    """Result of scoring one candidate."""

    score: int
    reasons: list[str]


DEFAULT_PROFILE = ScoringProfile()


# --- Scoring -----------------------------------------------------------------


def company_slug(company_name: str) -> str:
    """ "Acme Corp." -> "acmecorp" """
    return re.sub(r"[^a-z0-9]", "", (company_name or "").lower())


def _strip_query(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0]


def score_candidate(
    url: str,
    *,
    company_name: str,
    content_type: str = "",
    content_length: int = 0,
    profile: ScoringProfile = DEFAULT_PROFILE,
) -> ScoreResult:
    """
    Null-safe additive score for one successfully-probed candidate.

    Reasons are "label+N" / "label-N" strings, in the order the rules fire.
    """
    reasons: list[str] = []
    score = 0

    def _bump(label: str, pts: int) -> None:
        nonlocal score
        score += pts
        reasons.append(f"{label}{pts:+d}")

    low = url.lower()
    bare = _strip_query(low)
    try:
        path = urlsplit(bare).path
    except ValueError:
        path = bare

    # ------------------------------------------------------------------
    # URL vocabulary
    # ------------------------------------------------------------------
    for word, pts in profile.url_keywords.items():
        if word in low:
            _bump(f"keyword:{word}", pts)
    # favicon.svg is scored by filename_adjustments, not as an icon mark
    if "icon" in low and ".svg" in low and "favicon" not in low:
        _bump("svg_icon", profile.svg_icon_bonus)

    slug = company_slug(company_name)
    if slug and slug in low:
        _bump(f"company_name:{slug}", profile.company_name_bonus)

    # ------------------------------------------------------------------
    # Extension (first match; .jpg/.jpeg are mutually exclusive anyway)
    # ------------------------------------------------------------------
    for ext, pts in profile.extensions.items():
        if path.endswith(ext):
            _bump(f"ext:{ext}", pts)
            break

    # ------------------------------------------------------------------
    # Probed content-type: a text/html "logo" is a rewritten route, not a file
    # ------------------------------------------------------------------
    ctype = (content_type or "").lower()
    for prefix, pts in profile.content_types.items():
        if prefix in ctype:
            _bump(f"content_type:{prefix}", pts)
            break
    else:
        if "text/html" in ctype:
            _bump("content_type:text/html", profile.html_penalty)

    # ------------------------------------------------------------------
    # Size bands
    # ------------------------------------------------------------------
    lo, hi, pts = profile.size_band
    if lo < content_length < hi:
        _bump("size_band", pts)
    lo, hi, pts = profile.size_sweet_spot
    if lo < content_length < hi:
        _bump("size_sweet_spot", pts)

    # ------------------------------------------------------------------
    # Directories (each group counts once)
    # ------------------------------------------------------------------
    for paths, pts in profile.directories:
        hit = next((p for p in paths if p in low), None)
        if hit:
            _bump(f"dir:{hit}", pts)

    # ------------------------------------------------------------------
    # Favicon-ish filenames
    # ------------------------------------------------------------------
    for needle, pts in profile.filename_adjustments.items():
        if needle in low:
            _bump(f"filename:{needle}", pts)

    # ------------------------------------------------------------------
    # Path shape
    # ------------------------------------------------------------------
    slashes = bare.count("/")
    max_slashes, pts = profile.shallow_path
    if slashes <= max_slashes:
        _bump("shallow_path", pts)
    max_slashes, pts = profile.shallower_path
    if slashes <= max_slashes:
        _bump("shallower_path", pts)
    if _ROOT_FILE_RE.match(bare):
        _bump("root_file", profile.root_file_bonus)

    return ScoreResult(score=score, reasons=reasons)


# --- Probing -----------------------------------------------------------------


def _int_header(value: str | None) -> int:
    try:
        return int(str(value).strip()) if value is not None else 0
    except ValueError:
        return 0


class LogoProber:
    """
    HEAD-probes candidate URLs through one shared httpx client.

    A 405 (HEAD not allowed) falls back to a GET with Range: bytes=0-0, read as
    headers only; the size is then taken from Content-Range when present.
    """

    def __init__(
        self,
        cfg: ProbeConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.cfg = cfg or settings.probe
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers={"User-Agent": self.cfg.user_agent, "Accept": "image/*,*/*;q=0.8"},
            timeout=httpx.Timeout(self.cfg.timeout_s),
            follow_redirects=True,
        )

    def probe(self, url: str) -> ProbeResult:
        try:
            resp = self._client.head(url)
            if resp.status_code == 405:
                with self._client.stream("GET", url, headers={"Range": "bytes=0-0"}) as r:
                    return self._result(r)
            return self._result(resp)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return ProbeResult(ok=False, error=f"{type(exc).__name__}: {exc}")

    @staticmethod
    def _result(resp: httpx.Response) -> ProbeResult:
        status = int(resp.status_code)
        if not (200 <= status < 300):
            return ProbeResult(ok=False, status=status)

        length = _int_header(resp.headers.get("Content-Length"))
        m = _CONTENT_RANGE_TOTAL_RE.search(resp.headers.get("Content-Range") or "")
        if m:
            length = int(m.group(1))
        return ProbeResult(
            ok=True,
            status=status,
            content_type=resp.headers.get("Content-Type") or "",
            content_length=length,
        )

    # ----------------------------------------------------------------------------------
    # Context manager
    # ----------------------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> LogoProber:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# --- Ranking -----------------------------------------------------------------


def rank_candidates(
    urls: Sequence[str],
    company_name: str,
    *,
    probe: Callable[[str], ProbeResult],
    profile: ScoringProfile = DEFAULT_PROFILE,
    max_workers: int = 8,
) -> list[LogoCandidate]:
    """
    Probe every URL (bounded concurrency), score the survivors, and return
    them highest score first. Ties keep discovery order. An empty list (every
    probe failed) is a normal outcome.
    """
    if not urls:
        return []

    # pool.map preserves input order regardless of completion order
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(urls)))) as pool:
        probes = list(pool.map(probe, urls))

    ranked: list[LogoCandidate] = []
    for url, pr in zip(urls, probes):
        if not pr.ok:
            log.debug("logo candidate %s dropped (status=%s error=%s)", url, pr.status, pr.error)
            continue
        res = score_candidate(
            url,
            company_name=company_name,
            content_type=pr.content_type,
            content_length=pr.content_length,
            profile=profile,
        )
        log.debug("logo candidate %s scored %d (%s)", url, res.score, ", ".join(res.reasons))
        ranked.append(
            LogoCandidate(
                url=url,
                score=res.score,
                content_type=pr.content_type,
                content_length=pr.content_length,
                probed_ok=True,
                reasons=res.reasons,
            )
        )

    # list.sort is stable: equal scores stay in discovery order
    ranked.sort(key=lambda c: c.score, reverse=True)
    if ranked:
        top = ranked[0]
        log.info("best logo candidate %s (score %d of %d probed ok)", top.url, top.score, len(ranked))
    else:
        log.info("no logo candidate survived probing (%d tried)", len(urls))
    return ranked


__all__ = [
    "DEFAULT_PROFILE",
    "LogoCandidate",
    "LogoProber",
    "ProbeResult",
    "ScoreResult",
    "ScoringProfile",
    "company_slug",
    "rank_candidates",
    "score_candidate",
]
