# brandscan/fetch/client.py
from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

import httpx
import idna

from brandscan.config import FetchConfig, settings
from brandscan.exceptions import FetchFailedError, InvalidURLError

log = logging.getLogger(__name__)

# Browser-like request headers
BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


# --------------------------------------------------------------------------------------------------
# Results
# --------------------------------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchedPage:
    url: str  # normalized request URL (scheme that actually succeeded)
    effective_url: str  # after redirects
    origin: str  # scheme://host[:port] of effective_url
    status: int
    html: str
    used_fallback: bool = False


# --------------------------------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------------------------------


def normalize_url(raw: str) -> str:
    """
    Turn a user-supplied host/URL into an absolute http(s) URL.

    "acme.com"            -> "https://acme.com/"
    "http://Acme.com/x"   -> "http://acme.com/x"
    "bücher.de"           -> "https://xn--bcher-kva.de/"

    Raises InvalidURLError for anything that still doesn't parse.
    """
    s = (raw or "").strip()
    if not s:
        raise InvalidURLError("Website URL is required")
    if not _SCHEME_RE.match(s):
        s = f"https://{s}"

    try:
        parts = urlsplit(s)
        port = parts.port
    except ValueError as err:
        raise InvalidURLError(f"Invalid URL provided: {raw!r}") from err

    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        raise InvalidURLError(f"Unsupported URL scheme {scheme!r}")

    host = (parts.hostname or "").rstrip(".")
    if not host:
        raise InvalidURLError(f"Invalid URL provided: {raw!r}")
    try:
        host_ascii = idna.encode(host, uts46=True).decode("ascii").lower()
    except idna.IDNAError as err:
        raise InvalidURLError(f"Invalid host in URL: {host!r}") from err

    netloc = host_ascii if port is None else f"{host_ascii}:{port}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def _to_http(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit(("http", parts.netloc, parts.path, parts.query, parts.fragment))


# --------------------------------------------------------------------------------------------------
# Client
# --------------------------------------------------------------------------------------------------


class PageFetcher:
    """
    Small wrapper around httpx that fetches a single HTML page.

    Flow:
      1) normalize_url(raw) → InvalidURLError on garbage input
      2) GET over the normalized scheme (https unless the caller said http)
      3) On transport failure (TLS, DNS, connect/read timeout) of an https URL,
         retry exactly once over http on the same host
      4) Non-2xx on the final response → FetchFailedError(status_code=...)

    Each attempt is bounded by cfg.timeout_s of wall-clock time, body included;
    httpx's own timeouts only bound each connect/read/write phase. Running out
    of time mid-body raises httpx.ReadTimeout, so step 3 still applies.
    """

    def __init__(
        self,
        cfg: FetchConfig | None = None,
        *,
        client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cfg = cfg or settings.fetch
        self._clock = clock
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers={"User-Agent": self.cfg.user_agent, **BROWSER_HEADERS},
            timeout=httpx.Timeout(self.cfg.timeout_s),
            follow_redirects=True,
        )

    # ---- core fetch ------------------------------------------------------------------

    def fetch(self, raw_url: str) -> FetchedPage:
        url = normalize_url(raw_url)

        try:
            resp, body = self._get(url)
            used_fallback = False
        except httpx.TransportError as exc:
            if not url.startswith("https://"):
                raise FetchFailedError(
                    f"Unable to fetch website: {type(exc).__name__}: {exc}", url=url
                ) from exc

            http_url = _to_http(url)
            log.info("HTTPS fetch of %s failed (%s); trying HTTP", url, type(exc).__name__)
            try:
                resp, body = self._get(http_url)
            except httpx.TransportError as http_exc:
                raise FetchFailedError(
                    f"Unable to fetch website: {type(exc).__name__}: {exc}", url=url
                ) from http_exc
            url = http_url
            used_fallback = True

        status = int(resp.status_code)

        effective_url = str(resp.url)
        return FetchedPage(
            url=url,
            effective_url=effective_url,
            origin=origin_of(effective_url),
            status=status,
            html=body.decode(resp.encoding or "utf-8", errors="replace"),
            used_fallback=used_fallback,
        )

    # ----------------------------------------------------------------------------------
    # Internals
    # ----------------------------------------------------------------------------------

    def _get(self, url: str) -> tuple[httpx.Response, bytes]:
        deadline = self._clock() + self.cfg.timeout_s
        try:
            with self._client.stream("GET", url) as resp:
                status = int(resp.status_code)
                if not (200 <= status < 300):
                    raise FetchFailedError(
                        f"Failed to fetch website: {status}", status_code=status, url=url
                    )
                return resp, self._read_body(resp, deadline)
        except httpx.TransportError:
            raise
        except httpx.RequestError as exc:
            # Redirect loops, undecodable bodies: not worth a scheme retry
            raise FetchFailedError(
                f"Unable to fetch website: {type(exc).__name__}: {exc}", url=url
            ) from exc

    def _read_body(self, resp: httpx.Response, deadline: float) -> bytes:
        """Read at most max_body_bytes, giving up once the attempt's deadline passes."""
        limit = self.cfg.max_body_bytes
        buf = bytearray()
        for chunk in resp.iter_bytes():
            buf.extend(chunk)
            if len(buf) >= limit:
                break
            if self._clock() > deadline:
                raise httpx.ReadTimeout(
                    f"body not complete after {self.cfg.timeout_s:.1f}s", request=resp.request
                )
        return bytes(buf[:limit])

    # ----------------------------------------------------------------------------------
    # Context manager
    # ----------------------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> PageFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def fetch_page(raw_url: str) -> FetchedPage:
    """
    Convenience wrapper: fetch a single page with default settings.

    Usage:
        from brandscan.fetch import fetch_page
        page = fetch_page("acme.com")
    """
    with PageFetcher() as fetcher:
        return fetcher.fetch(raw_url)


__all__ = [
    "BROWSER_HEADERS",
    "FetchedPage",
    "PageFetcher",
    "fetch_page",
    "normalize_url",
    "origin_of",
]
