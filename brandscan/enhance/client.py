"""
Optional AI refinement of the heuristic brand profile.

Given a bounded HTML sample plus the heuristic name/description/colors/
keywords/logo candidates, submit one job to a generic async prediction API
(Replicate-compatible: POST creates a job, GET polls it) and parse the JSON
object embedded in the model output.

Job lifecycle, polled once per interval until a terminal state:

    starting / queued / processing  --poll-->  (same) | succeeded | failed | canceled
    any non-terminal state          --deadline reached-->  timed_out

Behavior:
  - No token configured (or ENHANCE_ENABLED=0): return an empty Enhancement
    immediately, with no network I/O.
  - Submission/poll non-2xx, transport errors, failed/canceled jobs, deadline
    expiry, missing or unparsable JSON: log and return an empty Enhancement.
    Nothing here ever raises to the caller.
"""

# brandscan/enhance/client.py
from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import httpx

from brandscan.config import EnhanceConfig, settings
from brandscan.exceptions import EnhancementError

log = logging.getLogger(__name__)

# Job states as reported by the prediction API, plus our local timeout state
STATUS_STARTING = "starting"
STATUS_QUEUED = "queued"
STATUS_PROCESSING = "processing"
STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
STATUS_CANCELED = "canceled"
STATUS_TIMED_OUT = "timed_out"

TERMINAL_STATUSES = frozenset({STATUS_SUCCEEDED, STATUS_FAILED, STATUS_CANCELED, STATUS_TIMED_OUT})

MAX_KEYWORDS = 4

# Upper bound for a single submit/poll request; also capped by the time left
REQUEST_TIMEOUT_S = 15.0

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


# --- Data model --------------------------------------------------------------


@dataclass
class EnhancementJob:
    id: str
    status: str
    output: Any = None
    error: str | None = None
    poll_url: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_api(cls, data: Any, *, previous: EnhancementJob | None = None) -> EnhancementJob:
        if not isinstance(data, dict):
            raise EnhancementError("job payload is not an object")
        job_id = str(data.get("id") or (previous.id if previous else "") or "")
        if not job_id:
            raise EnhancementError("job payload has no id")
        urls = data.get("urls") if isinstance(data.get("urls"), dict) else {}
        return cls(
            id=job_id,
            status=str(data.get("status") or STATUS_STARTING).strip().lower(),
            output=data.get("output"),
            error=str(data["error"]) if data.get("error") else None,
            poll_url=urls.get("get") or (previous.poll_url if previous else None),
        )


@dataclass
class EnhancementContext:
    """What we already know about the site, handed to the model."""

    html: str
    origin: str
    company_name: str = ""
    description: str = ""
    colors: Sequence[str] = ()
    keywords: Sequence[str] = ()
    logo_candidates: Sequence[str] = ()


@dataclass
class Enhancement:
    """
    AI-suggested profile subset. Every field is optional; empty means
    "no opinion" and the resolver falls back to the heuristic value.
    """

    company_name: str | None = None
    description: str | None = None
    industry: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    logo: str | None = None
    fonts: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.company_name,
                self.description,
                self.industry,
                self.primary_color,
                self.secondary_color,
                self.logo,
                self.fonts,
                self.keywords,
            )
        )

    @classmethod
    def from_payload(cls, data: dict[str, Any], *, origin: str) -> Enhancement:
        """
        Sanitize untrusted model JSON: colors must be hex, the logo must resolve
        to an absolute http(s) URL, keywords are deduped and capped at 4.
        """
        return cls(
            company_name=_str_or_none(data.get("companyName")),
            description=_str_or_none(data.get("description")),
            industry=_str_or_none(data.get("industry")),
            primary_color=_hex_or_none(data.get("primaryColor")),
            secondary_color=_hex_or_none(data.get("secondaryColor")),
            logo=_logo_or_none(data.get("logo"), origin),
            fonts=_str_list(data.get("fonts")),
            keywords=_str_list(data.get("keywords"), lower=True)[:MAX_KEYWORDS],
        )


def _str_or_none(v: Any) -> str | None:
    if not isinstance(v, str):
        return None
    s = v.strip()
    return s or None


def _hex_or_none(v: Any) -> str | None:
    s = _str_or_none(v)
    if not s or not _HEX_COLOR_RE.match(s):
        return None
    h = s[1:].lower()
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    return f"#{h}"


def _logo_or_none(v: Any, origin: str) -> str | None:
    s = _str_or_none(v)
    if not s:
        return None
    try:
        url = urljoin(origin.rstrip("/") + "/", s)
    except ValueError:
        return None
    if not url.lower().startswith(("http://", "https://")):
        return None
    return url


def _str_list(v: Any, *, lower: bool = False) -> list[str]:
    if isinstance(v, str):
        v = v.split(",")
    if not isinstance(v, list):
        return []
    out: list[str] = []
    seen: set[str] = set()
    for item in v:
        if not isinstance(item, str):
            continue
        s = item.strip().lower() if lower else item.strip()
        if s and s.lower() not in seen:
            seen.add(s.lower())
            out.append(s)
    return out


# --- Output parsing ----------------------------------------------------------


def join_output(output: Any) -> str:
    """Streaming models return a list of text fragments; others a single string."""
    if output is None:
        return ""
    if isinstance(output, list):
        return "".join(str(part) for part in output if part is not None).strip()
    return str(output).strip()


def first_json_object(text: str) -> str | None:
    """
    The first balanced {...} substring, honouring JSON string literals so a
    brace inside a quoted value doesn't end the object early.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_enhancement(output: Any, *, origin: str) -> Enhancement:
    text = join_output(output)
    blob = first_json_object(text)
    if blob is None:
        log.warning("No JSON object found in enhancement output")
        return Enhancement()
    try:
        data = json.loads(blob)
    except ValueError:
        log.warning("Enhancement output JSON did not parse")
        return Enhancement()
    if not isinstance(data, dict):
        return Enhancement()
    return Enhancement.from_payload(data, origin=origin)


# --- Prompt ------------------------------------------------------------------

_SYSTEM_PROMPT = """\
You are a web scraping and branding assistant. Given the provided HTML, extracted \
color codes, and all possible logo URLs, select the best primary and secondary brand \
colors and the best logo URL. If no logo is found, suggest a likely logo URL based on \
common patterns. Always try to find a logo. Return only valid JSON with these fields: \
companyName, description, industry, primaryColor, secondaryColor, logo, fonts, keywords."""


def build_prompt(ctx: EnhancementContext, *, html_sample_chars: int) -> str:
    return (
        f"System: {_SYSTEM_PROMPT}\n\n"
        "User: Analyze this website data and improve it:\n"
        f"Company Name: {ctx.company_name}\n"
        f"Description: {ctx.description}\n"
        f"Colors found: {', '.join(ctx.colors)}\n"
        f"Logo candidates: {', '.join(ctx.logo_candidates)}\n"
        f"Keywords found: {', '.join(ctx.keywords)}\n\n"
        f"HTML sample: {ctx.html[:html_sample_chars]}\n\n"
        "Please return improved data as JSON. Focus on:\n"
        '1. Clean company name (remove common suffixes like "Inc", "LLC")\n'
        "2. Better description if current one is poor\n"
        "3. Guess industry based on content\n"
        "4. Select best 2 colors for primary/secondary\n"
        "5. Select the best logo URL or suggest one if missing\n"
        "6. Provide 3-4 relevant brand keywords that describe the company's focus/values."
    )


# --- Client ------------------------------------------------------------------


class EnhancementClient:
    """
    Submit-and-poll client for the prediction API.

    `sleep` and `clock` are injectable; the poll loop touches time only
    through them.
    """

    def __init__(
        self,
        cfg: EnhanceConfig | None = None,
        *,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cfg = cfg or settings.enhance
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return bool(self.cfg.enabled and self.cfg.api_token)

    # ---- public ----------------------------------------------------------------------

    def enhance(self, ctx: EnhancementContext) -> Enhancement:
        """Best-effort refinement. Always returns; empty on any failure."""
        if not self.enabled:
            log.info("AI enhancement disabled (no API token or ENHANCE_ENABLED=0)")
            return Enhancement()

        prompt = build_prompt(ctx, html_sample_chars=self.cfg.html_sample_chars)
        try:
            job = self.run_job(prompt)
            if job.status != STATUS_SUCCEEDED:
                log.warning(
                    "AI enhancement job %s ended %s%s",
                    job.id,
                    job.status,
                    f" ({job.error})" if job.error else "",
                )
                return Enhancement()
            result = parse_enhancement(job.output, origin=ctx.origin)
        except (EnhancementError, httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            log.warning("AI enhancement failed: %s: %s", type(exc).__name__, exc)
            return Enhancement()

        if not result.is_empty:
            log.info("AI enhancement successful (job %s)", job.id)
        return result

    def run_job(self, prompt: str) -> EnhancementJob:
        """
        Create the job, then poll until it is terminal or the deadline passes.
        Every request's timeout is capped by the time left before the deadline.
        Raises EnhancementError / httpx errors; enhance() converts those.
        """
        deadline = self._clock() + self.cfg.deadline_s
        job = self._submit(prompt, timeout=self._time_left(deadline))
        while not job.is_terminal:
            if self._clock() + self.cfg.poll_interval_s > deadline:
                log.warning(
                    "AI enhancement job %s still %s after %.0fs; giving up",
                    job.id,
                    job.status,
                    self.cfg.deadline_s,
                )
                job.status = STATUS_TIMED_OUT
                break
            self._sleep(self.cfg.poll_interval_s)
            job = self._poll(job, timeout=self._time_left(deadline))
        return job

    # ---- internals -------------------------------------------------------------------

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(REQUEST_TIMEOUT_S))
        return self._client

    def _time_left(self, deadline: float) -> float:
        return max(0.1, min(REQUEST_TIMEOUT_S, deadline - self._clock()))

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.cfg.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _submit(self, prompt: str, *, timeout: float) -> EnhancementJob:
        payload = {
            "version": self.cfg.model,
            "input": {
                "prompt": prompt,
                "max_tokens": self.cfg.max_tokens,
                "temperature": self.cfg.temperature,
            },
        }
        resp = self._http().post(
            self.cfg.api_url, json=payload, headers=self._headers(), timeout=timeout
        )
        if not resp.is_success:
            raise EnhancementError(f"prediction API error: {resp.status_code}")
        job = EnhancementJob.from_api(resp.json())
        log.debug("AI enhancement job %s submitted (%s)", job.id, job.status)
        return job

    def _poll(self, job: EnhancementJob, *, timeout: float) -> EnhancementJob:
        url = job.poll_url or f"{self.cfg.api_url}/{job.id}"
        resp = self._http().get(url, headers=self._headers(), timeout=timeout)
        if not resp.is_success:
            raise EnhancementError(f"polling failed: {resp.status_code}")
        polled = EnhancementJob.from_api(resp.json(), previous=job)
        log.debug("AI enhancement job %s is %s", polled.id, polled.status)
        return polled

    # ----------------------------------------------------------------------------------
    # Context manager
    # ----------------------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> EnhancementClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "Enhancement",
    "EnhancementClient",
    "EnhancementContext",
    "EnhancementJob",
    "TERMINAL_STATUSES",
    "build_prompt",
    "first_json_object",
    "join_output",
    "parse_enhancement",
]
