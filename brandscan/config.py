from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name, str(default)).strip()
    try:
        return int(v)
    except ValueError as err:
        raise ValueError(f"Environment variable {name} must be an integer; got {v!r}") from err


def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name, str(default)).strip()
    try:
        return float(v)
    except ValueError as err:
        raise ValueError(f"Environment variable {name} must be a number; got {v!r}") from err


def _getenv_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    """
    Read a loosely-typed boolean from the environment.

    Treats "1", "true", "yes", "on" (case-insensitive) as True;
    "0", "false", "no", "off", "" as False. If unset, returns default.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off", ""}:
        return False
    # Fallback: any other non-empty value -> True
    return True


# Load .env from project root if present
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env", override=False)

# Current desktop Chrome
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

DEFAULT_ENHANCE_API_URL = "https://api.replicate.com/v1/predictions"


@dataclass(frozen=True)
class FetchConfig:
    user_agent: str
    timeout_s: float
    max_body_bytes: int


@dataclass(frozen=True)
class ProbeConfig:
    user_agent: str
    timeout_s: float
    max_concurrency: int


@dataclass(frozen=True)
class EnhanceConfig:
    api_url: str
    api_token: str | None
    model: str
    poll_interval_s: float
    deadline_s: float
    html_sample_chars: int
    max_tokens: int
    temperature: float
    enabled: bool


@dataclass(frozen=True)
class AppConfig:
    fetch: FetchConfig
    probe: ProbeConfig
    enhance: EnhanceConfig


def load_settings() -> AppConfig:
    user_agent = _getenv_str("FETCH_USER_AGENT", DEFAULT_USER_AGENT)
    fetch = FetchConfig(
        user_agent=user_agent,
        timeout_s=_getenv_float("FETCH_TIMEOUT_S", 10.0),
        max_body_bytes=_getenv_int("FETCH_MAX_BODY_BYTES", 2_000_000),
    )
    probe = ProbeConfig(
        user_agent=user_agent,
        timeout_s=_getenv_float("PROBE_TIMEOUT_S", 5.0),
        max_concurrency=max(1, _getenv_int("PROBE_MAX_CONCURRENCY", 8)),
    )

    # REPLICATE_API_TOKEN is the legacy name
    token = _getenv_str("ENHANCE_API_TOKEN", "") or _getenv_str("REPLICATE_API_TOKEN", "")
    enhance = EnhanceConfig(
        api_url=_getenv_str("ENHANCE_API_URL", DEFAULT_ENHANCE_API_URL).rstrip("/"),
        api_token=token or None,
        model=_getenv_str("ENHANCE_MODEL", "openai/gpt-4o-mini"),
        poll_interval_s=_getenv_float("ENHANCE_POLL_INTERVAL_S", 1.0),
        deadline_s=_getenv_float("ENHANCE_DEADLINE_S", 45.0),
        html_sample_chars=_getenv_int("ENHANCE_HTML_SAMPLE_CHARS", 8000),
        max_tokens=_getenv_int("ENHANCE_MAX_TOKENS", 500),
        temperature=_getenv_float("ENHANCE_TEMPERATURE", 0.3),
        enabled=bool(token) and _getenv_bool("ENHANCE_ENABLED", True),
    )
    return AppConfig(fetch=fetch, probe=probe, enhance=enhance)


def load_logo_scoring_config(path: str | Path | None = None) -> dict[str, Any]:
    """
    Load logo scoring weights from YAML.

    Lookup order: explicit path, $LOGO_SCORING_CONFIG, docs/logo-scoring.yaml.
    Returns an empty dict if the file does not exist or is not a mapping, in
    which case the scorer keeps its built-in defaults. The expected shape is:

      url_keywords: {logo: 15, brand: 12, ...}
      svg_icon_bonus: 12
      company_name_bonus: 20
      extensions: {.svg: 15, .png: 8, ...}
      content_types: {image/svg: 8, ...}
      html_penalty: -50
      size_band: {min: 1000, max: 500000, bonus: 5}
      size_sweet_spot: {min: 5000, max: 100000, bonus: 3}
      directories: [{paths: [/assets/, ...], bonus: 4}, ...]
      filename_adjustments: {favicon: -3, ...}
      shallow_path: {max_slashes: 4, bonus: 3}
      shallower_path: {max_slashes: 3, bonus: 2}
      root_file_bonus: 5
    """
    if path is None:
        env_path = os.getenv("LOGO_SCORING_CONFIG", "").strip()
        path = Path(env_path) if env_path else ROOT / "docs" / "logo-scoring.yaml"
    path = Path(path)
    if not path.exists():
        return {}

    cfg = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(cfg, dict):
        return {}
    return cfg


settings: AppConfig = load_settings()
