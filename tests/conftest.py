# ruff: noqa: E402
# tests/conftest.py
from __future__ import annotations

import sys
import types
from pathlib import Path

import pytest

# Ensure project root importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from brandscan.config import EnhanceConfig, FetchConfig, ProbeConfig

TEST_UA = "brandscan-tests/1.0"


@pytest.fixture
def fetch_cfg() -> FetchConfig:
    return FetchConfig(user_agent=TEST_UA, timeout_s=2.0, max_body_bytes=2_000_000)


@pytest.fixture
def probe_cfg() -> ProbeConfig:
    return ProbeConfig(user_agent=TEST_UA, timeout_s=2.0, max_concurrency=4)


def make_enhance_cfg(**overrides) -> EnhanceConfig:
    base = dict(
        api_url="https://predict.test/v1/predictions",
        api_token="test-token",
        model="openai/gpt-4o-mini",
        poll_interval_s=1.0,
        deadline_s=5.0,
        html_sample_chars=100,
        max_tokens=500,
        temperature=0.3,
        enabled=True,
    )
    base.update(overrides)
    return EnhanceConfig(**base)


@pytest.fixture
def enhance_cfg() -> EnhanceConfig:
    return make_enhance_cfg()


@pytest.fixture
def disabled_enhance_cfg() -> EnhanceConfig:
    return make_enhance_cfg(api_token=None, enabled=False)


@pytest.fixture
def fake_clock() -> types.SimpleNamespace:
    """
    Injectable clock/sleep pair for poll loops.

    sleep(dt) advances the clock by dt instead of blocking.

    Exposes:
      now() -> float      current monotonic time
      sleep(dt)           advance + record
      slept() -> float    total seconds 'slept'
      sleeps -> list      individual sleep durations
    """
    t = {"now": 1_000.0, "slept": 0.0}
    sleeps: list[float] = []

    def now() -> float:
        return t["now"]

    def sleep(dt: float) -> None:
        dt = float(dt)
        sleeps.append(dt)
        if dt <= 0:
            return
        t["slept"] += dt
        t["now"] += dt

    return types.SimpleNamespace(
        now=now,
        sleep=sleep,
        slept=lambda: t["slept"],
        sleeps=sleeps,
    )
