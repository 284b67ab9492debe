# tests/test_pipeline.py
from __future__ import annotations

import re
import threading

import httpx
import pytest
import respx
from httpx import Response

from brandscan.enhance.client import Enhancement, EnhancementClient
from brandscan.exceptions import FetchFailedError, InvalidURLError
from brandscan.fetch.client import PageFetcher
from brandscan.pipeline import extract_brand
from brandscan.scoring.logo import DEFAULT_PROFILE, LogoProber, ProbeResult

SCENARIO_A_HTML = """
<html><head>
<title>Acme Corp - Home</title>
<meta name="description" content="Acme builds software solutions">
<link rel="icon" href="/acme-logo.svg">
</head><body><h1>Welcome</h1></body></html>
"""

SVG = {"Content-Type": "image/svg+xml"}


class StubEnhancer:
    """Stands in for EnhancementClient; records the context it was given."""

    def __init__(self, result: Enhancement):
        self.result = result
        self.contexts = []

    def enhance(self, ctx):
        self.contexts.append(ctx)
        return self.result


@pytest.fixture
def collaborators(fetch_cfg, probe_cfg, disabled_enhance_cfg):
    fetcher = PageFetcher(fetch_cfg)
    prober = LogoProber(probe_cfg)
    enhancer = EnhancementClient(disabled_enhance_cfg)
    yield {"fetcher": fetcher, "prober": prober, "enhancer": enhancer, "profile": DEFAULT_PROFILE}
    fetcher.close()
    prober.close()
    enhancer.close()


def _catch_all_404() -> None:
    # Registered last: every speculative fallback path misses
    respx.route().mock(return_value=Response(404))


# --------------------------------------------------------------------------------------
# Scenario A: markup logo outranks generic fallbacks, no enhancement configured
# --------------------------------------------------------------------------------------


@respx.mock
def test_scenario_a_heuristics_only(collaborators):
    respx.get("https://acme.com/").mock(return_value=Response(200, html=SCENARIO_A_HTML))
    respx.head("https://acme.com/acme-logo.svg").mock(return_value=Response(200, headers=SVG))
    respx.head("https://acme.com/logo.svg").mock(return_value=Response(200, headers=SVG))
    _catch_all_404()

    profile = extract_brand("acme.com", **collaborators)

    assert profile.company_name == "Acme Corp"
    assert "software" in profile.keywords
    assert "solution" in profile.keywords
    assert profile.logo_url == "https://acme.com/acme-logo.svg"
    assert profile.description == "Acme builds software solutions"
    assert profile.industry == "Technology"
    assert (profile.primary_color, profile.secondary_color) == ("#8b5cf6", "#06b6d4")


@respx.mock
def test_heuristic_profile_is_complete_and_well_formed(collaborators):
    html = SCENARIO_A_HTML.replace(
        "</head>", "<style>a{color:#E11D48} body{background:#fff}</style></head>"
    )
    respx.get("https://acme.com/").mock(return_value=Response(200, html=html))
    _catch_all_404()

    d = extract_brand("https://acme.com", **collaborators).to_dict()

    assert set(d) == {
        "companyName",
        "description",
        "industry",
        "primaryColor",
        "secondaryColor",
        "logo",
        "fonts",
        "keywords",
    }
    assert d["primaryColor"] == "#e11d48"
    assert re.fullmatch(r"#[0-9a-f]{6}", d["secondaryColor"])
    assert 0 < len(d["keywords"]) <= 4
    assert len(d["keywords"]) == len(set(d["keywords"]))


# --------------------------------------------------------------------------------------
# Scenario B: TLS failure, HTTP succeeds
# --------------------------------------------------------------------------------------


@respx.mock
def test_scenario_b_https_failure_falls_back_to_http(collaborators):
    respx.get("https://acme.com/").mock(side_effect=httpx.ConnectError)
    respx.get("http://acme.com/").mock(return_value=Response(200, html=SCENARIO_A_HTML))
    respx.head("http://acme.com/acme-logo.svg").mock(return_value=Response(200, headers=SVG))
    _catch_all_404()

    profile = extract_brand("acme.com", **collaborators)

    assert profile.company_name == "Acme Corp"
    assert profile.logo_url == "http://acme.com/acme-logo.svg"


# --------------------------------------------------------------------------------------
# Scenario C: every probe 404s
# --------------------------------------------------------------------------------------


@respx.mock
def test_scenario_c_no_probe_survives(collaborators):
    respx.get("https://acme.com/").mock(return_value=Response(200, html=SCENARIO_A_HTML))
    _catch_all_404()

    profile = extract_brand("acme.com", **collaborators)

    assert profile.logo_url == ""
    assert profile.company_name == "Acme Corp"


@respx.mock
def test_scenario_c_enhancement_supplies_logo(collaborators):
    respx.get("https://acme.com/").mock(return_value=Response(200, html=SCENARIO_A_HTML))
    _catch_all_404()
    stub = StubEnhancer(
        Enhancement(logo="https://cdn.acme.com/ai-logo.svg", company_name="Acme", industry="Software")
    )
    collaborators["enhancer"] = stub

    profile = extract_brand("acme.com", **collaborators)

    assert profile.logo_url == "https://cdn.acme.com/ai-logo.svg"
    assert profile.company_name == "Acme"
    assert profile.industry == "Software"

    ctx = stub.contexts[0]
    assert ctx.origin == "https://acme.com"
    assert ctx.company_name == "Acme Corp"
    assert ctx.logo_candidates[0] == "https://acme.com/acme-logo.svg"
    assert "https://acme.com/logo.svg" in ctx.logo_candidates


@respx.mock
def test_enhancer_crash_degrades_to_heuristics(collaborators):
    respx.get("https://acme.com/").mock(return_value=Response(200, html=SCENARIO_A_HTML))
    _catch_all_404()

    class Exploding:
        def enhance(self, ctx):
            raise RuntimeError("unexpected")

    collaborators["enhancer"] = Exploding()
    profile = extract_brand("acme.com", **collaborators)

    assert profile.company_name == "Acme Corp"


@respx.mock
def test_logo_probing_runs_while_enhancement_is_in_flight(collaborators):
    respx.get("https://acme.com/").mock(return_value=Response(200, html=SCENARIO_A_HTML))
    probing_started = threading.Event()
    enhancement_done = threading.Event()
    enhancement_pending_at_probe: list[bool] = []

    class WaitsForProbing:
        def enhance(self, ctx):
            overlapped = probing_started.wait(timeout=5)
            enhancement_done.set()
            return Enhancement(industry="Overlapped" if overlapped else "Serial")

    class SignallingProber:
        def probe(self, url):
            enhancement_pending_at_probe.append(not enhancement_done.is_set())
            probing_started.set()
            return ProbeResult(ok=False, status=404)

    collaborators["enhancer"] = WaitsForProbing()
    collaborators["prober"] = SignallingProber()

    profile = extract_brand("acme.com", **collaborators)

    assert profile.industry == "Overlapped"
    assert enhancement_pending_at_probe[0] is True


# --------------------------------------------------------------------------------------
# Errors that do escape
# --------------------------------------------------------------------------------------


def test_invalid_url_raises(collaborators):
    with respx.mock:
        with pytest.raises(InvalidURLError):
            extract_brand("ftp://acme.com", **collaborators)
        assert len(respx.calls) == 0


@respx.mock
def test_non_2xx_raises_fetch_failed(collaborators):
    respx.get("https://acme.com/").mock(return_value=Response(404))

    with pytest.raises(FetchFailedError) as ei:
        extract_brand("acme.com", **collaborators)
    assert ei.value.status_code == 404
