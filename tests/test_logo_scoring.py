# tests/test_logo_scoring.py
from __future__ import annotations

import httpx
import pytest
import respx
from httpx import Response

from brandscan.config import ROOT, load_logo_scoring_config
from brandscan.scoring.logo import (
    DEFAULT_PROFILE,
    LogoProber,
    ProbeResult,
    ScoringProfile,
    company_slug,
    rank_candidates,
    score_candidate,
)


def _score(url: str, company: str = "Acme", **kw) -> int:
    return score_candidate(url, company_name=company, **kw).score


# --------------------------------------------------------------------------------------
# Additive scoring
# --------------------------------------------------------------------------------------


def test_company_slug():
    assert company_slug("Acme Corp.") == "acmecorp"
    assert company_slug("") == ""


def test_score_breakdown_for_root_svg_logo():
    res = score_candidate(
        "https://acme.com/acme-logo.svg",
        company_name="Acme",
        content_type="image/svg+xml",
        content_length=8_000,
    )
    # logo 15 + company 20 + .svg 15 + image/svg 8 + size 5 + sweet spot 3
    # + shallow 3 + shallower 2 + root file 5
    assert res.score == 76
    assert res.reasons[0] == "keyword:logo+15"
    assert "company_name:acme+20" in res.reasons
    assert "root_file+5" in res.reasons


@pytest.mark.parametrize("base", ["https://acme.com", "https://acme.com/assets/img"])
def test_named_svg_beats_same_named_png_by_seven(base):
    svg = _score(f"{base}/acme-logo.svg")
    png = _score(f"{base}/acme-logo.png")
    assert svg - png == 7


def test_named_logos_beat_generic_favicon_by_twenty():
    # host without the company name, so only the named files carry it
    favicon = _score("https://example.com/favicon.svg")
    for url in (
        "https://example.com/acme-logo.svg",
        "https://example.com/acme-logo.png",
        "https://example.com/assets/acme-logo.png",
    ):
        assert _score(url) - favicon >= 20


def test_icon_svg_bonus():
    with_icon = score_candidate("https://acme.com/icon.svg", company_name="")
    assert "svg_icon+12" in with_icon.reasons


def test_html_penalty_dominates():
    html_logo = _score("https://acme.com/logo.svg", content_type="text/html; charset=utf-8")
    plain = _score("https://acme.com/deep/nested/path/to/mark.jpg", content_type="image/jpeg")
    assert html_logo < plain


def test_content_type_only_counts_real_images():
    base = _score("https://acme.com/x", company="")
    assert _score("https://acme.com/x", company="", content_type="image/png") == base + 6
    assert _score("https://acme.com/x", company="", content_type="application/json") == base


@pytest.mark.parametrize(
    "length,bonus",
    [(0, 0), (1_000, 0), (1_001, 5), (5_001, 8), (99_999, 8), (100_000, 5), (500_000, 0)],
)
def test_size_bands(length, bonus):
    base = _score("https://acme.com/x", company="")
    assert _score("https://acme.com/x", company="", content_length=length) == base + bonus


def test_directory_and_favicon_adjustments():
    res = score_candidate("https://acme.com/static/img/favicon-32x32.png", company_name="")
    assert "dir:/img/+4" in res.reasons
    assert "dir:/static/+3" in res.reasons
    assert "filename:favicon-3" in res.reasons

    touch = score_candidate("https://acme.com/apple-touch-icon.png", company_name="")
    assert "filename:apple-touch-icon+2" in touch.reasons


def test_query_string_does_not_hide_extension():
    assert _score("https://acme.com/logo.svg?v=3") == _score("https://acme.com/logo.svg")


def test_score_is_null_safe():
    assert isinstance(score_candidate("", company_name="").score, int)
    assert isinstance(score_candidate("http://[::1/logo.svg", company_name="").score, int)


# --------------------------------------------------------------------------------------
# Profile overrides
# --------------------------------------------------------------------------------------


def test_profile_from_mapping_overrides_and_ignores_unknown():
    profile = ScoringProfile.from_mapping(
        {
            "html_penalty": -80,
            "size_band": {"min": 1, "max": 10, "bonus": 1},
            "directories": [{"paths": ["/x/"], "bonus": 9}],
            "url_keywords": {"mark": 7},
            "not_a_weight": 1,
        }
    )
    assert profile.html_penalty == -80
    assert profile.size_band == (1, 10, 1)
    assert profile.directories == ((("/x/",), 9),)
    assert profile.url_keywords == {"mark": 7}
    assert profile.extensions == DEFAULT_PROFILE.extensions

    assert _score("https://acme.com/x/mark.png", company="", profile=profile) == (
        _score("https://acme.com/x/mark.png", company="") + 9 + 7
    )


def test_profile_from_empty_mapping_is_default():
    assert ScoringProfile.from_mapping(None) == DEFAULT_PROFILE
    assert ScoringProfile.from_mapping({}) == DEFAULT_PROFILE


def test_shipped_yaml_matches_builtin_defaults():
    cfg = load_logo_scoring_config(ROOT / "docs" / "logo-scoring.yaml")
    assert cfg
    assert ScoringProfile.from_mapping(cfg) == DEFAULT_PROFILE


# --------------------------------------------------------------------------------------
# Ranking
# --------------------------------------------------------------------------------------


def _fake_probe(table: dict[str, ProbeResult]):
    def probe(url: str) -> ProbeResult:
        return table.get(url, ProbeResult(ok=False, status=404))

    return probe


def test_rank_drops_failed_probes_and_sorts_descending():
    urls = [
        "https://acme.com/favicon.ico",
        "https://acme.com/missing.svg",
        "https://acme.com/acme-logo.svg",
    ]
    probe = _fake_probe(
        {
            urls[0]: ProbeResult(ok=True, status=200, content_type="image/x-icon"),
            urls[2]: ProbeResult(ok=True, status=200, content_type="image/svg+xml"),
        }
    )
    ranked = rank_candidates(urls, "Acme", probe=probe)

    assert [c.url for c in ranked] == [urls[2], urls[0]]
    assert all(c.probed_ok for c in ranked)
    assert ranked[0].score > ranked[1].score


def test_rank_ties_keep_discovery_order():
    urls = [f"https://acme.com/mark{i}.png" for i in range(6)]
    probe = _fake_probe({u: ProbeResult(ok=True, status=200, content_type="image/png") for u in urls})
    ranked = rank_candidates(urls, "", probe=probe, max_workers=3)

    assert len({c.score for c in ranked}) == 1
    assert [c.url for c in ranked] == urls


def test_rank_never_selects_html_when_alternative_exists():
    urls = ["https://acme.com/logo.svg", "https://acme.com/assets/mark.png"]
    probe = _fake_probe(
        {
            urls[0]: ProbeResult(ok=True, status=200, content_type="text/html"),
            urls[1]: ProbeResult(ok=True, status=200, content_type="image/png"),
        }
    )
    ranked = rank_candidates(urls, "Acme", probe=probe)
    assert ranked[0].url == urls[1]


def test_rank_is_deterministic():
    urls = [
        "https://acme.com/logo.svg",
        "https://acme.com/logo.png",
        "https://acme.com/images/brand/logo.svg",
        "https://acme.com/favicon.svg",
    ]
    probe = _fake_probe(
        {
            u: ProbeResult(ok=True, status=200, content_type="image/svg+xml", content_length=9_000)
            for u in urls
        }
    )
    first = [(c.url, c.score) for c in rank_candidates(urls, "Acme", probe=probe)]
    for _ in range(5):
        assert [(c.url, c.score) for c in rank_candidates(urls, "Acme", probe=probe)] == first


def test_rank_all_failed_is_empty():
    assert rank_candidates(["https://acme.com/logo.svg"], "Acme", probe=_fake_probe({})) == []
    assert rank_candidates([], "Acme", probe=_fake_probe({})) == []


# --------------------------------------------------------------------------------------
# Prober
# --------------------------------------------------------------------------------------


@respx.mock
def test_probe_head_success(probe_cfg):
    url = "https://acme.com/logo.svg"
    route = respx.head(url).mock(
        return_value=Response(
            200, headers={"Content-Type": "image/svg+xml", "Content-Length": "2048"}
        )
    )
    with LogoProber(probe_cfg) as prober:
        res = prober.probe(url)

    assert route.call_count == 1
    assert res.ok is True
    assert res.content_type == "image/svg+xml"
    assert res.content_length == 2048


@respx.mock
def test_probe_404_is_not_ok(probe_cfg):
    url = "https://acme.com/logo.svg"
    respx.head(url).mock(return_value=Response(404))
    with LogoProber(probe_cfg) as prober:
        res = prober.probe(url)
    assert res.ok is False
    assert res.status == 404


@respx.mock
def test_probe_transport_error_is_not_ok(probe_cfg):
    url = "https://acme.com/logo.svg"
    respx.head(url).mock(side_effect=httpx.ConnectTimeout)
    with LogoProber(probe_cfg) as prober:
        res = prober.probe(url)
    assert res.ok is False
    assert res.status is None
    assert "ConnectTimeout" in (res.error or "")


@respx.mock
def test_probe_405_falls_back_to_ranged_get(probe_cfg):
    url = "https://acme.com/logo.png"
    respx.head(url).mock(return_value=Response(405))
    get_route = respx.get(url).mock(
        return_value=Response(
            206,
            headers={"Content-Type": "image/png", "Content-Range": "bytes 0-0/4096"},
            content=b"\x89",
        )
    )
    with LogoProber(probe_cfg) as prober:
        res = prober.probe(url)

    assert get_route.calls.last.request.headers["Range"] == "bytes=0-0"
    assert res.ok is True
    assert res.content_type == "image/png"
    assert res.content_length == 4096
