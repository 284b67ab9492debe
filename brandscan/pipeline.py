# brandscan/pipeline.py
"""
End-to-end brand extraction.

    fetch -> extract fields -> add fallback candidates
          -> { probe & rank logos | AI enhancement }   (concurrently)
          -> resolve profile

Only InvalidURLError and FetchFailedError escape; every later stage degrades
to heuristics so a reachable page always yields a complete BrandProfile.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack

from brandscan.config import load_logo_scoring_config, settings
from brandscan.enhance.client import Enhancement, EnhancementClient, EnhancementContext
from brandscan.extract.fields import extract_fields
from brandscan.extract.logos import add_fallback_candidates
from brandscan.extract.vocab import DEFAULT_VOCABULARY, Vocabulary
from brandscan.fetch.client import PageFetcher
from brandscan.resolve.profile import BrandProfile, resolve_profile
from brandscan.scoring.logo import LogoProber, ScoringProfile, rank_candidates

log = logging.getLogger(__name__)


def default_scoring_profile() -> ScoringProfile:
    """Built-in weights overlaid with docs/logo-scoring.yaml (or $LOGO_SCORING_CONFIG)."""
    return ScoringProfile.from_mapping(load_logo_scoring_config())


def extract_brand(
    raw_url: str,
    *,
    fetcher: PageFetcher | None = None,
    prober: LogoProber | None = None,
    enhancer: EnhancementClient | None = None,
    profile: ScoringProfile | None = None,
    vocab: Vocabulary = DEFAULT_VOCABULARY,
) -> BrandProfile:
    """
    Build a BrandProfile for one website.

    Collaborators not passed in are created from `settings` and closed before
    returning; injected ones are left open for the caller to reuse.

    Raises:
        InvalidURLError: input is not a usable http(s) URL
        FetchFailedError: the page could not be fetched (both schemes, or non-2xx)
    """
    with ExitStack() as stack:
        if fetcher is None:
            fetcher = stack.enter_context(PageFetcher(settings.fetch))
        if prober is None:
            prober = stack.enter_context(LogoProber(settings.probe))
        if enhancer is None:
            enhancer = stack.enter_context(EnhancementClient(settings.enhance))
        if profile is None:
            profile = default_scoring_profile()

        page = fetcher.fetch(raw_url)
        log.info("fetched %s (origin %s, %d chars)", raw_url, page.origin, len(page.html))

        fields = extract_fields(page.html, page.origin, vocab=vocab)
        candidates = add_fallback_candidates(
            fields.logo_candidates, fields.company_name, page.origin
        )

        ctx = EnhancementContext(
            html=page.html,
            origin=page.origin,
            company_name=fields.company_name,
            description=fields.best_description,
            colors=fields.colors,
            keywords=fields.keywords,
            logo_candidates=candidates,
        )

        # The enhancement poll loop is the long pole; probing runs meanwhile.
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="enhance") as pool:
            future = pool.submit(enhancer.enhance, ctx)
            ranked = rank_candidates(
                candidates,
                fields.company_name,
                probe=prober.probe,
                profile=profile,
                max_workers=settings.probe.max_concurrency,
            )
            try:
                enhancement = future.result()
            except Exception:
                log.exception("AI enhancement raised unexpectedly; using heuristics only")
                enhancement = Enhancement()

        result = resolve_profile(fields, ranked, enhancement)
        log.info(
            "brand profile for %s: name=%r logo=%s",
            page.origin,
            result.company_name,
            result.logo_url or "(none)",
        )
        return result


__all__ = ["extract_brand", "default_scoring_profile"]
