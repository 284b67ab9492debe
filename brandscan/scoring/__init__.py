# brandscan/scoring/__init__.py
from __future__ import annotations

from .logo import (
    DEFAULT_PROFILE,
    LogoCandidate,
    LogoProber,
    ProbeResult,
    ScoreResult,
    ScoringProfile,
    rank_candidates,
    score_candidate,
)

__all__ = [
    "DEFAULT_PROFILE",
    "LogoCandidate",
    "LogoProber",
    "ProbeResult",
    "ScoreResult",
    "ScoringProfile",
    "rank_candidates",
    "score_candidate",
]
