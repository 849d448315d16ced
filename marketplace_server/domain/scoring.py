"""Submission scoring.

Pure functions. The weights are fixed policy, not configuration.
"""

from typing import Optional

from .value_objects import ScoreBreakdown

QUALITY_WEIGHT = 0.7
SPEED_WEIGHT = 0.3
SCORE_FORMULA = "quality*0.7 + speed*0.3"

# Latency at which the speed score reaches zero.
MAX_LATENCY_MS = 10_000

# (exclusive upper bound on trimmed length, quality estimate)
_QUALITY_BANDS = (
    (80, 0.35),
    (200, 0.55),
    (400, 0.70),
)
_QUALITY_CEILING = 0.85


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def speed_score(latency_ms: int) -> float:
    """1.0 for an instant answer, falling linearly to 0.0 at MAX_LATENCY_MS."""
    return _clamp(1 - latency_ms / MAX_LATENCY_MS)


def estimate_quality(content: str) -> float:
    """Coarse length-based quality estimate.

    Only a fallback for when no explicit rating was supplied.
    """
    length = len(content.strip())
    for upper_bound, quality in _QUALITY_BANDS:
        if length < upper_bound:
            return quality
    return _QUALITY_CEILING


def final_score(quality: float, speed: float) -> float:
    """Weighted score, rounded to 6 places so equal inputs compare equal."""
    return round(_clamp(quality * QUALITY_WEIGHT + speed * SPEED_WEIGHT), 6)


def score_submission(latency_ms: int, content: str, quality: Optional[float] = None) -> ScoreBreakdown:
    """Score a submission, estimating quality from content when not rated."""
    if quality is None:
        quality = estimate_quality(content)
    speed = speed_score(latency_ms)
    return ScoreBreakdown(quality=quality, speed=speed, score=final_score(quality, speed))
