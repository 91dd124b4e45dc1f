"""Accuracy formulas, duration helpers and result deduplication."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from tunescout.search.types import Candidate, CandidateKind

NEUTRAL_DURATION_PENALTY = 50.0

# YouTube Music
YTM_MIN_WEIGHT = 65
YTM_MIN_ACCURACY = 80
YTM_KIND_BONUS = {
    CandidateKind.SONG: 0.50,
    CandidateKind.VIDEO: 0.25,
}
YTM_DEFAULT_BONUS = 0.05

# YouTube
YT_MIN_WEIGHT = 70
YT_VIEWS_BONUS = 0.80
YT_AUTHOR_BONUS = 0.60
YT_AUTHOR_MIN_WEIGHT = 80


def parse_duration_ms(text: Optional[str]) -> Optional[int]:
    """Convert ``"m:ss"`` / ``"h:mm:ss"`` to milliseconds, or None if unparseable."""
    if not text:
        return None
    parts = text.strip().split(":")
    total = 0
    for part in parts:
        part = part.strip()
        if not part.isdigit():
            return None
        total = total * 60 + int(part)
    return total * 1000


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return ""
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def duration_penalty(expected_ms: Optional[float], actual_ms: float) -> float:
    """Relative distance from the expected duration, as a percentage."""
    if not expected_ms:
        return NEUTRAL_DURATION_PENALTY
    return abs(expected_ms - actual_ms) / expected_ms * 100


def _bump(accuracy: float, fraction: float) -> float:
    return accuracy + fraction * (100 - accuracy)


def ytmusic_accuracy(
    weight: float,
    kind: CandidateKind,
    expected_ms: Optional[float],
    actual_ms: float,
) -> float:
    """Text weight minus duration penalty, then lifted by a kind-dependent share of the gap."""
    accuracy = weight - duration_penalty(expected_ms, actual_ms)
    return _bump(accuracy, YTM_KIND_BONUS.get(kind, YTM_DEFAULT_BONUS))


def youtube_accuracy(
    expected_ms: Optional[float],
    actual_ms: float,
    views: int,
    highest_views: int,
    author_weight: float,
) -> float:
    """Duration closeness, lifted by relative popularity and an author match."""
    accuracy = 100 - duration_penalty(expected_ms, actual_ms)
    if highest_views > 0:
        accuracy = _bump(accuracy, YT_VIEWS_BONUS * (views / highest_views))
    if author_weight >= YT_AUTHOR_MIN_WEIGHT:
        accuracy = _bump(accuracy, YT_AUTHOR_BONUS)
    return accuracy


def dedupe_ranked(
    candidates: Iterable[Candidate],
    min_accuracy: Optional[float] = None,
) -> list[Candidate]:
    """
    Keep the first candidate per source id and rank by accuracy.

    Candidates at or below ``min_accuracy`` are dropped before they can claim
    their source id. Ties keep encounter order.
    """
    final: dict[str, Candidate] = {}
    for candidate in candidates:
        if min_accuracy is not None and candidate.accuracy <= min_accuracy:
            continue
        if candidate.source_id in final:
            continue
        final[candidate.source_id] = candidate
    return sorted(final.values(), key=lambda candidate: candidate.accuracy, reverse=True)
