from __future__ import annotations

import pytest

from tunescout.search.scoring import (
    NEUTRAL_DURATION_PENALTY,
    dedupe_ranked,
    duration_penalty,
    format_duration,
    parse_duration_ms,
    youtube_accuracy,
    ytmusic_accuracy,
)
from tunescout.search.types import Candidate, CandidateKind


def _candidate(source_id: str, accuracy: float, title: str = "One More Time") -> Candidate:
    return Candidate(
        title=title,
        kind=CandidateKind.SONG,
        author="Daft Punk",
        duration="5:20",
        duration_ms=320000,
        source_id=source_id,
        accuracy=accuracy,
    )


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("5:20", 320000),
        ("0:07", 7000),
        ("1:02:03", 3723000),
        (" 3:45 ", 225000),
        ("", None),
        (None, None),
        ("LIVE", None),
        ("3:4x", None),
    ],
)
def test_parse_duration_ms(text, expected) -> None:
    assert parse_duration_ms(text) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(320, "5:20"), (7, "0:07"), (3723, "1:02:03"), (None, "")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_duration_penalty_is_relative_to_expected() -> None:
    assert duration_penalty(320000, 320000) == 0
    assert duration_penalty(320000, 352000) == pytest.approx(10)
    assert duration_penalty(320000, 288000) == pytest.approx(10)


@pytest.mark.parametrize("expected", [None, 0])
def test_duration_penalty_is_neutral_without_expected_duration(expected) -> None:
    assert duration_penalty(expected, 320000) == NEUTRAL_DURATION_PENALTY


def test_ytmusic_accuracy_bonus_depends_on_kind() -> None:
    song = ytmusic_accuracy(90, CandidateKind.SONG, 320000, 320000)
    video = ytmusic_accuracy(90, CandidateKind.VIDEO, 320000, 320000)
    other = ytmusic_accuracy(90, CandidateKind.ALBUM, 320000, 320000)

    assert song == pytest.approx(95)
    assert video == pytest.approx(92.5)
    assert other == pytest.approx(90.5)


def test_ytmusic_accuracy_drops_as_duration_drifts() -> None:
    exact = ytmusic_accuracy(90, CandidateKind.SONG, 320000, 320000)
    close = ytmusic_accuracy(90, CandidateKind.SONG, 320000, 325000)
    far = ytmusic_accuracy(90, CandidateKind.SONG, 320000, 400000)

    assert exact > close > far


def test_youtube_accuracy_rewards_views_and_author() -> None:
    top = youtube_accuracy(320000, 320000, 1000, 1000, 100)
    runner_up = youtube_accuracy(320000, 330000, 500, 1000, 0)

    assert top == pytest.approx(100)
    assert runner_up == pytest.approx(98.125)


def test_youtube_accuracy_grows_with_views() -> None:
    scores = [youtube_accuracy(320000, 352000, views, 1000, 0) for views in (0, 250, 500, 1000)]

    assert scores == sorted(scores)
    assert scores[0] == pytest.approx(90)
    assert len(set(scores)) == len(scores)


def test_youtube_accuracy_without_views_anywhere() -> None:
    assert youtube_accuracy(320000, 352000, 0, 0, 0) == pytest.approx(90)


def test_youtube_accuracy_author_bonus_needs_strong_match() -> None:
    weak = youtube_accuracy(None, 320000, 0, 0, 79.9)
    strong = youtube_accuracy(None, 320000, 0, 0, 80)

    assert weak == pytest.approx(50)
    assert strong == pytest.approx(80)


def test_dedupe_keeps_first_occurrence_per_source() -> None:
    first = _candidate("abc", 70, title="first")
    second = _candidate("abc", 90, title="second")

    ranked = dedupe_ranked([first, second])

    assert len(ranked) == 1
    assert ranked[0].title == "first"
    assert ranked[0].accuracy == 70


def test_dedupe_sorts_descending_and_keeps_ties_in_order() -> None:
    ranked = dedupe_ranked([_candidate("a", 81), _candidate("b", 95), _candidate("c", 81), _candidate("d", 88)])

    assert [candidate.source_id for candidate in ranked] == ["b", "d", "a", "c"]


def test_dedupe_threshold_applies_before_first_wins() -> None:
    low = _candidate("abc", 75, title="low")
    high = _candidate("abc", 92, title="high")

    ranked = dedupe_ranked([low, high, _candidate("xyz", 80)], min_accuracy=80)

    assert [(candidate.source_id, candidate.title) for candidate in ranked] == [("abc", "high")]


def test_dedupe_of_nothing() -> None:
    assert dedupe_ranked([]) == []
