"""Search query model and positional-argument normalization."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional, Union

from tunescout.search.errors import ValidationError

Duration = Union[int, float]


@dataclass(frozen=True)
class SearchQuery:
    """Normalized track description handed to the backend adapters."""

    track: str
    artists: tuple[str, ...] = ()
    album: str = ""
    duration: Optional[Duration] = None

    def __post_init__(self) -> None:
        if not isinstance(self.track, str) or not self.track:
            raise ValidationError("<track> must be a valid string")
        if not isinstance(self.album, str):
            raise ValidationError("<album> must be a valid string")
        if any(not isinstance(artist, str) for artist in self.artists):
            raise ValidationError("<artist>, if defined must be a valid array of strings")
        if self.duration is not None:
            if not _is_number(self.duration):
                raise ValidationError("<duration>, if defined must be a valid number")
            if self.duration < 0:
                raise ValidationError("<duration>, if defined must not be negative")

    @property
    def search_text(self) -> str:
        return " ".join(part for part in (self.track, self.album, *self.artists) if part)

    def describe(self) -> str:
        items: list[str] = [f"track='{self.track}'"]
        if self.artists:
            items.append(f"artists={list(self.artists)}")
        if self.album:
            items.append(f"album='{self.album}'")
        if self.duration is not None:
            items.append(f"duration={self.duration}ms")
        return ", ".join(items)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def build_search_query(
    artists: Any = None,
    track: Any = None,
    album: Any = None,
    duration: Any = None,
) -> SearchQuery:
    """
    Shuffle loosely-positioned search arguments into a SearchQuery.

    - a numeric ``track`` becomes ``duration`` and ``track`` is dropped
    - a numeric ``album`` becomes ``duration`` and ``album`` is dropped
    - a non-sequence ``artists`` is wrapped in a list when ``track`` is set,
      otherwise it is taken as the track and ``artists`` becomes empty

    Raises ValidationError when the result has no usable track title or any
    field has the wrong type.
    """
    if _is_number(track):
        track, duration = None, track
    if _is_number(album):
        album, duration = None, album
    if not _is_sequence(artists):
        if track and artists:
            artists = [artists]
        else:
            artists, track = [], artists or track
    if album is None:
        album = ""
    if not isinstance(track, str) or not track:
        raise ValidationError("<track> must be a valid string")
    if duration is not None and not _is_number(duration):
        raise ValidationError("<duration>, if defined must be a valid number")
    return SearchQuery(track=track, artists=tuple(artists), album=album, duration=duration)
