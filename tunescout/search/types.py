"""Shared data structures for the search backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from tunescout.search.protocols import FeedResolver


class CandidateKind(str, Enum):
    """What a search result points at."""

    SONG = "song"
    VIDEO = "video"
    ALBUM = "album"
    ARTIST = "artist"
    PLAYLIST = "playlist"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "CandidateKind":
        normalized = (label or "").strip().lower()
        if normalized in ("single", "ep"):
            return cls.ALBUM
        for kind in cls:
            if kind is not cls.OTHER and kind.value == normalized:
                return kind
        return cls.OTHER


class SectionKind(str, Enum):
    """Named shelves of a YouTube Music search response."""

    TOP = "top"
    SONGS = "songs"
    VIDEOS = "videos"
    ALBUMS = "albums"
    ARTISTS = "artists"
    PLAYLISTS = "playlists"
    OTHER = "other"


SECTION_LABELS: Dict[str, SectionKind] = {
    "Top result": SectionKind.TOP,
    "Songs": SectionKind.SONGS,
    "Videos": SectionKind.VIDEOS,
    "Albums": SectionKind.ALBUMS,
    "Artists": SectionKind.ARTISTS,
    "Playlists": SectionKind.PLAYLISTS,
}


@dataclass(frozen=True)
class NavigableRef:
    """A linked name inside a result row (artist channel or album)."""

    name: str
    id: str


@dataclass(frozen=True)
class ContinuationToken:
    """Opaque handle for the next page of a section."""

    continuation: str
    click_tracking_params: Optional[str] = None

    def as_params(self) -> Dict[str, str]:
        params = {"continuation": self.continuation}
        if self.click_tracking_params:
            params["icit"] = self.click_tracking_params
        return params


@dataclass(frozen=True)
class ExpansionDescriptor:
    """Search endpoint that returns the full version of a section."""

    query: str
    params: Optional[str] = None

    def as_query_object(self) -> Dict[str, str]:
        query_object = {"query": self.query}
        if self.params:
            query_object["params"] = self.params
        return query_object


@dataclass
class RawCandidate:
    """One parsed row of a backend response, before scoring."""

    kind: CandidateKind
    label: Optional[str] = None
    title: Optional[str] = None
    artists: List[NavigableRef] = field(default_factory=list)
    album: Optional[NavigableRef] = None
    duration: Optional[str] = None
    video_id: Optional[str] = None
    browse_id: Optional[str] = None
    views: Optional[str] = None
    album_type: Optional[str] = None
    year: Optional[str] = None
    subscribers: Optional[str] = None
    item_count: Optional[int] = None


@dataclass
class Section:
    """A named group of raw results plus optional paging handles."""

    kind: SectionKind
    label: Optional[str] = None
    contents: List[RawCandidate] = field(default_factory=list)
    continuation: Optional[ContinuationToken] = None
    expansion: Optional[ExpansionDescriptor] = None

    @property
    def key(self) -> str:
        if self.kind is SectionKind.OTHER:
            return f"other({self.label})" if self.label else "other"
        return self.kind.value


@dataclass(frozen=True)
class VideoListing:
    """A plain keyword-search hit."""

    video_id: str
    title: str
    author: str
    duration_seconds: Optional[int] = None
    timestamp: Optional[str] = None
    views: int = 0
    kind: CandidateKind = CandidateKind.VIDEO


@dataclass
class Candidate:
    """A scored, playable search result."""

    title: str
    kind: CandidateKind
    author: str
    duration: str
    duration_ms: int
    source_id: str
    accuracy: float = 0.0
    backend: str = ""
    artists: List[NavigableRef] = field(default_factory=list)
    album: Optional[NavigableRef] = None
    x_filters: tuple[str, ...] = ()
    feed_resolver: Optional["FeedResolver"] = field(default=None, repr=False, compare=False)

    @property
    def type(self) -> str:
        return self.kind.value

    async def get_feeds(self) -> Dict[str, Any]:
        """Resolve playable feeds for this candidate's source."""
        if self.feed_resolver is None:
            raise RuntimeError(f"No feed resolver attached to candidate {self.source_id!r}")
        return await self.feed_resolver.get_feeds(self.source_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "type": self.type,
            "author": self.author,
            "duration": self.duration,
            "duration_ms": self.duration_ms,
            "videoId": self.source_id,
            "accuracy": round(self.accuracy, 2),
            "backend": self.backend,
        }
        if self.artists:
            data["artists"] = [{"name": ref.name, "id": ref.id} for ref in self.artists]
        if self.album is not None:
            data["album"] = {"name": self.album.name, "id": self.album.id}
        if self.x_filters:
            data["xFilters"] = list(self.x_filters)
        return data
