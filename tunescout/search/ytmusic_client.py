"""YouTube Music search backend (innertube API, session-token based)."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from tunescout import logger
from tunescout.backend_profile import resolve_backend_profile
from tunescout.config import YouTubeMusicConfig
from tunescout.search.errors import ConfigDerivationError, SearchError
from tunescout.search.feeds import YOUTUBE_MUSIC_WATCH_URL, YtDlpFeedResolver
from tunescout.search.http_client import HttpTransport
from tunescout.search.protocols import FeedResolver
from tunescout.search.query import SearchQuery, build_search_query
from tunescout.search.scoring import (
    YTM_MIN_ACCURACY,
    YTM_MIN_WEIGHT,
    dedupe_ranked,
    parse_duration_ms,
    ytmusic_accuracy,
)
from tunescout.search.session_config import BackendConfig, BackendConfigCell, parse_ytcfg
from tunescout.search.text import get_weight, strip_text
from tunescout.search.types import (
    SECTION_LABELS,
    Candidate,
    CandidateKind,
    ContinuationToken,
    ExpansionDescriptor,
    NavigableRef,
    RawCandidate,
    Section,
    SectionKind,
)
from tunescout.search.walker import walk

YTM_HOME_URL = "https://music.youtube.com/"
YTM_SEARCH_URL = "https://music.youtube.com/youtubei/v1/search"
YTM_REFERER = "https://music.youtube.com/search"
YTM_UNAVAILABLE_URL = "https://music.youtube.com/coming-soon/"

# Browse ids of artist channels start with this prefix; albums and playlists
# use other prefixes. Undocumented upstream, recheck if artists go missing.
CHANNEL_ID_PREFIX = "UC"

SEPARATOR_TEXT = " • "

YTM_PATHS = {
    "PLAY_BUTTON": ("overlay", "musicItemThumbnailOverlayRenderer", "content", "musicPlayButtonRenderer"),
    "NAVIGATION_BROWSE_ID": ("navigationEndpoint", "browseEndpoint", "browseId"),
    "NAVIGATION_VIDEO_ID": ("navigationEndpoint", "watchEndpoint", "videoId"),
    "SECTION_LIST": ("sectionListRenderer", "contents"),
    "TABBED_SECTION_LIST": (
        "contents", "tabbedSearchResultsRenderer", "tabs", 0, "tabRenderer", "content", "sectionListRenderer", "contents",
    ),
    "TITLE_TEXT": ("title", "runs", 0, "text"),
}

_TITLED_KINDS = {CandidateKind.SONG, CandidateKind.VIDEO, CandidateKind.ALBUM, CandidateKind.PLAYLIST}
_PLAYABLE_KINDS = {CandidateKind.SONG, CandidateKind.VIDEO}
_BROWSABLE_KINDS = {CandidateKind.ARTIST, CandidateKind.ALBUM, CandidateKind.PLAYLIST}


def _item_runs(item: Mapping[str, Any], index: int) -> List[Dict[str, Any]]:
    runs = walk(item, "flexColumns", index, "musicResponsiveListItemFlexColumnRenderer", "text", "runs")
    return [run for run in runs if isinstance(run, dict)] if isinstance(runs, list) else []


def _item_text(item: Mapping[str, Any], index: int, run_index: int = 0) -> Optional[str]:
    return walk(_item_runs(item, index), run_index, "text")


def _leading_number(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return text.split(" ")[0]


def parse_item(content: Mapping[str, Any], section_label: Optional[str]) -> Optional[RawCandidate]:
    """Turn one ``musicResponsiveListItemRenderer`` into a RawCandidate, or None to discard it."""
    if section_label == "Songs":
        type_label = "song"
    else:
        type_label = (_item_text(content, 1) or "").lower()
    kind = CandidateKind.from_label(type_label)
    result = RawCandidate(kind=kind, label=type_label or None)

    runs = [run for run in _item_runs(content, 1) if run.get("text") != SEPARATOR_TEXT]
    last_text = walk(runs, len(runs) - 1, "text") if runs else None

    if kind in _TITLED_KINDS:
        result.title = _item_text(content, 0)
        for run in runs:
            if "navigationEndpoint" not in run:
                continue
            ref_id = walk(run, YTM_PATHS["NAVIGATION_BROWSE_ID"])
            if not ref_id:
                continue
            ref = NavigableRef(name=run.get("text", ""), id=ref_id)
            if ref_id.startswith(CHANNEL_ID_PREFIX):
                result.artists.append(ref)
            else:
                result.album = ref

    if kind in _PLAYABLE_KINDS:
        result.video_id = walk(content, YTM_PATHS["PLAY_BUTTON"], "playNavigationEndpoint", "watchEndpoint", "videoId")

    if kind in _BROWSABLE_KINDS:
        result.browse_id = walk(content, YTM_PATHS["NAVIGATION_BROWSE_ID"])
        if not result.browse_id:
            return None

    if kind is CandidateKind.SONG:
        result.duration = last_text
    elif kind is CandidateKind.VIDEO:
        result.album = None
        if len(runs) >= 2:
            result.views = _leading_number(runs[-2].get("text"))
        result.duration = last_text
    elif kind is CandidateKind.ALBUM:
        result.album = None
        result.album_type = (walk(runs, 0, "text") or type_label).lower()
        result.year = last_text
    elif kind is CandidateKind.ARTIST:
        result.title = _item_text(content, 0)
        result.subscribers = _leading_number(last_text)
    elif kind is CandidateKind.PLAYLIST:
        result.album = None
        count = (_leading_number(last_text) or "").replace(",", "")
        result.item_count = int(count) if count.isdigit() else None

    return result


def _continuation_token(layer: Mapping[str, Any]) -> Optional[ContinuationToken]:
    data = walk(layer, "continuations", 0, "nextContinuationData")
    if not isinstance(data, dict) or not data.get("continuation"):
        return None
    return ContinuationToken(
        continuation=data["continuation"],
        click_tracking_params=data.get("clickTrackingParams"),
    )


def _expansion_descriptor(layer: Mapping[str, Any]) -> Optional[ExpansionDescriptor]:
    endpoint = walk(layer, "bottomEndpoint", "searchEndpoint")
    if not isinstance(endpoint, dict) or not endpoint.get("query"):
        return None
    return ExpansionDescriptor(query=endpoint["query"], params=endpoint.get("params"))


def parse_section(layer: Mapping[str, Any]) -> Section:
    label = walk(layer, YTM_PATHS["TITLE_TEXT"])
    kind = SECTION_LABELS.get(label, SectionKind.OTHER)
    contents: List[RawCandidate] = []
    for entry in layer.get("contents") or []:
        content = walk(entry, "musicResponsiveListItemRenderer")
        if not isinstance(content, dict):
            continue
        item = parse_item(content, label)
        if item is not None:
            contents.append(item)
    section = Section(kind=kind, label=label, contents=contents)
    if kind is not SectionKind.TOP:
        section.continuation = _continuation_token(layer)
        section.expansion = _expansion_descriptor(layer)
    return section


def parse_sections(response: Mapping[str, Any]) -> List[Section]:
    """Split a search (or continuation) response into its shelves."""
    if "continuationContents" in response:
        layer = (
            walk(response, "continuationContents", "musicShelfContinuation")
            or walk(response, "continuationContents", "sectionListContinuation")
        )
        return [parse_section(layer)] if isinstance(layer, dict) else []

    shelves = walk(response, YTM_PATHS["TABBED_SECTION_LIST"])
    if shelves is None:
        shelves = walk(response, "contents", YTM_PATHS["SECTION_LIST"]) or walk(response, YTM_PATHS["SECTION_LIST"])
    sections: List[Section] = []
    for shelf in shelves or []:
        if not isinstance(shelf, dict):
            continue
        layer = shelf.get("musicShelfRenderer", shelf)
        sections.append(parse_section(layer))
    return sections


class YouTubeMusic:
    """Search YouTube Music and rank songs/videos against track metadata."""

    profile = resolve_backend_profile("yt_music")

    def __init__(
        self,
        config: Optional[YouTubeMusicConfig] = None,
        transport: Optional[HttpTransport] = None,
        feed_resolver: Optional[FeedResolver] = None,
    ):
        self.config = config or YouTubeMusicConfig()
        self._transport = transport or HttpTransport(
            service_name=self.profile.description,
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            max_attempts=self.config.max_attempts,
        )
        self._feed_resolver = feed_resolver or YtDlpFeedResolver(base_url=YOUTUBE_MUSIC_WATCH_URL)
        self.api_config = BackendConfigCell(derive=self._derive_config)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self._transport.request(method, url, **kwargs)
        if response.url == YTM_UNAVAILABLE_URL:
            raise ConfigDerivationError("YouTube Music is not available in your country")
        return response.body

    async def _derive_config(self) -> BackendConfig:
        logger.get_logger().debug("Deriving YouTube Music session configuration")
        body = await self._request("GET", YTM_HOME_URL, expect_json=False)
        return parse_ytcfg(body)

    async def refresh_config(self) -> BackendConfig:
        """Re-derive the session configuration, e.g. after suspected staleness."""
        return await self.api_config.force_refresh()

    async def search_sections(
        self,
        query_object: Mapping[str, Any],
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Section]:
        """Run one raw search request and return its parsed shelves."""
        if not isinstance(query_object, Mapping):
            raise TypeError("query_object must be a mapping")
        if params is not None and not isinstance(params, Mapping):
            raise TypeError("params, if defined, must be a mapping")

        api_config = await self.api_config.get_or_derive()
        response = await self._request(
            "POST",
            YTM_SEARCH_URL,
            timeout=self.config.timeout,
            params={"alt": "json", "key": api_config.api_key, **(params or {})},
            payload={
                "context": {
                    "client": {
                        "clientName": api_config.client_name,
                        "clientVersion": api_config.client_version,
                        "hl": self.config.hl,
                        "gl": self.config.gl,
                    },
                },
                **query_object,
            },
            headers={"referer": YTM_REFERER},
        )
        if not isinstance(response, dict):
            raise SearchError("YouTube Music returned a non-object search response")
        return parse_sections(response)

    async def continue_section(self, token: ContinuationToken) -> Optional[Section]:
        """Fetch the next page of a section."""
        sections = await self.search_sections({}, token.as_params())
        return sections[0] if sections else None

    async def expand_section(self, descriptor: ExpansionDescriptor) -> Optional[Section]:
        """Fetch the full listing behind a section's "show all" endpoint."""
        sections = await self.search_sections(descriptor.as_query_object(), {})
        for section in sections:
            if section.kind is SectionKind.OTHER:
                return section
        return sections[0] if sections else None

    async def search(self, artists: Any = None, track: Any = None, album: Any = None, duration: Any = None) -> List[Candidate]:
        """
        Search YouTube Music for a track.

        Arguments are shuffled like build_search_query: a numeric track or
        album is the duration in milliseconds, and a lone string is the track.
        """
        return await self.search_query(build_search_query(artists, track, album, duration))

    async def search_query(self, query: SearchQuery) -> List[Candidate]:
        sections = await self.search_sections({"query": query.search_text})
        stripped_meta = strip_text([*query.track.split(" "), query.album, *query.artists])

        wanted = (SectionKind.TOP, SectionKind.SONGS, SectionKind.VIDEOS)
        items = [
            item
            for kind in wanted
            for section in sections
            if section.kind is kind
            for item in section.contents
        ]

        scored: List[Candidate] = []
        for item in items:
            if item.kind not in _PLAYABLE_KINDS or not item.title or not item.video_id:
                continue
            weight = get_weight(
                stripped_meta,
                strip_text([
                    *item.title.split(" "),
                    *(item.album.name.split(" ") if item.album else []),
                    *(artist.name for artist in item.artists),
                ]),
            )
            if weight <= YTM_MIN_WEIGHT:
                continue
            duration_ms = parse_duration_ms(item.duration)
            if duration_ms is None:
                logger.get_logger().debug(f"Skipping {item.video_id}: unreadable duration {item.duration!r}")
                continue
            scored.append(
                Candidate(
                    title=item.title,
                    kind=item.kind,
                    author=", ".join(artist.name for artist in item.artists),
                    duration=item.duration or "",
                    duration_ms=duration_ms,
                    source_id=item.video_id,
                    accuracy=ytmusic_accuracy(weight, item.kind, query.duration, duration_ms),
                    backend=self.profile.id,
                    artists=list(item.artists),
                    album=item.album,
                    feed_resolver=self._feed_resolver,
                )
            )

        ranked = dedupe_ranked(scored, min_accuracy=YTM_MIN_ACCURACY)
        logger.get_logger().debug(
            f"{self.profile.description}: {len(items)} raw item(s), {len(ranked)} candidate(s) for {query.describe()}"
        )
        return ranked

    async def close(self) -> None:
        await self._transport.close()
