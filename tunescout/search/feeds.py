"""yt-dlp backed collaborators: feed resolution and plain keyword search."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, ExtractorError

from tunescout import logger
from tunescout.search.errors import SearchError
from tunescout.search.scoring import format_duration
from tunescout.search.types import VideoListing

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="
YOUTUBE_MUSIC_WATCH_URL = "https://music.youtube.com/watch?v="
RESULTS_PER_PAGE = 20


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if cleaned.isdigit():
            return int(cleaned)
    return 0


class YtDlpFeedResolver:
    """Resolve a video id to yt-dlp's info dict (formats, urls, bitrates)."""

    def __init__(self, base_url: str = YOUTUBE_WATCH_URL, socket_timeout: int = 20):
        self.base_url = base_url
        self.socket_timeout = socket_timeout

    def _options(self) -> Dict[str, Any]:
        return {
            "skip_download": True,
            "quiet": True,
            "no_warnings": True,
            "cachedir": False,
            "socket_timeout": self.socket_timeout,
        }

    def _extract(self, url: str) -> Dict[str, Any]:
        with YoutubeDL(self._options()) as ydl:
            info = ydl.extract_info(url, download=False)
        if not isinstance(info, dict):
            raise SearchError(f"No feed information returned for {url}")
        return ydl.sanitize_info(info)

    async def get_feeds(self, source_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}{source_id}"
        logger.get_logger().debug(f"Resolving feeds for {url}")
        try:
            return await asyncio.to_thread(self._extract, url)
        except (DownloadError, ExtractorError) as exc:
            raise SearchError(f"Feed resolution failed for {source_id}: {exc}", status=type(exc).__name__) from exc


class YtDlpKeywordSearcher:
    """Keyword video search through yt-dlp's ``ytsearchN:`` extractor."""

    def __init__(self, socket_timeout: int = 10, results_per_page: int = RESULTS_PER_PAGE):
        self.socket_timeout = socket_timeout
        self.results_per_page = results_per_page

    def _options(self) -> Dict[str, Any]:
        return {
            "skip_download": True,
            "quiet": True,
            "no_warnings": True,
            "extract_flat": "in_playlist",
            "cachedir": False,
            "socket_timeout": self.socket_timeout,
        }

    def _extract(self, search_term: str) -> Optional[Dict[str, Any]]:
        with YoutubeDL(self._options()) as ydl:
            return ydl.extract_info(search_term, download=False)

    async def search(self, query: str, page_start: int = 1, page_end: int = 2) -> List[VideoListing]:
        if page_start < 1 or page_end < page_start:
            raise ValueError("page range must satisfy 1 <= page_start <= page_end")
        limit = page_end * self.results_per_page
        skip = (page_start - 1) * self.results_per_page
        try:
            info = await asyncio.to_thread(self._extract, f"ytsearch{limit}:{query}")
        except (DownloadError, ExtractorError) as exc:
            raise SearchError(f"Keyword search failed for '{query}': {exc}", status=type(exc).__name__) from exc

        entries = info.get("entries") if isinstance(info, dict) else None
        listings: List[VideoListing] = []
        for entry in list(entries or [])[skip:]:
            listing = self._map_entry(entry)
            if listing is not None:
                listings.append(listing)
        return listings

    @staticmethod
    def _map_entry(entry: object) -> Optional[VideoListing]:
        if not isinstance(entry, dict):
            return None
        video_id = entry.get("id")
        title = entry.get("title")
        if not video_id or not title:
            return None
        duration = entry.get("duration")
        seconds = int(duration) if isinstance(duration, (int, float)) else None
        return VideoListing(
            video_id=str(video_id),
            title=str(title),
            author=str(entry.get("channel") or entry.get("uploader") or ""),
            duration_seconds=seconds,
            timestamp=format_duration(seconds) if seconds is not None else None,
            views=_as_int(entry.get("view_count")),
        )
