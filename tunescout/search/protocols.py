"""Protocol definitions for the collaborators the backends depend on."""

from __future__ import annotations

from typing import Any, Dict, Protocol, Sequence

from tunescout.search.types import VideoListing


class FeedResolver(Protocol):
    """Turns a source identifier into playable feed metadata."""

    async def get_feeds(self, source_id: str) -> Dict[str, Any]:
        ...


class KeywordSearcher(Protocol):
    """Plain keyword video search used by the YouTube backend."""

    async def search(self, query: str, page_start: int = 1, page_end: int = 2) -> Sequence[VideoListing]:
        ...
