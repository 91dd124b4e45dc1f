"""YouTube keyword-search backend with filter-keyword query variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from tunescout import logger
from tunescout.backend_profile import resolve_backend_profile
from tunescout.config import YouTubeConfig
from tunescout.search.errors import SearchError
from tunescout.search.feeds import YOUTUBE_WATCH_URL, YtDlpFeedResolver, YtDlpKeywordSearcher
from tunescout.search.protocols import FeedResolver, KeywordSearcher
from tunescout.search.query import SearchQuery, build_search_query
from tunescout.search.scoring import dedupe_ranked, format_duration, youtube_accuracy
from tunescout.search.task_queue import Fulfilled, Rejected, TaskQueue
from tunescout.search.text import get_weight, strip_text
from tunescout.search.types import Candidate, VideoListing


@dataclass
class VariantResult:
    """Kept listings for one filter-keyword variant of a query."""

    x_filters: tuple[str, ...]
    highest_views: int = 0
    results: List[VideoListing] = field(default_factory=list)


class YouTube:
    """Search YouTube with several keyword variants in parallel and rank the union."""

    profile = resolve_backend_profile("youtube")

    def __init__(
        self,
        config: Optional[YouTubeConfig] = None,
        searcher: Optional[KeywordSearcher] = None,
        feed_resolver: Optional[FeedResolver] = None,
    ):
        self.config = config or YouTubeConfig()
        self._searcher = searcher or YtDlpKeywordSearcher()
        self._feed_resolver = feed_resolver or YtDlpFeedResolver(base_url=YOUTUBE_WATCH_URL)
        self.search_queue: TaskQueue[VariantResult] = TaskQueue(
            "YouTube:netSearchQueue",
            self.config.concurrency,
            self._search_variant,
        )

    async def _search_variant(self, stripped_meta: Sequence[str], x_filters: Sequence[str]) -> VariantResult:
        query = " ".join([*stripped_meta, *x_filters])
        listings = await self._searcher.search(query, self.config.page_start, self.config.page_end)
        variant = VariantResult(x_filters=tuple(x_filters))
        for item in listings:
            weight = get_weight(stripped_meta, strip_text([*item.title.split(" "), item.author]))
            if weight > self.config.min_weight:
                variant.results.append(item)
                variant.highest_views = max(variant.highest_views, item.views or 0)
        return variant

    async def search(self, artists: Any = None, track: Any = None, album: Any = None, duration: Any = None) -> List[Candidate]:
        """
        Search YouTube for a track.

        Arguments are shuffled like build_search_query: a numeric track or
        album is the duration in milliseconds, and a lone string is the track.
        """
        return await self.search_query(build_search_query(artists, track, album, duration))

    async def search_query(self, query: SearchQuery) -> List[Candidate]:
        stripped_artists = strip_text(query.artists)
        stripped_meta = [*strip_text(query.track.split(" ")), *stripped_artists]

        batch = [(stripped_meta, (keyword,) if keyword else ()) for keyword in self.config.filters]
        outcomes = await self.search_queue.push(batch)
        if outcomes and all(isinstance(outcome, Rejected) for outcome in outcomes):
            last = outcomes[-1]
            raise SearchError.wrap(last.error) from last.error

        variants = [outcome.value for outcome in outcomes if isinstance(outcome, Fulfilled)]
        highest_views = max((variant.highest_views for variant in variants), default=0)

        scored: List[Candidate] = []
        for variant in variants:
            for item in variant.results:
                actual_ms = (item.duration_seconds or 0) * 1000
                author_weight = get_weight(stripped_artists, strip_text([item.author]))
                scored.append(
                    Candidate(
                        title=item.title,
                        kind=item.kind,
                        author=item.author,
                        duration=item.timestamp or format_duration(item.duration_seconds),
                        duration_ms=actual_ms,
                        source_id=item.video_id,
                        accuracy=youtube_accuracy(query.duration, actual_ms, item.views or 0, highest_views, author_weight),
                        backend=self.profile.id,
                        x_filters=variant.x_filters,
                        feed_resolver=self._feed_resolver,
                    )
                )

        ranked = dedupe_ranked(scored)
        logger.get_logger().debug(
            f"{self.profile.description}: {len(variants)}/{len(outcomes)} variant(s) answered, "
            f"{len(ranked)} candidate(s) for {query.describe()}"
        )
        return ranked

    async def close(self) -> None:
        return None
