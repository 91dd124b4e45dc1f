"""Central backend capability definitions and adapter construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from tunescout.config import TunescoutConfig
    from tunescout.search.youtube_client import YouTube
    from tunescout.search.ytmusic_client import YouTubeMusic

DEFAULT_BITRATES = (96, 128, 160, 192, 256, 320)


@dataclass(frozen=True)
class BackendProfile:
    id: str
    description: str
    queryable: bool = False
    searchable: bool = True
    sourceable: bool = True
    bitrates: tuple[int, ...] = DEFAULT_BITRATES


_BACKEND_PROFILES: dict[str, BackendProfile] = {
    "yt_music": BackendProfile(id="yt_music", description="YouTube Music"),
    "youtube": BackendProfile(id="youtube", description="YouTube"),
}


def _normalize_backend_name(backend_name: str | None) -> str:
    return (backend_name or "").strip().lower()


def supported_backends() -> tuple[str, ...]:
    return tuple(_BACKEND_PROFILES)


def resolve_backend_profile(backend_name: str | None) -> BackendProfile:
    normalized = _normalize_backend_name(backend_name)
    profile = _BACKEND_PROFILES.get(normalized)
    if profile is not None:
        return profile
    supported = ", ".join(sorted(_BACKEND_PROFILES))
    raise ValueError(
        f"Unsupported backend '{backend_name}'. Supported backends: {supported}."
    )


def create_backend(
    backend_name: str,
    config: Optional["TunescoutConfig"] = None,
) -> Union["YouTubeMusic", "YouTube"]:
    """Build the search adapter for ``backend_name`` from ``config``."""
    from tunescout.config import TunescoutConfig
    from tunescout.search.feeds import (
        YOUTUBE_MUSIC_WATCH_URL,
        YOUTUBE_WATCH_URL,
        YtDlpFeedResolver,
    )
    from tunescout.search.youtube_client import YouTube
    from tunescout.search.ytmusic_client import YouTubeMusic

    profile = resolve_backend_profile(backend_name)
    config = config or TunescoutConfig()
    if profile.id == "yt_music":
        resolver = YtDlpFeedResolver(YOUTUBE_MUSIC_WATCH_URL, socket_timeout=config.feeds.socket_timeout)
        return YouTubeMusic(config.youtube_music, feed_resolver=resolver)
    resolver = YtDlpFeedResolver(YOUTUBE_WATCH_URL, socket_timeout=config.feeds.socket_timeout)
    return YouTube(config.youtube, feed_resolver=resolver)
