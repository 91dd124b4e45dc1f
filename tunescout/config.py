"""
config.py - Configuration model for Tunescout
"""

import sys
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

from .search.http_client import DEFAULT_USER_AGENT

console = Console(stderr=True)

DEFAULT_FILTERS = ["Official Audio", "Audio", "Lyrics", ""]


class YouTubeMusicConfig(BaseModel):
    """Transport settings for the YouTube Music backend."""

    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(default=10, gt=0, description="Per-request timeout in seconds")
    hl: str = Field(default="en", description="Interface language sent with every search")
    gl: str = Field(default="US", description="Region sent with every search")
    max_attempts: int = Field(
        default=1,
        ge=1,
        description="Transport attempts per request; 1 disables retries",
    )


class YouTubeConfig(BaseModel):
    """Parameters for the YouTube keyword-variant search."""

    concurrency: int = Field(default=4, ge=1, description="Variant searches allowed in flight")
    filters: List[str] = Field(
        default_factory=lambda: list(DEFAULT_FILTERS),
        description="Keywords appended to the query, one search per entry ('' = no keyword)",
    )
    page_start: int = Field(default=1, ge=1)
    page_end: int = Field(default=2, ge=1)
    min_weight: float = Field(
        default=70,
        ge=0,
        le=100,
        description="Title/author weight a listing must exceed to be kept",
    )


class FeedConfig(BaseModel):
    socket_timeout: int = 20


class TunescoutConfig(BaseModel):
    youtube_music: YouTubeMusicConfig = Field(default_factory=YouTubeMusicConfig)
    youtube: YouTubeConfig = Field(default_factory=YouTubeConfig)
    feeds: FeedConfig = Field(default_factory=FeedConfig)
    config_path: Optional[Path] = None


def load_config(config_path: Path) -> TunescoutConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Create config.toml or run without --config to use defaults")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        return TunescoutConfig(
            youtube_music=YouTubeMusicConfig(**config_data.get("youtube_music", {})),
            youtube=YouTubeConfig(**config_data.get("youtube", {})),
            feeds=FeedConfig(**config_data.get("feeds", {})),
            config_path=config_path,
        )

    except (OSError, tomllib.TOMLDecodeError, ValidationError, TypeError) as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
