from __future__ import annotations

from pathlib import Path

import pytest

from tunescout import config as config_module
from tunescout.config import TunescoutConfig, load_config


def test_defaults_without_file() -> None:
    config = TunescoutConfig()

    assert config.youtube_music.timeout == 10
    assert config.youtube_music.max_attempts == 1
    assert (config.youtube_music.hl, config.youtube_music.gl) == ("en", "US")
    assert config.youtube.concurrency == 4
    assert config.youtube.filters == ["Official Audio", "Audio", "Lyrics", ""]
    assert (config.youtube.page_start, config.youtube.page_end) == (1, 2)
    assert config.feeds.socket_timeout == 20


def test_default_filters_are_not_shared() -> None:
    first = TunescoutConfig()
    first.youtube.filters.append("Live")

    assert TunescoutConfig().youtube.filters == ["Official Audio", "Audio", "Lyrics", ""]


def test_load_config_reads_sections(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[youtube_music]
hl = "fr"
gl = "FR"
max_attempts = 3

[youtube]
concurrency = 2
filters = ["Lyrics", ""]

[feeds]
socket_timeout = 5
""",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.config_path == path
    assert config.youtube_music.hl == "fr"
    assert config.youtube_music.max_attempts == 3
    assert config.youtube_music.timeout == 10
    assert config.youtube.concurrency == 2
    assert config.youtube.filters == ["Lyrics", ""]
    assert config.feeds.socket_timeout == 5


def test_load_config_missing_file_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(config_module.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    with pytest.raises(SystemExit) as exc_info:
        load_config(tmp_path / "missing.toml")

    assert exc_info.value.code == 1
    assert "Configuration file not found" in lines[0]


@pytest.mark.parametrize(
    "content",
    [
        "[youtube]\nconcurrency = 0\n",
        "[youtube_music]\ntimeout = -1\n",
        "[youtube\n",
        "[youtube]\nunknown = = 1\n",
    ],
)
def test_load_config_invalid_content_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, content: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    lines: list[str] = []
    monkeypatch.setattr(config_module.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    with pytest.raises(SystemExit) as exc_info:
        load_config(path)

    assert exc_info.value.code == 1
    assert "Error loading configuration" in lines[0]
