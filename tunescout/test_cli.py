from __future__ import annotations

import asyncio
import json

import pytest

from tunescout import cli, logger
from tunescout.config import TunescoutConfig
from tunescout.search.errors import SearchError
from tunescout.search.types import Candidate, CandidateKind, NavigableRef


class _FakeResolver:
    async def get_feeds(self, source_id: str) -> dict:
        return {"id": source_id, "formats": [{"format_id": "251"}, {"format_id": "140"}]}


def _candidates() -> list[Candidate]:
    return [
        Candidate(
            title="One More Time",
            kind=CandidateKind.SONG,
            author="Daft Punk",
            duration="5:20",
            duration_ms=320000,
            source_id="FGBhQbmPwH8",
            accuracy=95.4545,
            backend="yt_music",
            artists=[NavigableRef("Daft Punk", "UC_kRDKYrUlrbtrSiyu5Tflg")],
            feed_resolver=_FakeResolver(),
        )
    ]


class _FakeBackend:
    def __init__(self, results: list[Candidate] | Exception) -> None:
        self.results = results
        self.queries = []
        self.closed = False

    async def search_query(self, query):
        self.queries.append(query)
        if isinstance(self.results, Exception):
            raise self.results
        return self.results

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setattr(logger, "_logger", None)
    monkeypatch.chdir(tmp_path)


def _install_backend(monkeypatch: pytest.MonkeyPatch, backend: _FakeBackend) -> list[str]:
    names: list[str] = []

    def _fake_create(name: str, _config=None):
        names.append(name)
        return backend

    monkeypatch.setattr(cli, "create_backend", _fake_create)
    return names


def test_ui_helpers_emit_prefixed_messages(monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(cli.err_console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    cli._ui_info("hello")
    cli._ui_warn("careful")
    cli._ui_error("boom [x]")

    assert lines == [
        "[cyan][INFO][/cyan] hello",
        "[yellow][WARNING][/yellow] careful",
        "[red][ERROR][/red] boom \\[x]",
    ]


def test_render_candidates_table() -> None:
    table = cli.render_candidates(_candidates(), "yt_music")

    assert table.title == "YouTube Music candidates"
    assert table.row_count == 1
    assert [column.header for column in table.columns][:3] == ["#", "Accuracy", "Type"]


def test_render_candidates_without_results() -> None:
    table = cli.render_candidates([], "youtube")

    assert table.row_count == 1
    assert table.title == "YouTube candidates"


def test_run_search_prints_json(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    backend = _FakeBackend(_candidates())
    names = _install_backend(monkeypatch, backend)

    code = asyncio.run(
        cli.run_search(TunescoutConfig(), "yt_music", ["Daft Punk"], "One More Time", None, 320000, as_json=True)
    )

    assert code == 0
    assert names == ["yt_music"]
    assert backend.closed
    assert backend.queries[0].artists == ("Daft Punk",)
    payload = json.loads(capsys.readouterr().out)
    assert payload["candidates"][0]["videoId"] == "FGBhQbmPwH8"
    assert payload["candidates"][0]["accuracy"] == 95.45
    assert payload["candidates"][0]["artists"] == [{"name": "Daft Punk", "id": "UC_kRDKYrUlrbtrSiyu5Tflg"}]
    assert "feeds" not in payload


def test_run_search_resolves_top_feeds(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _install_backend(monkeypatch, _FakeBackend(_candidates()))
    monkeypatch.setattr(cli.err_console, "print", lambda *_args, **_kwargs: None)

    asyncio.run(
        cli.run_search(TunescoutConfig(), "yt_music", [], "One More Time", None, None, as_json=True, feeds=True)
    )

    payload = json.loads(capsys.readouterr().out)
    assert payload["feeds"]["id"] == "FGBhQbmPwH8"
    assert len(payload["feeds"]["formats"]) == 2


def test_run_search_without_candidates_returns_2(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([])
    _install_backend(monkeypatch, backend)
    monkeypatch.setattr(cli.console, "print", lambda *_args, **_kwargs: None)

    code = asyncio.run(cli.run_search(TunescoutConfig(), "youtube", [], "One More Time", None, None))

    assert code == 2
    assert backend.closed


def test_run_search_closes_backend_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend(SearchError("down"))
    _install_backend(monkeypatch, backend)

    with pytest.raises(SearchError):
        asyncio.run(cli.run_search(TunescoutConfig(), "youtube", [], "One More Time", None, None))
    assert backend.closed


def test_main_without_track_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 1
    assert "TUNESCOUT v" in capsys.readouterr().out


def test_main_help_exits_zero() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--help"])

    assert exc_info.value.code == 0


def test_main_passes_arguments_to_backend(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    backend = _FakeBackend(_candidates())
    names = _install_backend(monkeypatch, backend)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-b", "youtube", "-a", "Daft Punk", "-a", "Romanthony", "-l", "Discovery", "-m", "320000", "-j", "One More Time"])

    assert exc_info.value.code == 0
    assert names == ["youtube"]
    query = backend.queries[0]
    assert query.track == "One More Time"
    assert query.artists == ("Daft Punk", "Romanthony")
    assert query.album == "Discovery"
    assert query.duration == 320000
    assert json.loads(capsys.readouterr().out)["candidates"][0]["type"] == "song"


def test_main_reports_invalid_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend(_candidates())
    names = _install_backend(monkeypatch, backend)
    lines: list[str] = []
    monkeypatch.setattr(cli.err_console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-m", "-5", "One More Time"])

    assert exc_info.value.code == 1
    assert names == []
    assert "Invalid search arguments" in lines[0]


def test_main_reports_search_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_backend(monkeypatch, _FakeBackend(SearchError("YouTube Music responded with HTTP 503", status_code=503)))
    lines: list[str] = []
    monkeypatch.setattr(cli.err_console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["One More Time"])

    assert exc_info.value.code == 1
    assert lines == ["[red][ERROR][/red] Search failed (HTTP 503): YouTube Music responded with HTTP 503"]


def test_resolve_config_path(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli.resolve_config_path(None) is None

    (tmp_path / "config.toml").write_text("", encoding="utf-8")
    assert cli.resolve_config_path(None) == tmp_path / "config.toml"
    assert cli.resolve_config_path(str(tmp_path)) == tmp_path / "config.toml"
    assert cli.resolve_config_path(str(tmp_path / "other.toml")) == tmp_path / "other.toml"
