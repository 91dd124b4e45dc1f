#!/usr/bin/env python3
"""
cli.py - Entry point for TUNESCOUT
Rank playable sources for a track description.
"""

try:
    import asyncio
    import sys
    import argparse
    import json
    from pathlib import Path
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table
    from typing import Optional
    import tunescout as pkg
    from . import logger
    from .backend_profile import create_backend, resolve_backend_profile, supported_backends
    from .config import TunescoutConfig, load_config
    from .search.errors import SearchError, ValidationError
    from .search.query import build_search_query
    from .search.types import Candidate
except ImportError as e:
    print(f"Error: Missing required dependency: {e}")
    print("Please install required dependencies: pip install -e .")
    sys.exit(1)

console = Console()
err_console = Console(stderr=True)


def _ui_info(message: str) -> None:
    err_console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_warn(message: str) -> None:
    err_console.print(f"[yellow][WARNING][/yellow] {message}")


def _ui_error(message: str) -> None:
    err_console.print(f"[red][ERROR][/red] {escape(message)}")


def render_candidates(candidates: list[Candidate], backend_name: str) -> Table:
    """Build the results table for one search."""
    profile = resolve_backend_profile(backend_name)
    table = Table(title=f"{profile.description} candidates")
    table.add_column("#", justify="right", style="grey50")
    table.add_column("Accuracy", justify="right", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Author", style="yellow")
    table.add_column("Duration", justify="right")
    table.add_column("Source ID", style="grey50", no_wrap=True)
    for index, candidate in enumerate(candidates, start=1):
        table.add_row(
            str(index),
            f"{candidate.accuracy:.1f}",
            candidate.type,
            escape(candidate.title),
            escape(candidate.author),
            candidate.duration,
            candidate.source_id,
        )
    if not candidates:
        table.add_row("-", "-", "-", "[yellow]No candidates matched[/yellow]", "", "", "")
    return table


async def run_search(
    config: TunescoutConfig,
    backend_name: str,
    artists: list[str],
    track: Optional[str],
    album: Optional[str],
    duration: Optional[float],
    *,
    as_json: bool = False,
    feeds: bool = False,
) -> int:
    """Run one search and print the ranked candidates; returns the exit code."""
    query = build_search_query(artists, track, album, duration)
    backend = create_backend(backend_name, config)
    logger.debug(f"Searching {backend_name} for {query.describe()}")
    try:
        candidates = await backend.search_query(query)
        top_feeds = None
        if feeds and candidates:
            _ui_info(f"Resolving feeds for top candidate {candidates[0].source_id}...")
            top_feeds = await candidates[0].get_feeds()
    finally:
        await backend.close()

    if as_json:
        payload = {"query": query.describe(), "candidates": [candidate.to_dict() for candidate in candidates]}
        if top_feeds is not None:
            payload["feeds"] = top_feeds
        print(json.dumps(payload, indent=2, default=str))
    else:
        console.print(render_candidates(candidates, backend_name))
        if top_feeds is not None:
            formats = top_feeds.get("formats") or []
            _ui_info(f"Top candidate exposes {len(formats)} format(s)")
    return 0 if candidates else 2


def resolve_config_path(args_config: Optional[str]) -> Optional[Path]:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        return p

    cwd_candidate = Path.cwd() / "config.toml"
    if cwd_candidate.exists():
        return cwd_candidate
    return None


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"TUNESCOUT v{getattr(pkg, '__version__', '0.0.0')} - Rank playable sources for a track")
    print()
    parser.print_help()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tunescout", add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("-b", "--backend"), {"default": "yt_music", "choices": supported_backends(), "help": "Search backend (default: yt_music)"}),
        (("-a", "--artist"), {"action": "append", "default": [], "metavar": "NAME", "help": "Artist name (repeatable)"}),
        (("-l", "--album"), {"metavar": "NAME", "help": "Album name"}),
        (("-m", "--duration"), {"type": float, "metavar": "MS", "help": "Expected duration in milliseconds"}),
        (("-j", "--json"), {"action": "store_true", "help": "Print candidates as JSON"}),
        (("-f", "--feeds"), {"action": "store_true", "help": "Resolve playable feeds for the top candidate"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("-o", "--output"), {"metavar": "FILE", "help": "Also write the run log to FILE"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with API calls, JSON responses, timestamps"}),
    ):
        parser.add_argument(*args, **kwargs)
    parser.add_argument('track', nargs='?', help='Track title')
    return parser


def main(argv: Optional[list[str]] = None):
    """Entry point"""
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
        if args.help or not args.track:
            show_help(parser)
            sys.exit(0 if args.help else 1)

        config_path = resolve_config_path(args.config)
        config = load_config(config_path) if config_path else TunescoutConfig()

        log_file = Path(args.output).expanduser() if args.output else None
        with logger.TunescoutLogger(log_file=log_file, debug=args.debug, banner=args.debug or log_file is not None) as run_log:
            logger.set_logger(run_log)
            code = asyncio.run(
                run_search(
                    config,
                    args.backend,
                    args.artist,
                    args.track,
                    args.album,
                    args.duration,
                    as_json=args.json,
                    feeds=args.feeds,
                )
            )
        sys.exit(code)
    except KeyboardInterrupt:
        _ui_info("Interrupted")
        sys.exit(130)
    except ValidationError as e:
        _ui_error(f"Invalid search arguments: {e}")
        sys.exit(1)
    except SearchError as e:
        detail = f" (HTTP {e.status_code})" if e.status_code else ""
        _ui_error(f"Search failed{detail}: {e}")
        sys.exit(1)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
