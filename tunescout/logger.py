"""
Run log for Tunescout.
Every message goes to stderr (stdout stays free for --json) and, when a log
file is given, to that file as well.
"""
import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import IO, Optional

from .__version__ import __version__

RESPONSE_TRUNCATE_CHARS = 5000


class TunescoutLogger:
    """Screen + optional file logger with a debug switch for transport traces"""

    def __init__(self, log_file: Optional[Path] = None, debug: bool = False, banner: bool = True):
        self.log_file = log_file
        self.debug_mode = debug
        self._started = datetime.now()
        self._sink: Optional[IO[str]] = None

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._sink = log_file.open("w", buffering=1, encoding="utf-8")

        if banner:
            self.log(f"({self._started:%H:%M:%S}  Started Tunescout {__version__})")

    def log(self, msg: str, prefix: str = ""):
        """Write one line to stderr and the log file"""
        line = prefix + msg
        print(line, file=sys.stderr, flush=True)
        if self._sink is not None:
            self._sink.write(line + "\n")
            self._sink.flush()
            os.fsync(self._sink.fileno())

    def info(self, msg: str):
        self.log(msg)

    def warning(self, msg: str):
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        self.log(msg, "[ERROR] ")

    def debug(self, msg: str):
        """Timestamped line, dropped unless debug mode is on"""
        if self.debug_mode:
            self.log(msg, f"[{self._timestamp()}] [DEBUG] ")

    def _trace(self, msg: str):
        self.log(msg, f"[{self._timestamp()}] ")

    def api_retry(self, service: str, attempt: int, max_attempts: int, delay: int):
        self.warning(f"{service} request failed. Retrying in {delay}s... (attempt {attempt}/{max_attempts})")

    def api_failed(self, service: str, max_attempts: int):
        self.error(f"{service} not responding after {max_attempts} attempt(s). Aborting.")

    def api_request(self, method: str, url: str, params: Optional[dict]):
        """Outgoing request line plus query params (debug mode only)"""
        if not self.debug_mode:
            return
        self._trace(f"API Request: {method} {url}")
        if params:
            self._trace(f"  Params: {json.dumps(params, indent=2, default=str)}")

    def api_response(self, status: int, data: object, elapsed_ms: float):
        """Response status, timing and a truncated body dump (debug mode only)"""
        if not self.debug_mode:
            return
        self._trace(f"API Response ({elapsed_ms:.0f}ms): Status {status}")
        if not data:
            return
        dump = data if isinstance(data, str) else json.dumps(data, indent=2, default=str)
        if len(dump) > RESPONSE_TRUNCATE_CHARS:
            dump = dump[:RESPONSE_TRUNCATE_CHARS] + "\n  ... (truncated)"
        self._trace(f"  Data: {dump}")

    def queue_settled(self, queue_name: str, fulfilled: int, rejected: int):
        self.debug(f"{queue_name}: batch settled, {fulfilled} fulfilled, {rejected} rejected")

    def close(self):
        """Write the elapsed-time footer and release the log file"""
        if self._sink is None:
            return
        ended = datetime.now()
        elapsed = (ended - self._started).total_seconds()
        self.log(f"({ended:%H:%M:%S}  Ended session, elapsed {elapsed:.1f}s)")
        self._sink.close()
        self._sink = None

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%H:%M:%S.%f")[:-3]

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# Process-wide instance, installed by the CLI
_logger: Optional[TunescoutLogger] = None


def set_logger(logger: TunescoutLogger):
    global _logger
    _logger = logger


def get_logger() -> TunescoutLogger:
    """Return the installed logger, creating a quiet one for library use"""
    global _logger
    if _logger is None:
        _logger = TunescoutLogger(banner=False)
    return _logger


def log(msg: str):
    get_logger().log(msg)


def info(msg: str):
    get_logger().info(msg)


def warning(msg: str):
    get_logger().warning(msg)


def error(msg: str):
    get_logger().error(msg)


def debug(msg: str):
    get_logger().debug(msg)
