"""In-memory cache for a backend's derived session parameters."""

from __future__ import annotations

import json
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from tunescout.search.errors import ConfigDerivationError

_YTCFG_PATTERN = re.compile(r"ytcfg\.set\s*\(\s*({.+})\s*\)\s*;")


@dataclass(frozen=True)
class BackendConfig:
    api_key: str
    client_name: str
    client_version: str

    @classmethod
    def from_ytcfg(cls, ytcfg: Mapping[str, Any]) -> "BackendConfig":
        values = {
            "api_key": ytcfg.get("INNERTUBE_API_KEY"),
            "client_name": ytcfg.get("INNERTUBE_CLIENT_NAME"),
            "client_version": ytcfg.get("INNERTUBE_CLIENT_VERSION"),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigDerivationError(f"Embedded configuration is missing {', '.join(missing)}")
        return cls(**{name: str(value) for name, value in values.items()})


def parse_ytcfg(page: Optional[str]) -> BackendConfig:
    """Find the first ``ytcfg.set({...});`` call carrying innertube keys on a landing page."""
    for match in _YTCFG_PATTERN.finditer(page or ""):
        try:
            ytcfg = json.loads(match.group(1))
        except json.JSONDecodeError:
            continue
        if isinstance(ytcfg, dict) and "INNERTUBE_API_KEY" in ytcfg:
            return BackendConfig.from_ytcfg(ytcfg)
    raise ConfigDerivationError("Failed to extract YouTube Music Configuration")


@dataclass
class BackendConfigCell:
    """
    Lazily derived, force-refreshable holder for one adapter's BackendConfig.

    Concurrent first use may derive twice; the last result wins.
    """

    derive: Callable[[], Awaitable[BackendConfig]]
    value: Optional[BackendConfig] = None
    derived_at: Optional[datetime] = None

    async def get_or_derive(self) -> BackendConfig:
        if self.value is not None:
            return self.value
        return await self.force_refresh()

    async def force_refresh(self) -> BackendConfig:
        config = await self.derive()
        self.value = config
        self.derived_at = datetime.now()
        return config

    def invalidate(self) -> None:
        self.value = None
        self.derived_at = None

    def is_empty(self) -> bool:
        return self.value is None
