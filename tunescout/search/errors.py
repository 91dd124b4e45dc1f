"""Error types raised by the search engine."""

from __future__ import annotations

from typing import Optional


class TunescoutError(Exception):
    """Base class for tunescout failures."""


class ValidationError(TunescoutError, ValueError):
    """Raised when search arguments are unusable, before any request is made."""


class SearchError(TunescoutError):
    """A backend or transport failure, with whatever response detail was available."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status: Optional[str] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.status = status
        self.body = body

    @classmethod
    def wrap(cls, exc: BaseException) -> "SearchError":
        """Re-express ``exc`` as a search error, keeping status detail if present."""
        if isinstance(exc, SearchError):
            return cls(str(exc), exc.status_code, exc.status, exc.body)
        return cls(str(exc) or type(exc).__name__, status=type(exc).__name__)


class ConfigDerivationError(SearchError):
    """Backend session parameters could not be derived from its landing page."""
