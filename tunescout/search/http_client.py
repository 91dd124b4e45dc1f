"""aiohttp transport shared by the HTTP-speaking backends."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Optional

import aiohttp

from tunescout import logger
from tunescout.__version__ import __version__
from tunescout.search.errors import SearchError
from tunescout.search.resilience import run_with_retries

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    f"(KHTML, like Gecko) Chrome/80.0.3987.132 Safari/537.36 Tunescout/{__version__}"
)


@dataclass
class HttpResponse:
    """Decoded response body plus the URL the request finally resolved to."""

    status: int
    url: str
    body: Any


class HttpTransport:
    """Thin aiohttp wrapper: shared session, JSON/text decoding, error wrapping."""

    def __init__(
        self,
        service_name: str = "HTTP",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10,
        max_attempts: int = 1,
    ):
        self.service_name = service_name
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def get_text(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        return await self.request("GET", url, params=params, headers=headers, timeout=timeout, expect_json=False)

    async def post_json(
        self,
        url: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        return await self.request(
            "POST", url, params=params, payload=payload, headers=headers, timeout=timeout, expect_json=True
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        expect_json: bool = True,
    ) -> HttpResponse:
        """Issue one request; any failure surfaces as SearchError."""
        log = logger.get_logger()
        log.api_request(method, url, params)
        request_start = time.time()
        session = await self._ensure_session()
        request_kwargs: Dict[str, Any] = {"params": params, "headers": headers}
        if payload is not None:
            request_kwargs["json"] = payload
        if timeout:
            request_kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

        async def _attempt() -> HttpResponse:
            async with session.request(method, url, **request_kwargs) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=text,
                        headers=response.headers,
                    )
                if expect_json:
                    body = await response.json(content_type=None)
                else:
                    body = await response.text()
                return HttpResponse(status=response.status, url=str(response.url), body=body)

        def _on_retry(attempt: int, max_attempts: int, delay: int, _exc: Exception) -> None:
            log.api_retry(self.service_name, attempt, max_attempts, delay)

        try:
            result = await run_with_retries(_attempt, max_attempts=self.max_attempts, on_retry=_on_retry)
        except aiohttp.ClientResponseError as exc:
            raise SearchError(
                f"{self.service_name} responded with HTTP {exc.status}",
                status_code=exc.status,
                status=_reason(exc.status),
                body=exc.message,
            ) from exc
        except (asyncio.TimeoutError, aiohttp.ClientError, json.JSONDecodeError) as exc:
            if self.max_attempts > 1:
                log.api_failed(self.service_name, self.max_attempts)
            raise SearchError(str(exc) or f"{self.service_name} request failed", status=type(exc).__name__) from exc

        log.api_response(result.status, result.body, (time.time() - request_start) * 1000)
        return result

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                self._session = aiohttp.ClientSession(
                    headers={"User-Agent": self.user_agent},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()


def _reason(status: int) -> str | None:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return None
