"""Fetch graph JSON from an HTTP(S) URL or a local path."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx

from forcegraph.config import Settings
from forcegraph.utils.exceptions import TransportError
from forcegraph.utils.logging import get_logger
from forcegraph.utils.retry import async_retry

logger = get_logger(__name__)


def is_http_locator(locator: str) -> bool:
    return urlparse(locator).scheme in ("http", "https")


class DataLoader:
    """Resolves a data locator to parsed JSON.

    HTTP failures are retried with backoff when transient (network errors,
    5xx, 429); everything that still fails surfaces as ``TransportError``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_attempts: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> DataLoader:
        return cls(
            timeout=settings.FETCH_TIMEOUT_SECONDS,
            max_attempts=settings.FETCH_MAX_ATTEMPTS,
        )

    async def fetch(self, locator: str) -> Any:
        try:
            remote = is_http_locator(locator)
        except ValueError as exc:
            raise TransportError(f"invalid data locator {locator!r}: {exc}") from exc

        if remote:
            try:
                return await self._get_json(locator, max_attempts=self._max_attempts)
            except httpx.HTTPStatusError as exc:
                raise TransportError(
                    f"GET {locator} failed with status {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                raise TransportError(f"GET {locator} failed: {exc}") from exc
            except httpx.InvalidURL as exc:
                raise TransportError(f"invalid data locator {locator!r}: {exc}") from exc
            except ValueError as exc:
                raise TransportError(f"GET {locator} returned invalid JSON: {exc}") from exc
        return await self._read_json(locator)

    @async_retry(retryable_exceptions=(httpx.TransportError, httpx.HTTPStatusError))
    async def _get_json(self, url: str) -> Any:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            resp = await client.get(url, headers={"Accept": "application/json"})
            resp.raise_for_status()
        logger.info("graph_data_fetched", url=url, bytes=len(resp.content))
        return resp.json()

    async def _read_json(self, locator: str) -> Any:
        try:
            path = Path(urlparse(locator).path) if locator.startswith("file://") else Path(locator)
        except ValueError as exc:
            raise TransportError(f"invalid data locator {locator!r}: {exc}") from exc
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, ValueError) as exc:
            # ValueError covers undecodable bytes and NUL characters in the path.
            raise TransportError(f"cannot read {path}: {exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TransportError(f"{path} is not valid JSON: {exc}") from exc
        logger.info("graph_data_read", path=str(path), bytes=len(text))
        return data
