"""Shared async HTTP helper used by the updater strategies.

Owns one aiohttp session and maps every transport or decoding problem into
the resolver error taxonomy, so updaters never see raw aiohttp exceptions.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, cast

import aiohttp

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from versioning.errors import HttpError, JsonParsing, UpstreamConnectionError

logger = logging.getLogger(__name__)


class HttpClient:
    """Thin aiohttp wrapper for JSON GET requests."""

    def __init__(self, timeout: int = Constants.REQUEST_TIMEOUT):
        """Initialize the client.

        Args:
            timeout: Total request timeout in seconds.
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": Constants.USER_AGENT},
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def get_json(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform a GET request and decode the JSON body.

        Raises:
            HttpError: upstream answered with a non-2xx status.
            JsonParsing: body is not valid JSON.
            UpstreamConnectionError: no HTTP response could be obtained.
        """
        if self._session is None:
            await self.start()
        session = cast(aiohttp.ClientSession, self._session)
        safe_target = safe_url(url)

        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=safe_target,
                    )
                )
            try:
                async with session.get(url, headers=headers) as response:
                    status = response.status
                    body = await response.read()
            except asyncio.TimeoutError as exc:
                raise UpstreamConnectionError(
                    url, f"request timed out after {self._timeout.total} seconds"
                ) from exc
            except aiohttp.ClientError as exc:
                raise UpstreamConnectionError(url, f"connection error: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                )
            )

        if not 200 <= status < 300:
            raise HttpError(url, status)

        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise JsonParsing(f"{exc.msg} at position {exc.pos} in {safe_target}") from exc
        except (UnicodeDecodeError, ValueError) as exc:
            raise JsonParsing(f"undecodable body in {safe_target}: {exc}") from exc

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
