from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict
from urllib.parse import urlsplit

import httpx

from audit_relay.core.config import Settings
from audit_relay.core.errors import (
    ConfigurationError,
    InputValidationError,
    RelayError,
    RetriesExhaustedError,
    RetryAbortedError,
    UpstreamRetryableError,
    UpstreamTerminalError,
)
from audit_relay.schemas.pagespeed import PageSpeedResponse
from audit_relay.services.retry import describe_error, run_with_retry

logger = logging.getLogger(__name__)

VALID_STRATEGIES = ("mobile", "desktop")
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
AUTH_ERROR_MARKERS = ("403", "401")


def is_auth_failure(exc: BaseException) -> bool:
    """True when a failed attempt looks like a credential problem.

    Matches on the error text only, so an unrelated message that happens to
    contain "401" or "403" is also treated as an auth failure.
    """
    message = str(exc)
    return any(marker in message for marker in AUTH_ERROR_MARKERS)


def validate_pagespeed_input(url: str | None, strategy: str | None) -> None:
    if not url or not strategy:
        raise InputValidationError("URL and strategy (mobile/desktop) are required")
    if strategy not in VALID_STRATEGIES:
        raise InputValidationError("Strategy must be 'mobile' or 'desktop'")
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InputValidationError("Invalid URL format") from exc
    if not parts.scheme or not parts.netloc or any(char.isspace() for char in parts.netloc):
        raise InputValidationError("Invalid URL format")


class PageSpeedService:
    """Relays analysis requests to the PageSpeed Insights API."""

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._client = client
        self._sleep = sleep

    async def run(self, url: str | None, strategy: str | None) -> PageSpeedResponse:
        validate_pagespeed_input(url, strategy)
        api_key = self._settings.google_pagespeed_api_key
        if not api_key:
            logger.error("Google API key not configured")
            raise ConfigurationError("Google PageSpeed API not configured. Please check your API key.")

        async def _call() -> Dict[str, Any]:
            return await self._fetch(url, strategy, api_key)

        try:
            data = await run_with_retry(
                f"PageSpeed ({strategy})",
                _call,
                max_attempts=self._settings.pagespeed_max_attempts,
                attempt_timeout=self._settings.pagespeed_timeout,
                retry_on=(UpstreamRetryableError, httpx.HTTPError, ValueError),
                should_abort=is_auth_failure,
                backoff_base=self._settings.pagespeed_backoff_base,
                sleep=self._sleep,
            )
        except RetryAbortedError as exc:
            logger.error("Authentication error - not retrying")
            raise UpstreamTerminalError(
                "Google API authentication failed. Verify your API key.",
                status_code=500,
                payload={"error": describe_error(exc.cause)},
            ) from exc
        except RetriesExhaustedError as exc:
            last = describe_error(exc.last_error) if exc.last_error else "Unknown error"
            raise RelayError(
                "Failed to fetch PageSpeed data after multiple retries. "
                "The API may be experiencing issues.",
                status_code=503,
                payload={
                    "error": last if not self._settings.is_production else "Service temporarily unavailable"
                },
            ) from exc

        logger.info("PageSpeed data fetched successfully for %s", strategy)
        return PageSpeedResponse(success=True, data=data, strategy=strategy, url=url)

    async def _fetch(self, url: str, strategy: str, api_key: str) -> Dict[str, Any]:
        response = await self._client.get(
            self._settings.pagespeed_api_url,
            params={"url": url, "strategy": strategy, "key": api_key},
            headers={"User-Agent": USER_AGENT},
            timeout=self._settings.pagespeed_timeout,
        )
        status = response.status_code

        if status == 403:
            logger.error("PageSpeed API error 403: %s", response.text[:500])
            raise UpstreamTerminalError(
                "API quota exceeded or access denied. Check your API key permissions.",
                status_code=403,
                payload={"details": _error_message(response)},
            )
        if status == 400:
            logger.error("PageSpeed bad request 400: %s", response.text[:500])
            raise UpstreamTerminalError(
                "Invalid request to PageSpeed API",
                status_code=400,
                payload={"details": _error_message(response)},
            )
        if status >= 400:
            logger.error("PageSpeed API error %s: %s", status, response.text[:500])
            raise UpstreamRetryableError(
                _error_message(response) or f"API returned status {status}",
                status_code=status,
            )

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("PageSpeed API returned a non-object JSON body")
        return data


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    return None
