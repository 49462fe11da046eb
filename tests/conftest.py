"""Shared fixtures: settings without .env, recorded backoff waits, scripted upstreams."""

from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

from audit_relay.core.config import Settings


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedUpstream:
    """MockTransport handler that replays queued responses and records requests."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: List[Callable[[httpx.Request], httpx.Response]] = []
        self.default: Callable[[httpx.Request], httpx.Response] | None = None

    def queue(self, status_code: int, json: object = None) -> None:
        self._responses.append(lambda request: httpx.Response(status_code, json=json))

    def queue_error(self, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self._responses.append(_raise)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            return self._responses.pop(0)(request)
        if self.default is not None:
            return self.default(request)
        raise AssertionError(f"Unexpected upstream call: {request.method} {request.url}")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def make_settings():
    """Build Settings with test credentials; keyword overrides win."""

    def _make(**overrides) -> Settings:
        values = {
            "app_env": "test",
            "log_level": "WARNING",
            "google_pagespeed_api_key": "test-key",
            "whatsapp_access_token": "test-token",
            "whatsapp_instance_id": "test-instance",
            "pagespeed_backoff_base": 1.0,
            "rate_limit_enabled": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest_asyncio.fixture
async def http_client_factory(upstream):
    """AsyncClients wired to the scripted upstream, closed after the test."""
    clients: List[httpx.AsyncClient] = []

    def _make() -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=upstream.transport())
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def upstream():
    return ScriptedUpstream()
