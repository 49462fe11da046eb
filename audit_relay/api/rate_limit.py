"""Per-client request limits on the /api routes, backed by slowapi.

The limiter is shared by the route modules, so it lives apart from main.py.
Limit values are resolved per request from the policy that ``configure_rate_limits``
installs when an application is built.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request
from slowapi import Limiter

from audit_relay.api.deps import resolve_client_key
from audit_relay.core.config import Settings, settings as default_settings

API_LIMIT_MESSAGE = "Too many requests, please try again later"
DISPATCH_LIMIT_MESSAGE = "Audit rate limit exceeded. Please try again later."
API_LIMIT_SCOPE = "api"


def limit_expression(max_requests: int, window_ms: int) -> str:
    """Render a request budget in the notation slowapi parses, e.g. ``100 per 900 seconds``."""
    window_seconds = max(window_ms // 1000, 1)
    return f"{max_requests} per {window_seconds} seconds"


@dataclass(frozen=True)
class RateLimitPolicy:
    api: str
    dispatch: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimitPolicy":
        return cls(
            api=limit_expression(settings.rate_limit_max_requests, settings.rate_limit_window_ms),
            dispatch=limit_expression(
                settings.audit_rate_limit_max_requests, settings.audit_rate_limit_window_ms
            ),
        )


def client_key(request: Request) -> str:
    return resolve_client_key(request, request.app.state.settings)


limiter = Limiter(key_func=client_key, headers_enabled=True, enabled=False)
_policy = RateLimitPolicy.from_settings(default_settings)


def configure_rate_limits(settings: Settings) -> RateLimitPolicy:
    """Install the limits for a freshly built app and clear earlier counters."""
    global _policy
    _policy = RateLimitPolicy.from_settings(settings)
    limiter.enabled = settings.rate_limit_enabled
    limiter.reset()
    return _policy


def _api_limit() -> str:
    return _policy.api


def _dispatch_limit() -> str:
    return _policy.dispatch


# One budget across every /api route for a client.
api_limit = limiter.shared_limit(_api_limit, scope=API_LIMIT_SCOPE, error_message=API_LIMIT_MESSAGE)
dispatch_limit = limiter.limit(_dispatch_limit, error_message=DISPATCH_LIMIT_MESSAGE)
