from __future__ import annotations

from fastapi import Depends, Request

from audit_relay.core.config import Settings
from audit_relay.services.pagespeed_service import PageSpeedService
from audit_relay.services.quota_service import AuditQuotaTracker, QuotaCheck
from audit_relay.services.report_dispatch_service import ReportDispatchService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def resolve_client_key(request: Request, settings: Settings) -> str:
    if settings.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_client_key(request: Request, settings: Settings = Depends(get_settings)) -> str:
    return resolve_client_key(request, settings)


def get_quota_tracker(request: Request) -> AuditQuotaTracker:
    return request.app.state.quota_tracker


def get_pagespeed_service(request: Request) -> PageSpeedService:
    return request.app.state.pagespeed_service


def get_report_dispatch_service(request: Request) -> ReportDispatchService:
    return request.app.state.report_dispatch_service


def enforce_audit_quota(
    client_key: str = Depends(get_client_key),
    quota: AuditQuotaTracker = Depends(get_quota_tracker),
) -> QuotaCheck:
    """Reject the request with 429 before its body is looked at."""
    return quota.ensure_allowed(client_key)
