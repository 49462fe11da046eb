from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from audit_relay.api import deps
from audit_relay.api.rate_limit import api_limit, dispatch_limit
from audit_relay.core.config import Settings
from audit_relay.schemas.dispatch import (
    AuditLimits,
    AuditStatusResponse,
    ReportDispatchRequest,
    ReportDispatchResponse,
)
from audit_relay.services.quota_service import QuotaCheck
from audit_relay.services.report_dispatch_service import ReportDispatchService

router = APIRouter(tags=["reports"])


@router.post(
    "/send-whatsapp-report",
    response_model=ReportDispatchResponse,
    response_model_exclude_unset=True,
)
@api_limit
@dispatch_limit
async def send_whatsapp_report(
    request: Request,
    response: Response,
    quota: QuotaCheck = Depends(deps.enforce_audit_quota),
    payload: Optional[ReportDispatchRequest] = None,
    client_key: str = Depends(deps.get_client_key),
    service: ReportDispatchService = Depends(deps.get_report_dispatch_service),
):
    return await service.dispatch(client_key, payload or ReportDispatchRequest())


@router.get("/audit-status", response_model=AuditStatusResponse)
@api_limit
async def audit_status(
    request: Request,
    response: Response,
    settings: Settings = Depends(deps.get_settings),
):
    return AuditStatusResponse(
        success=True,
        message="Audit service is active",
        limits=AuditLimits(
            max_audits_per_day=settings.audit_limit,
            max_phone_numbers_per_request=settings.max_phone_numbers_per_request,
        ),
    )
