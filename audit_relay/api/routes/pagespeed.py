from fastapi import APIRouter, Depends, Request, Response

from audit_relay.api import deps
from audit_relay.api.rate_limit import api_limit
from audit_relay.schemas.pagespeed import PageSpeedRequest, PageSpeedResponse
from audit_relay.services.pagespeed_service import PageSpeedService

router = APIRouter(prefix="/pagespeed", tags=["pagespeed"])


@router.post("/run", response_model=PageSpeedResponse)
@api_limit
async def run_pagespeed(
    request: Request,
    response: Response,
    payload: PageSpeedRequest,
    service: PageSpeedService = Depends(deps.get_pagespeed_service),
):
    return await service.run(payload.url, payload.strategy)
