from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from audit_relay.api import deps
from audit_relay.core.config import Settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(settings: Settings = Depends(deps.get_settings)) -> dict[str, str]:
    return {
        "status": "OK",
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.app_env,
    }
