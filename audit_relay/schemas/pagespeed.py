from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

Strategy = Literal["mobile", "desktop"]


class PageSpeedRequest(BaseModel):
    # Checked by PageSpeedService, which owns the 400 messages.
    url: str | None = None
    strategy: str | None = None


class PageSpeedResponse(BaseModel):
    success: bool
    data: dict[str, Any]
    strategy: Strategy
    url: str
