from fastapi import APIRouter

from . import health, pagespeed, reports

api_router = APIRouter()
api_router.include_router(pagespeed.router)
api_router.include_router(reports.router)
