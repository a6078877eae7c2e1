from fastapi import APIRouter, Request

from vidrelay.core.state import get_runtime
from vidrelay.i18n import i18n
from vidrelay.models.response import HealthResponse

router = APIRouter()


@router.get("/")
async def root(request: Request):
    """Root endpoint"""
    api = get_runtime(request).config.api
    return {
        "status": i18n.get("response.status_running"),
        "service": api.title,
        "version": api.version,
    }


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight health check"""
    return {"status": i18n.get("health.status")}
