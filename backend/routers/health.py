"""Configuration summary endpoint."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from backend.utils.config import Settings, get_settings

router = APIRouter()


@router.get("/healthz")
def healthz(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Report liveness along with a secret-free configuration summary."""

    return {
        "status": "ok",
        "env": settings.app_env,
        "http_port": settings.http_port,
        "timezone": settings.tz,
        "gcal_calendar_id": settings.gcal_calendar_id,
        "has_google_creds": settings.has_google_credentials,
        "has_supabase_url": bool(settings.supabase_url),
        "has_supabase_key": bool(settings.supabase_key),
        "redis_url": settings.redis_url,
    }
