"""Healthcheck endpoint."""

from fastapi import APIRouter

from ...config import settings
from ...db.supabase import get_supabase_client

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Service healthcheck")
def healthcheck() -> dict[str, str]:
    return {
        "status": "ok",
        "service": settings.app_name,
        "storage": "configured" if get_supabase_client() else "not_configured",
    }
