from fastapi import APIRouter

from miary.config import get_settings
from miary.schemas.common import ok, meta_now

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def healthcheck():
    settings = get_settings()
    return ok(
        data={
            "status": "ok",
            "env": settings.ENV,
            "defaultTimezone": settings.DEFAULT_TIMEZONE,
        },
        meta=meta_now(operation="health"),
    )
