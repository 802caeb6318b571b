from __future__ import annotations
from typing import Any, Dict, Optional
from fastapi import status as http
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from datetime import datetime, timezone
from fastapi.encoders import jsonable_encoder

from miary.config import get_settings


def to_camel_alias(name: str) -> str:
    """snake_case -> camelCase; "iso" parts become "ISO" (date_iso -> dateISO)."""
    head, *rest = name.split("_")
    return head + "".join(part.upper() if part == "iso" else part[:1].upper() + part[1:] for part in rest)


class CamelModel(BaseModel):
    """Base for report contracts: snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel_alias, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ApiError(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

class ResponseMeta(BaseModel):
    operation: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    generated_at: str
    version: str = "2.0.0"

class Envelope(BaseModel):
    ok: bool                              # <-- canonical flag
    data: Any | None = None
    error: ApiError | None = None
    meta: ResponseMeta

def ok(data: Any = None, meta: Optional[ResponseMeta] = None, status_code: int = http.HTTP_200_OK) -> JSONResponse:
    """
    Return unified success envelope. Pass meta through as-is (don't re-wrap).
    """
    if meta is None:
        meta = meta_now()
    payload = Envelope(ok=True, data=data, error=None, meta=meta).model_dump()
    return JSONResponse(content=jsonable_encoder(payload), status_code=status_code)

def fail(
    code: str,
    message: str,
    status_code: int = http.HTTP_400_BAD_REQUEST,
    details: Optional[Dict[str, Any]] = None,
    meta: Optional[ResponseMeta] = None,
) -> JSONResponse:
    """
    Return unified error envelope with ok=False.
    """
    if meta is None:
        meta = meta_now()
    payload = Envelope(
        ok=False,
        data=None,
        error=ApiError(code=code, message=message, details=details),
        meta=meta,
    ).model_dump()
    return JSONResponse(content=jsonable_encoder(payload), status_code=status_code)

def meta_now(*, operation: Optional[str] = None, **params) -> ResponseMeta:
    clean = {k: v for k, v in params.items() if v is not None}
    return ResponseMeta(
        operation=operation,
        params=clean or None,
        generated_at=datetime.now(timezone.utc).isoformat(),
        version=get_settings().APP_VERSION,
    )
