"""API key check for the REST endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from marocstats.config import Settings, get_settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def app_settings(request: Request) -> Settings:
    """Settings installed on the app at start-up, else read from the environment."""
    return getattr(request.app.state, "settings", None) or get_settings()


async def verify_api_key(
    request: Request,
    key: Optional[str] = Security(api_key_header),
) -> Optional[str]:
    """Require ``X-API-Key`` to match ``Settings.api_key`` when one is set."""
    expected = app_settings(request).api_key
    if expected is None:
        return None
    if key != expected:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")
    return key
