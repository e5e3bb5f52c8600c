from __future__ import annotations

import secrets

from fastapi import Header, HTTPException, status

from hiring_compass.core.config import settings


def check_api_token(x_api_token: str | None) -> None:
    if not settings.api_auth_token:
        return
    if not x_api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API token")
    if not secrets.compare_digest(x_api_token.encode("utf-8"), settings.api_auth_token.encode("utf-8")):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid API token")


def require_api_token(x_api_token: str | None = Header(default=None, alias="X-API-Token")) -> None:
    check_api_token(x_api_token)
