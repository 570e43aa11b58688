"""Caller identity and internal-token checks for API routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from app.config import get_settings


def verify_internal_token(x_internal_token: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if settings.internal_auth_token is None:
        return
    if x_internal_token != settings.internal_auth_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid internal token")


InternalAuth = Depends(verify_internal_token)


@dataclass
class RequestContext:
    user_id: str


def get_request_context(x_user_id: str | None = Header(default=None)) -> RequestContext:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user context")
    return RequestContext(user_id=x_user_id.strip())


__all__ = ["InternalAuth", "RequestContext", "get_request_context", "verify_internal_token"]
