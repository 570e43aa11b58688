"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .fx import router as fx_router
from .portfolio import router as portfolio_router

api_router = APIRouter()
api_router.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])
api_router.include_router(fx_router, prefix="/fx", tags=["fx"])

__all__ = ["api_router"]
