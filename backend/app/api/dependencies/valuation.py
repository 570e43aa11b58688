"""Session and valuation service dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.db.session import get_db
from app.services.valuation import ValuationService, build_valuation_service


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_db():  # pragma: no cover - FastAPI dependency wrapper
        yield session


def get_valuation_service(session: AsyncSession = Depends(get_db_session)) -> ValuationService:
    return build_valuation_service(session, get_settings())


__all__ = ["get_db_session", "get_valuation_service"]
