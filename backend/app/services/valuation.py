"""Valuation service: wires SQL stores into the engine and bounds each call."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from typing import Awaitable, TypeVar

from opentelemetry import metrics, trace
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AppSettings
from app.services.stores import SqlFxStore, SqlLedgerStore, SqlPriceStore, SqlSymbolStore
from portfolio_engine import FxMatrix, FxRateRow, PerformanceResult, Snapshot, ValuationEngine
from portfolio_engine.models import Currency

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

_duration = meter.create_histogram(
    "portfolio.valuation.duration",
    unit="s",
    description="Wall time of snapshot and performance computations",
)
_fx_gaps = meter.create_counter(
    "portfolio.valuation.fx_gaps",
    description="Currencies reported without a conversion path",
)

T = TypeVar("T")


class ValuationTimeout(RuntimeError):
    """Raised when a computation exceeds ``valuation_timeout_seconds``."""


class ValuationService:
    def __init__(self, engine: ValuationEngine, *, timeout_seconds: float):
        self.engine = engine
        self.timeout_seconds = timeout_seconds

    async def _bounded(self, operation: str, coro: Awaitable[T]) -> T:
        started = time.perf_counter()
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning("%s exceeded %.1fs", operation, self.timeout_seconds)
            raise ValuationTimeout(f"{operation} timed out after {self.timeout_seconds}s") from exc
        finally:
            _duration.record(time.perf_counter() - started, {"operation": operation})

    async def snapshot(self, user_id: str, currency: str | Currency) -> Snapshot:
        with tracer.start_as_current_span("valuation.snapshot") as span:
            span.set_attribute("enduser.id", user_id)
            span.set_attribute("valuation.currency", str(getattr(currency, "value", currency)))
            result = await self._bounded("snapshot", self.engine.get_snapshot(user_id, currency))
            span.set_attribute("valuation.positions", len(result.items))
            if result.warnings:
                _fx_gaps.add(len(result.warnings), {"operation": "snapshot"})
            return result

    async def performance(
        self,
        user_id: str,
        currency: str | Currency,
        start: date,
        end: date,
    ) -> PerformanceResult:
        with tracer.start_as_current_span("valuation.performance") as span:
            span.set_attribute("enduser.id", user_id)
            span.set_attribute("valuation.currency", str(getattr(currency, "value", currency)))
            span.set_attribute("valuation.start", start.isoformat())
            span.set_attribute("valuation.end", end.isoformat())
            result = await self._bounded(
                "performance", self.engine.get_performance(user_id, currency, start, end)
            )
            span.set_attribute("valuation.points", len(result.points))
            if result.warnings:
                _fx_gaps.add(len(result.warnings), {"operation": "performance"})
            return result

    async def fx_matrix(self) -> FxMatrix:
        return await self._bounded("fx_matrix", self.engine.fx_matrix())

    async def fx_rates(self) -> list[FxRateRow]:
        return await self._bounded("fx_rates", self.engine.fx.list_fx_rates())


def build_valuation_engine(session: AsyncSession, settings: AppSettings) -> ValuationEngine:
    return ValuationEngine(
        SqlLedgerStore(session),
        SqlFxStore(session),
        SqlPriceStore(session),
        SqlSymbolStore(session),
        pivot_currency=settings.fx_pivot_currency,
        default_currency=settings.default_symbol_currency,
        seed_days=settings.price_seed_days,
    )


def build_valuation_service(session: AsyncSession, settings: AppSettings) -> ValuationService:
    return ValuationService(
        build_valuation_engine(session, settings),
        timeout_seconds=settings.valuation_timeout_seconds,
    )


__all__ = [
    "ValuationService",
    "ValuationTimeout",
    "build_valuation_engine",
    "build_valuation_service",
]
