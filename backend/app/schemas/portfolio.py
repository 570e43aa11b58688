"""Pydantic schemas for holdings snapshots and performance series."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from portfolio_engine.models import PerformanceResult, Snapshot


class SnapshotItemSchema(BaseModel):
    symbol: str = Field(..., examples=["AAPL"])
    quantity: float
    avg_cost: float
    price: float
    value: float
    weight: float


class SnapshotResponse(BaseModel):
    currency: str
    total_value: float
    items: list[SnapshotItemSchema]
    warnings: list[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "currency": "EUR",
                "total_value": 2200.0,
                "items": [
                    {
                        "symbol": "AAPL",
                        "quantity": 10,
                        "avg_cost": 185.0,
                        "price": 190.0,
                        "value": 1900.0,
                        "weight": 0.8636,
                    }
                ],
                "warnings": [],
            }
        }

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotResponse":
        return cls(
            currency=snapshot.currency.value,
            total_value=snapshot.total_value,
            items=[
                SnapshotItemSchema(
                    symbol=item.symbol,
                    quantity=item.quantity,
                    avg_cost=item.avg_cost,
                    price=item.price,
                    value=item.value,
                    weight=item.weight,
                )
                for item in snapshot.items
            ],
            warnings=list(snapshot.warnings),
        )


class PerformancePointSchema(BaseModel):
    date: date
    net_assets: float
    yield_twr: float
    yield_mwr: float


class PerformanceResponse(BaseModel):
    currency: str
    start: date
    end: date
    points: list[PerformancePointSchema]
    total_return_twr: float
    total_return_mwr: float
    prev_day_return_twr: float
    prev_day_return_mwr: float
    warnings: list[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "currency": "USD",
                "start": "2024-01-02",
                "end": "2024-01-03",
                "points": [
                    {"date": "2024-01-02", "net_assets": 1000.0, "yield_twr": 0.0, "yield_mwr": 0.0},
                    {"date": "2024-01-03", "net_assets": 1100.0, "yield_twr": 10.0, "yield_mwr": 10.0},
                ],
                "total_return_twr": 10.0,
                "total_return_mwr": 10.0,
                "prev_day_return_twr": 10.0,
                "prev_day_return_mwr": 10.0,
                "warnings": [],
            }
        }

    @classmethod
    def from_result(cls, result: PerformanceResult) -> "PerformanceResponse":
        return cls(
            currency=result.currency.value,
            start=result.start,
            end=result.end,
            points=[
                PerformancePointSchema(
                    date=point.date,
                    net_assets=point.net_assets,
                    yield_twr=point.yield_twr,
                    yield_mwr=point.yield_mwr,
                )
                for point in result.points
            ],
            total_return_twr=result.total_return_twr,
            total_return_mwr=result.total_return_mwr,
            prev_day_return_twr=result.prev_day_return_twr,
            prev_day_return_mwr=result.prev_day_return_mwr,
            warnings=list(result.warnings),
        )


__all__ = [
    "SnapshotItemSchema",
    "SnapshotResponse",
    "PerformancePointSchema",
    "PerformanceResponse",
]
