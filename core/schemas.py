"""
Data Schemas

This module defines the Pydantic models passed between the fetchers, the
snapshot computation, the renderer and the API.

Models:
    - CachedRate: USD/RUB rate persisted in local storage with its fetch time
    - PricePoint: BTC price in USD and traded volume in BTC, rebuilt every cycle
    - Snapshot: Values derived from one PricePoint and one rate
    - RenderedView: Current contents of the display surface

Validation doubles as parsing: an upstream payload that does not produce a
finite number for every field fails model construction, and the caller treats
that exactly like a network failure.
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field, ConfigDict


ChangeSign = Literal["positive", "negative", "zero"]


# ============================================
# Cached Exchange Rate
# ============================================

class CachedRate(BaseModel):
    """
    USD/RUB Rate Cache Record

    Stored JSON-encoded under a fixed key and overwritten on every successful
    fetch of the rate endpoint.

    Attributes:
        rate: RUB per one USD, positive and finite
        timestamp: Fetch time in milliseconds since epoch

    Example:
        >>> CachedRate(rate=92.5, timestamp=1704110400000).model_dump_json()
        '{"rate":92.5,"timestamp":1704110400000}'
    """

    rate: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="RUB per one USD"
    )

    timestamp: int = Field(
        ...,
        ge=0,
        description="Fetch time in epoch milliseconds"
    )

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed since the rate was fetched (negative if from the future)."""
        return now_ms - self.timestamp

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        """
        Check whether the record is still within its TTL.

        A timestamp ahead of ``now_ms`` means the clock moved backwards since
        the write; such a record is never considered fresh.
        """
        age = self.age_ms(now_ms)
        return 0 <= age < ttl_ms


# ============================================
# Price Point
# ============================================

class PricePoint(BaseModel):
    """
    BTC Price and Volume

    Attributes:
        price_usd: Market price of one BTC in USD
        volume_units: Traded volume in BTC

    Notes:
        - Never persisted; one instance per refresh cycle
        - Both sources map into this model with their own field names
    """

    price_usd: float = Field(
        ...,
        allow_inf_nan=False,
        description="Market price in USD"
    )

    volume_units: float = Field(
        ...,
        allow_inf_nan=False,
        description="Traded volume in BTC"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "price_usd": 50000.0,
                "volume_units": 2.0
            }
        }
    )


# ============================================
# Snapshot
# ============================================

class Snapshot(BaseModel):
    """
    Derived Values of One Refresh Cycle

    Attributes:
        market_price_local: BTC price in RUB (price_usd * rate)
        total_value_local: RUB value of the traded volume (market_price_local * volume_units)
        change_local: Difference to the previous cycle's total (0 on the first cycle)
        change_sign: "positive", "negative" or "zero"
        price_usd: Input price in USD
        volume_units: Input volume in BTC
        rate: Input USD/RUB rate
        computed_at: When the snapshot was computed (UTC)
    """

    market_price_local: float = Field(..., description="BTC price in RUB")
    total_value_local: float = Field(..., description="Traded volume value in RUB")
    change_local: float = Field(..., description="Change of total_value_local since the previous cycle")
    change_sign: ChangeSign = Field(..., description="Sign of change_local")

    price_usd: float = Field(..., description="BTC price in USD")
    volume_units: float = Field(..., description="Traded volume in BTC")
    rate: float = Field(..., description="USD/RUB rate used")
    computed_at: datetime = Field(..., description="Computation time in UTC")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "market_price_local": 4500000.0,
                "total_value_local": 4500000.0,
                "change_local": 500000.0,
                "change_sign": "positive",
                "price_usd": 50000.0,
                "volume_units": 1.0,
                "rate": 90.0,
                "computed_at": "2024-01-01T12:00:00Z"
            }
        }
    )


# ============================================
# Rendered View
# ============================================

class RenderedView(BaseModel):
    """Contents of the table body and the status line as last rendered."""

    table_body_html: str = Field(default="", description="Inner HTML of the table body")
    status_text: str = Field(default="", description="Last update / error status line")
