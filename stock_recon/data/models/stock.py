from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .recalibrations import RecalibrationSnapshot


class Period(BaseModel):
    """A calendar month in the reference timezone."""
    start: date = Field(description="First day of the month")
    end: date = Field(description="Last day of the month")
    start_ts: datetime = Field(description="Start of the first day, timezone-aware")
    end_ts: datetime = Field(description="Last instant of the last day, timezone-aware")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def label(self) -> str:
        return self.start.strftime("%Y-%m")


class AnchorKind(str, Enum):
    NONE = "none"
    FULL_RESET = "full_reset"
    MID_PERIOD = "mid_period"


class AnchorResult(BaseModel):
    """The authoritative recalibration for a period, if any."""
    kind: AnchorKind = Field(description="No anchor, full reset or mid-period anchor")
    snapshot: Optional[RecalibrationSnapshot] = Field(default=None, description="The chosen snapshot")


class StockFlag(str, Enum):
    NORMAL = "normal"
    OVER_DISTRIBUTED = "over_distributed"


class StockLine(BaseModel):
    """Derived stock of one item."""
    quantity: float = Field(description="opening + produced - delivered, never clamped")
    flag: StockFlag = Field(default=StockFlag.NORMAL, description="over_distributed when quantity < 0")
    opening: float = Field(default=0.0, description="Anchor or rolled-forward opening balance")
    produced: float = Field(default=0.0, description="Approved production counted on top of the opening")
    delivered: float = Field(default=0.0, description="Delivered shipments counted against the opening")


class AmbiguousDataWarning(BaseModel):
    """Non-fatal finding attached to a result; never auto-corrected."""
    location_id: str = Field(description="Location the finding belongs to")
    item_key: str = Field(description="Affected item")
    quantity: float = Field(description="Computed quantity")
    message: str = Field(description="Explanation")


class StockState(BaseModel):
    """Stock of a location at a point in time, recomputed on every query."""
    location_id: str = Field(description="Location the stock was computed for")
    resolved: bool = Field(description="False when the location id fell back to its raw value")
    as_of: datetime = Field(description="Point in time the stock is valid for")
    period: Period = Field(description="Period containing as_of")
    anchor: AnchorResult = Field(description="Anchor used for the period")
    opening_balance: Dict[str, float] = Field(default_factory=dict, description="Opening balance per item")
    produced: Dict[str, float] = Field(default_factory=dict, description="Production added to the opening")
    delivered: Dict[str, float] = Field(default_factory=dict, description="Deliveries subtracted from the opening")
    period_produced: Dict[str, float] = Field(default_factory=dict, description="Period-to-date production, informational")
    period_delivered: Dict[str, float] = Field(default_factory=dict, description="Period-to-date deliveries, informational")
    lines: Dict[str, StockLine] = Field(default_factory=dict, description="Current stock per item")
    warnings: List[AmbiguousDataWarning] = Field(default_factory=list, description="Over-distributed items")
