from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from stock_recon.config import get_config
from .production import ApprovalStatus
from .timestamps import parse_timestamp


class RecalibrationItem(BaseModel):
    """Counted quantity of one item, with the variance against the system figure."""
    item_key: str = Field(description="Item key as submitted or resolved")
    actual_quantity: float = Field(description="Physically counted quantity")
    system_quantity: Optional[float] = Field(default=None, description="Quantity the engine reported before the count")
    difference: Optional[float] = Field(default=None, description="actual_quantity - system_quantity")
    adjustment_type: Optional[Literal["wastage", "counting_error"]] = Field(default=None, description="Reason for a non-zero difference")
    notes: str = Field(default="", description="Free text notes")


class RecalibrationSnapshot(BaseModel):
    """A manual physical count for a location as of a calendar day."""
    snapshot_id: str = Field(description="Snapshot identifier")
    location_ref: str = Field(description="Canonical or alias location reference")
    location_type: Literal["production_house", "store"] = Field(default="production_house", description="Kind of site counted")
    effective_date: date = Field(description="Calendar day the count applies to")
    items: List[RecalibrationItem] = Field(default_factory=list, description="Counted items")
    status: ApprovalStatus = Field(default=ApprovalStatus.PENDING, description="Only approved snapshots are authoritative")
    created_at: datetime = Field(description="Creation timestamp; breaks same-day ties")
    submitted_by: Optional[str] = Field(default=None, description="Submitting user")

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value):
        return parse_timestamp(value, get_config().reference_tz)

    @property
    def quantities(self) -> Dict[str, float]:
        """Counted quantity per item key; repeated keys are summed."""
        out: Dict[str, float] = {}
        for item in self.items:
            out[item.item_key] = out.get(item.item_key, 0.0) + item.actual_quantity
        return out
