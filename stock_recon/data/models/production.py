from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from stock_recon.config import get_config
from .timestamps import parse_timestamp


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProductionRecord(BaseModel):
    """One production entry; quantities are keyed by raw item key."""
    record_id: str = Field(description="Production record identifier")
    location_ref: str = Field(description="Canonical or alias location reference")
    date: dt.date = Field(description="Calendar day the goods were produced")
    approval_status: ApprovalStatus = Field(default=ApprovalStatus.PENDING, description="Only approved records are aggregated")
    created_at: Optional[dt.datetime] = Field(default=None, description="Creation timestamp")
    quantities: Dict[str, float] = Field(default_factory=dict, description="Produced quantity per raw item key")

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value):
        return parse_timestamp(value, get_config().reference_tz)
