from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from stock_recon.config import get_config
from .timestamps import parse_timestamp

DELIVERED = "delivered"


class DeliveryRecord(BaseModel):
    """An outbound shipment from a production location to a consuming site."""
    record_id: str = Field(description="Shipment identifier")
    origin_ref: str = Field(description="Reference used to resolve the owning location")
    status: str = Field(default="pending", description="Shipment status; only 'delivered' counts")
    delivered_at: Optional[datetime] = Field(default=None, description="Delivery timestamp")
    requested_at: Optional[datetime] = Field(default=None, description="Request timestamp")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    quantities: Dict[str, float] = Field(default_factory=dict, description="Shipped quantity per raw item key")

    @field_validator("delivered_at", "requested_at", "created_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, value):
        return parse_timestamp(value, get_config().reference_tz)

    @property
    def effective_ts(self) -> Optional[datetime]:
        """First available of delivered_at, requested_at and created_at."""
        return self.delivered_at or self.requested_at or self.created_at

    @property
    def is_delivered(self) -> bool:
        return self.status == DELIVERED
