from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProductionFilters(BaseModel):
    """Filters for production records."""
    location_ref: Optional[str | list[str]] = Field(default=None, description="Location reference filter (single reference or list of references)")
    approval_status: Optional[str] = Field(default=None, description="Approval status filter")
    start_date: Optional[date] = Field(default=None, description="First production day, inclusive")
    end_date: Optional[date] = Field(default=None, description="Last production day, inclusive")


class DeliveryFilters(BaseModel):
    """Filters for delivery records. Timestamp bounds apply to the effective timestamp, inclusive."""
    origin_ref: Optional[str | list[str]] = Field(default=None, description="Origin reference filter (single reference or list of references)")
    status: Optional[str] = Field(default=None, description="Delivery status filter")
    start_ts: Optional[datetime] = Field(default=None, description="Start of the effective timestamp range")
    end_ts: Optional[datetime] = Field(default=None, description="End of the effective timestamp range")


class RecalibrationFilters(BaseModel):
    """Filters for recalibration snapshots."""
    location_ref: Optional[str | list[str]] = Field(default=None, description="Location reference filter (single reference or list of references)")
    status: Optional[str | list[str]] = Field(default=None, description="Status filter (single status or list of statuses)")
    start_date: Optional[date] = Field(default=None, description="First effective date, inclusive")
    end_date: Optional[date] = Field(default=None, description="Last effective date, inclusive")


def as_list(value: Optional[str | list[str]]) -> Optional[list[str]]:
    """Normalize a single-or-list filter value to a list (None stays None)."""
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    return list(value)
