from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


class Location(BaseModel):
    """A production site and the other identifiers it is known by."""
    location_id: str = Field(description="Canonical location identifier")
    name: str = Field(default="", description="Location name")
    alias_ids: List[str] = Field(default_factory=list, description="Alternate identifiers, e.g. a consuming-site id")
    location_type: Literal["production_house", "store"] = Field(default="production_house", description="Kind of site")
