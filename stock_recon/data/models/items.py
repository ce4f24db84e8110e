from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ItemScope(str, Enum):
    GLOBAL = "global"
    LOCATION = "location"


class Item(BaseModel):
    """Catalog entry for a trackable finished good."""
    key: str = Field(description="Canonical item key")
    display_name: str = Field(default="", description="Human readable item name")
    unit: str = Field(default="pieces", description="Unit the item is counted in")
    scope: ItemScope = Field(default=ItemScope.GLOBAL, description="Visible to all locations or to one")
    location_id: Optional[str] = Field(default=None, description="Owning location for location-scoped items")
    item_id: Optional[str] = Field(default=None, description="Opaque id raw records may use instead of the key")
    is_active: bool = Field(default=True, description="Inactive items are not tracked anywhere")
