from .data_filters import (
    ProductionFilters,
    DeliveryFilters,
    RecalibrationFilters,
)

from .locations import Location
from .items import Item, ItemScope
from .production import ApprovalStatus, ProductionRecord
from .deliveries import DELIVERED, DeliveryRecord
from .recalibrations import RecalibrationItem, RecalibrationSnapshot
from .stock import (
    Period,
    AnchorKind,
    AnchorResult,
    StockFlag,
    StockLine,
    AmbiguousDataWarning,
    StockState,
)

__all__ = [
    # Filter classes
    "ProductionFilters",
    "DeliveryFilters",
    "RecalibrationFilters",
    # Catalog models
    "Location",
    "Item",
    "ItemScope",
    # Record models
    "ApprovalStatus",
    "ProductionRecord",
    "DELIVERED",
    "DeliveryRecord",
    "RecalibrationItem",
    "RecalibrationSnapshot",
    # Derived models
    "Period",
    "AnchorKind",
    "AnchorResult",
    "StockFlag",
    "StockLine",
    "AmbiguousDataWarning",
    "StockState",
]
