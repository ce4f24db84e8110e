# stock_recon/data/interface.py
from __future__ import annotations

from typing import List, Protocol

from .models import (
    # Filter classes
    ProductionFilters,
    DeliveryFilters,
    RecalibrationFilters,
    # Catalog models
    Location,
    Item,
    # Record models
    ProductionRecord,
    DeliveryRecord,
    RecalibrationSnapshot,
)


# ---- Data access protocol ----

class DataAccess(Protocol):
    """
    Storage-agnostic contract consumed by the reconciliation engine.

    IMPORTANT for reconciliation:
    - Implementations MUST avoid result caching inside these methods.
      Each call is a point-in-time read of the underlying records.
    - Failures to read or write MUST surface as DataUnavailableError, never as
      an empty result.
    """

    # Catalog reads

    def list_locations(self) -> List[Location]:
        """List every location with its alias ids."""
        ...

    def list_items(self) -> List[Item]:
        """List the item catalog."""
        ...

    # Record reads

    def get_production(self, filters: ProductionFilters) -> List[ProductionRecord]:
        """Get production records matching the filters."""
        ...

    def get_deliveries(self, filters: DeliveryFilters) -> List[DeliveryRecord]:
        """Get delivery records matching the filters."""
        ...

    def get_recalibrations(self, filters: RecalibrationFilters) -> List[RecalibrationSnapshot]:
        """Get recalibration snapshots matching the filters."""
        ...

    # Writes

    def save_recalibration(self, snapshot: RecalibrationSnapshot) -> str:
        """Persist a new snapshot and return its id. Never merges with existing snapshots."""
        ...
