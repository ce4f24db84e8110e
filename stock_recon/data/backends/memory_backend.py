from __future__ import annotations

from typing import Iterable, List, Optional

from ..interface import DataAccess
from ..models import (
    ProductionFilters, DeliveryFilters, RecalibrationFilters,
    Location, Item, ProductionRecord, DeliveryRecord, RecalibrationSnapshot,
)
from ..models.data_filters import as_list


class InMemoryDataAccess(DataAccess):
    """
    Backend over record collections that were already fetched elsewhere.
    - Holds the collections as given; every call filters them afresh.
    - save_recalibration appends, so later reads see the new snapshot.
    """

    def __init__(
        self,
        locations: Optional[Iterable[Location]] = None,
        items: Optional[Iterable[Item]] = None,
        production: Optional[Iterable[ProductionRecord]] = None,
        deliveries: Optional[Iterable[DeliveryRecord]] = None,
        recalibrations: Optional[Iterable[RecalibrationSnapshot]] = None,
    ) -> None:
        self.locations: List[Location] = list(locations or [])
        self.items: List[Item] = list(items or [])
        self.production: List[ProductionRecord] = list(production or [])
        self.deliveries: List[DeliveryRecord] = list(deliveries or [])
        self.recalibrations: List[RecalibrationSnapshot] = list(recalibrations or [])

    # ---------- interface implementation ----------

    def list_locations(self) -> List[Location]:
        return list(self.locations)

    def list_items(self) -> List[Item]:
        return list(self.items)

    def get_production(self, filters: ProductionFilters) -> List[ProductionRecord]:
        refs = as_list(filters.location_ref)
        out = []
        for rec in self.production:
            if refs is not None and rec.location_ref not in refs:
                continue
            if filters.approval_status and rec.approval_status.value != filters.approval_status:
                continue
            if filters.start_date and rec.date < filters.start_date:
                continue
            if filters.end_date and rec.date > filters.end_date:
                continue
            out.append(rec)
        return out

    def get_deliveries(self, filters: DeliveryFilters) -> List[DeliveryRecord]:
        refs = as_list(filters.origin_ref)
        out = []
        for rec in self.deliveries:
            if refs is not None and rec.origin_ref not in refs:
                continue
            if filters.status and rec.status != filters.status:
                continue
            ts = rec.effective_ts
            if (filters.start_ts or filters.end_ts) and ts is None:
                continue
            if filters.start_ts and ts < filters.start_ts:
                continue
            if filters.end_ts and ts > filters.end_ts:
                continue
            out.append(rec)
        return out

    def get_recalibrations(self, filters: RecalibrationFilters) -> List[RecalibrationSnapshot]:
        refs = as_list(filters.location_ref)
        statuses = as_list(filters.status)
        out = []
        for snap in self.recalibrations:
            if refs is not None and snap.location_ref not in refs:
                continue
            if statuses is not None and snap.status.value not in statuses:
                continue
            if filters.start_date and snap.effective_date < filters.start_date:
                continue
            if filters.end_date and snap.effective_date > filters.end_date:
                continue
            out.append(snap)
        return out

    def save_recalibration(self, snapshot: RecalibrationSnapshot) -> str:
        self.recalibrations.append(snapshot)
        return snapshot.snapshot_id
