from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, Tuple

import pandas as pd

from stock_recon.data.interface import DataAccess
from stock_recon.data.models import (
    ApprovalStatus,
    DELIVERED,
    DeliveryFilters,
    ProductionFilters,
)
from stock_recon.logging import get_logger
from .access import guarded
from .identity import IdentityResolver


class Aggregator:
    """
    Sums approved production and delivered shipments for a location.
    - Records are matched by resolved location, so alias-tagged records count.
    - Item keys are resolved before summing so all sources share one key space.
    - Results are zero-filled for every item applicable to the location.
    """

    def __init__(self, data_access: DataAccess, resolver: IdentityResolver) -> None:
        self.data_access = data_access
        self.resolver = resolver
        self.logger = get_logger(__name__)

    def sum_production(self, location_id: str, start: date, end: date) -> Dict[str, float]:
        """Approved production dated within ``[start, end]``."""
        canonical = self.resolver.resolve_location(location_id)
        filters = ProductionFilters(
            location_ref=self.resolver.location_refs(location_id),
            approval_status=ApprovalStatus.APPROVED.value,
            start_date=start,
            end_date=end,
        )
        records = [
            rec for rec in guarded("production records", self.data_access.get_production, filters)
            if rec.approval_status == ApprovalStatus.APPROVED
            and self.resolver.resolve_location(rec.location_ref) == canonical
            and start <= rec.date <= end
        ]
        self.logger.debug(f"{len(records)} production records for {canonical} in [{start}, {end}]")
        return self._totals(location_id, ((key, qty) for rec in records for key, qty in rec.quantities.items()))

    def sum_deliveries(
        self,
        location_id: str,
        start: datetime,
        end: datetime,
        include_start: bool = True,
    ) -> Dict[str, float]:
        """Delivered shipments whose effective timestamp is within the window.

        The lower bound is exclusive when ``include_start`` is False, which is
        how windows starting at an anchor are expressed.
        """
        canonical = self.resolver.resolve_location(location_id)
        filters = DeliveryFilters(
            origin_ref=self.resolver.location_refs(location_id),
            status=DELIVERED,
            start_ts=start,
            end_ts=end,
        )
        records = []
        for rec in guarded("delivery records", self.data_access.get_deliveries, filters):
            ts = rec.effective_ts
            if not rec.is_delivered or ts is None:
                continue
            if self.resolver.resolve_location(rec.origin_ref) != canonical:
                continue
            after_start = ts >= start if include_start else ts > start
            if after_start and ts <= end:
                records.append(rec)
        self.logger.debug(f"{len(records)} deliveries for {canonical} in {'[' if include_start else '('}{start}, {end}]")
        return self._totals(location_id, ((key, qty) for rec in records for key, qty in rec.quantities.items()))

    # ---------- helpers ----------

    def _totals(self, location_id: str, lines: Iterable[Tuple[str, float]]) -> Dict[str, float]:
        out = {key: 0.0 for key in self.resolver.applicable_item_keys(location_id)}

        df = pd.DataFrame(list(lines), columns=["raw_key", "quantity"])
        if df.empty:
            return out

        identities = df["raw_key"].map(self.resolver.identify_item)
        df["item_key"] = identities.map(lambda ident: ident.value)
        unmatched = sorted({ident.raw for ident in identities if not ident.resolved})
        if unmatched:
            self.logger.warning(f"Item keys not in catalog, kept under normalized keys: {unmatched}")

        totals = df.groupby("item_key", sort=False)["quantity"].sum()
        for key, qty in totals.items():
            out[key] = out.get(key, 0.0) + float(qty)
        return out
