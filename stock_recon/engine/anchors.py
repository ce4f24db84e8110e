from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Dict, List, Optional

from stock_recon.data.interface import DataAccess
from stock_recon.data.models import (
    AnchorKind,
    AnchorResult,
    ApprovalStatus,
    Period,
    RecalibrationFilters,
    RecalibrationSnapshot,
)
from stock_recon.logging import get_logger
from .access import guarded
from .identity import IdentityResolver


class AnchorSelector:
    """Finds the authoritative recalibration snapshot for a location and period."""

    def __init__(self, data_access: DataAccess, resolver: IdentityResolver, workers: int = 4) -> None:
        self.data_access = data_access
        self.resolver = resolver
        self.workers = max(1, workers)
        self.logger = get_logger(__name__)

    def select_anchor(self, location_id: str, period: Period, as_of: Optional[date] = None) -> AnchorResult:
        """Latest approved snapshot dated within ``period`` (and not after ``as_of``).

        Snapshots stored under the canonical id or any alias are considered.
        Same-day ties go to the most recently created snapshot, then to the
        one stored last.
        """
        canonical = self.resolver.resolve_location(location_id)
        upper = min(period.end, as_of) if as_of else period.end

        candidates = [
            snap for snap in self._fetch(location_id, period.start, upper)
            if snap.status == ApprovalStatus.APPROVED
            and self.resolver.resolve_location(snap.location_ref) == canonical
            and period.start <= snap.effective_date <= upper
        ]
        if not candidates:
            self.logger.debug(f"No anchor for {canonical} in {period.label}")
            return AnchorResult(kind=AnchorKind.NONE)

        # Equal creation times fall back to storage order, later wins
        _, best = max(
            enumerate(candidates),
            key=lambda pair: (pair[1].effective_date, pair[1].created_at, pair[0]),
        )
        kind = AnchorKind.FULL_RESET if best.effective_date == period.start else AnchorKind.MID_PERIOD
        self.logger.debug(f"Anchor {best.snapshot_id} ({kind.value}) dated {best.effective_date} for {canonical}")
        return AnchorResult(kind=kind, snapshot=best)

    def _fetch(self, location_id: str, start: date, end: date) -> List[RecalibrationSnapshot]:
        refs = self.resolver.location_refs(location_id)

        def fetch(ref: str) -> List[RecalibrationSnapshot]:
            filters = RecalibrationFilters(
                location_ref=ref,
                status=ApprovalStatus.APPROVED.value,
                start_date=start,
                end_date=end,
            )
            return guarded("recalibrations", self.data_access.get_recalibrations, filters)

        # Lookups per identifier are independent reads
        with ThreadPoolExecutor(max_workers=min(self.workers, len(refs))) as pool:
            batches = list(pool.map(fetch, refs))

        unique: Dict[str, RecalibrationSnapshot] = {}
        for batch in batches:
            for snap in batch:
                unique.setdefault(snap.snapshot_id, snap)
        return list(unique.values())
