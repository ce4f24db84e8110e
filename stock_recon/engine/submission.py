from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Callable, List, Mapping, Optional, Sequence, Union

from stock_recon.config import ReconConfig, get_config
from stock_recon.data.interface import DataAccess
from stock_recon.data.models import (
    ApprovalStatus,
    RecalibrationItem,
    RecalibrationSnapshot,
    StockLine,
)
from stock_recon.errors import ValidationError
from stock_recon.logging import get_logger
from .access import guarded
from .identity import IdentityResolver
from .periods import PeriodCalculator

CountedItems = Union[Mapping[str, float], Sequence[RecalibrationItem]]
SystemQuantities = Mapping[str, Union[float, StockLine]]


class RecalibrationSubmissionHandler:
    """Validates a manual count and stores it as a new snapshot.

    A submission never merges with or replaces an existing snapshot: a second
    count for the same location and day is simply a newer record, and anchor
    selection takes the most recently created one.
    """

    def __init__(
        self,
        data_access: DataAccess,
        config: Optional[ReconConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.data_access = data_access
        self.config = config or get_config()
        self.periods = PeriodCalculator(self.config.reference_tz)
        self.clock = clock or (lambda: datetime.now(self.config.reference_tz))
        self.logger = get_logger(__name__)

    def submit_recalibration(
        self,
        location_id: str,
        effective_date: Union[date, str],
        items: CountedItems,
        *,
        role: Optional[str] = None,
        submitted_by: Optional[str] = None,
        location_type: Optional[str] = None,
        system_quantities: Optional[SystemQuantities] = None,
    ) -> str:
        """Validate and persist a count; returns the new snapshot id.

        Args:
            location_id: Canonical id or alias of the counted location.
            effective_date: Calendar day the count applies to; not in the future.
            items: Raw item key to counted quantity, or RecalibrationItem entries.
            role: Caller role; roles in ``auto_approve_roles`` skip approval.
            submitted_by: Submitting user, stored on the snapshot.
            location_type: Defaults to the catalog's type for the location.
            system_quantities: Stock the caller obtained from the engine before
                counting. When given, each item's variance is recorded and any
                non-zero variance must carry an ``adjustment_type``.
        Raises:
            ValidationError: Listing every problem found; nothing is stored.
            DataUnavailableError: The catalog could not be read or the write failed.
        """
        resolver = IdentityResolver(
            guarded("locations", self.data_access.list_locations),
            guarded("items", self.data_access.list_items),
            self.config.product_unit_suffixes,
        )
        errors: List[str] = []

        location = resolver.identify_location(location_id)
        if not location.resolved:
            errors.append(f"Unknown location {location_id!r}")

        day = self._parse_date(effective_date, errors)
        today = self.periods.local_date(self.clock())
        if day is not None and day > today:
            errors.append(f"Effective date {day} is in the future")

        counted = self._counted_items(items, errors)
        if not items:
            errors.append("No items counted")

        system = {}
        for raw_key, value in (system_quantities or {}).items():
            system[resolver.resolve_item_key(raw_key)] = value.quantity if isinstance(value, StockLine) else float(value)

        applicable = set(resolver.applicable_item_keys(location.value))
        resolved_items: List[RecalibrationItem] = []
        seen = set()
        for item in counted:
            ident = resolver.identify_item(item.item_key)
            if not ident.resolved:
                errors.append(f"Unknown item {item.item_key!r}")
                continue
            if ident.value not in applicable:
                errors.append(f"Item {ident.value!r} is not tracked at {location.value!r}")
                continue
            if ident.value in seen:
                errors.append(f"Item {ident.value!r} counted more than once")
                continue
            seen.add(ident.value)
            if item.actual_quantity < 0:
                errors.append(f"Counted quantity for {ident.value!r} is negative")
                continue

            update = {"item_key": ident.value}
            if ident.value in system:
                difference = round(item.actual_quantity - system[ident.value], self.config.quantity_precision)
                update.update(system_quantity=system[ident.value], difference=difference)
                if difference != 0 and item.adjustment_type is None:
                    errors.append(f"Item {ident.value!r} differs by {difference} and needs an adjustment type")
            resolved_items.append(item.model_copy(update=update))

        if errors:
            self.logger.warning(f"Recalibration for {location_id!r} rejected: {errors}")
            raise ValidationError(errors)

        loc = resolver.location(location.value)
        status = ApprovalStatus.APPROVED if role in self.config.auto_approve_roles else ApprovalStatus.PENDING
        snapshot = RecalibrationSnapshot(
            snapshot_id=uuid.uuid4().hex,
            location_ref=location.value,
            location_type=location_type or loc.location_type,
            effective_date=day,
            items=resolved_items,
            status=status,
            created_at=self.periods.localize(self.clock()),
            submitted_by=submitted_by,
        )
        snapshot_id = guarded("recalibrations", self.data_access.save_recalibration, snapshot)
        self.logger.info(
            f"Recalibration {snapshot_id} stored for {location.value} on {day} "
            f"({len(resolved_items)} items, {status.value})"
        )
        return snapshot_id

    # ---------- helpers ----------

    def _parse_date(self, value: Union[date, str], errors: List[str]) -> Optional[date]:
        if isinstance(value, datetime):
            return self.periods.local_date(value)
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                pass
        errors.append(f"Invalid effective date {value!r}")
        return None

    @staticmethod
    def _counted_items(items: CountedItems, errors: List[str]) -> List[RecalibrationItem]:
        if isinstance(items, Mapping):
            out = []
            for key, qty in items.items():
                try:
                    out.append(RecalibrationItem(item_key=key, actual_quantity=float(qty)))
                except (TypeError, ValueError):
                    errors.append(f"Counted quantity for {key!r} is not a number: {qty!r}")
            return out
        return list(items or [])
