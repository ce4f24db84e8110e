from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from stock_recon.config import ReconConfig, get_config
from stock_recon.data.interface import DataAccess
from stock_recon.data.models import (
    AmbiguousDataWarning,
    AnchorKind,
    AnchorResult,
    Period,
    StockFlag,
    StockLine,
    StockState,
)
from stock_recon.logging import get_logger
from .access import guarded
from .aggregator import Aggregator
from .anchors import AnchorSelector
from .identity import IdentityResolver
from .periods import PeriodCalculator


@dataclass
class _Balance:
    anchor: AnchorResult
    opening: Dict[str, float]
    produced: Dict[str, float]
    delivered: Dict[str, float]

    def closing(self) -> Dict[str, float]:
        keys = dict.fromkeys([*self.opening, *self.produced, *self.delivered])
        return {
            key: self.opening.get(key, 0.0) + self.produced.get(key, 0.0) - self.delivered.get(key, 0.0)
            for key in keys
        }


@dataclass
class _Context:
    location_id: str
    resolver: IdentityResolver
    anchors: AnchorSelector
    aggregator: Aggregator


class ReconciliationEngine:
    """Derives current on-hand stock per item for a location.

    Stock is ``opening + produced - delivered`` where the opening comes from,
    in order of preference:

    - a full-reset recalibration on the first day of the period, which also
      absorbs that day's activity;
    - a mid-period recalibration, after which production dated later than the
      count and deliveries timestamped from the start of the count day on are
      applied;
    - otherwise the closing balance of the previous period, walking back at
      most ``rollforward_depth`` periods (zero beyond that).

    Every call reads the records afresh and keeps no state between calls, so
    concurrent callers need no coordination. Negative results are reported
    with an ``over_distributed`` flag and a warning, never clamped.
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

    def resolver(self) -> IdentityResolver:
        """Identity resolver over a point-in-time read of the catalogs."""
        locations = guarded("locations", self.data_access.list_locations)
        items = guarded("items", self.data_access.list_items)
        return IdentityResolver(locations, items, self.config.product_unit_suffixes)

    def compute_stock(self, location_id: str, as_of: Optional[datetime] = None) -> Dict[str, StockLine]:
        """Current stock per item key with its flag."""
        return self.compute_state(location_id, as_of).lines

    def compute_state(
        self,
        location_id: str,
        as_of: Optional[datetime] = None,
        depth: Optional[int] = None,
    ) -> StockState:
        as_of = self.periods.localize(as_of or self.clock())
        depth = self.config.rollforward_depth if depth is None else depth

        ctx, resolved = self._context(location_id)

        period = self.periods.current_period(as_of)
        balance = self._balance(ctx, period, as_of, depth)

        if balance.anchor.kind == AnchorKind.NONE:
            period_produced, period_delivered = balance.produced, balance.delivered
        else:
            period_produced = ctx.aggregator.sum_production(ctx.location_id, period.start, as_of.date())
            period_delivered = ctx.aggregator.sum_deliveries(ctx.location_id, period.start_ts, as_of)

        lines: Dict[str, StockLine] = {}
        warnings = []
        for key, qty in balance.closing().items():
            qty = self._round(qty)
            flag = StockFlag.OVER_DISTRIBUTED if qty < 0 else StockFlag.NORMAL
            lines[key] = StockLine(
                quantity=qty,
                flag=flag,
                opening=self._round(balance.opening.get(key, 0.0)),
                produced=self._round(balance.produced.get(key, 0.0)),
                delivered=self._round(balance.delivered.get(key, 0.0)),
            )
            if flag == StockFlag.OVER_DISTRIBUTED:
                self.logger.warning(f"{ctx.location_id}: {key} over-distributed at {qty}")
                warnings.append(AmbiguousDataWarning(
                    location_id=ctx.location_id,
                    item_key=key,
                    quantity=qty,
                    message=f"More {key} shipped than produced and counted ({qty})",
                ))

        return StockState(
            location_id=ctx.location_id,
            resolved=resolved,
            as_of=as_of,
            period=period,
            anchor=balance.anchor,
            opening_balance=self._rounded(balance.opening),
            produced=self._rounded(balance.produced),
            delivered=self._rounded(balance.delivered),
            period_produced=self._rounded(period_produced),
            period_delivered=self._rounded(period_delivered),
            lines=lines,
            warnings=warnings,
        )

    def closing_balance_of(self, location_id: str, period: Period, depth: Optional[int] = None) -> Dict[str, float]:
        """Stock at the end of `period`, derived from that period's own records.

        Without an anchor in `period` the opening walks back `depth` further
        periods (default: one less than ``rollforward_depth``).
        """
        depth = max(self.config.rollforward_depth - 1, 0) if depth is None else depth
        ctx, _ = self._context(location_id)
        return self._rounded(self._balance(ctx, period, period.end_ts, depth).closing())

    # ---------- derivation ----------

    def _context(self, location_id: str) -> Tuple[_Context, bool]:
        resolver = self.resolver()
        identity = resolver.identify_location(location_id)
        if not identity.resolved:
            self.logger.warning(f"Location {location_id!r} not in catalog, using raw id")
        ctx = _Context(
            location_id=identity.value,
            resolver=resolver,
            anchors=AnchorSelector(self.data_access, resolver, self.config.fetch_workers),
            aggregator=Aggregator(self.data_access, resolver),
        )
        return ctx, identity.resolved

    def _balance(self, ctx: _Context, period: Period, as_of: datetime, depth: int) -> _Balance:
        day = as_of.date()
        anchor = ctx.anchors.select_anchor(ctx.location_id, period, day)

        if anchor.kind == AnchorKind.NONE:
            if depth > 0:
                previous = self.periods.previous_period(period)
                opening = self._balance(ctx, previous, previous.end_ts, depth - 1).closing()
            else:
                opening = {}
            self.logger.debug(f"{ctx.location_id} {period.label}: no anchor, opening rolled forward (depth {depth})")
            return _Balance(
                anchor=anchor,
                opening=self._zero_filled(ctx, opening),
                produced=ctx.aggregator.sum_production(ctx.location_id, period.start, day),
                delivered=ctx.aggregator.sum_deliveries(ctx.location_id, period.start_ts, as_of),
            )

        snapshot = anchor.snapshot
        anchor_day = snapshot.effective_date
        # Production on the count day is taken to be in the count already
        produced = ctx.aggregator.sum_production(ctx.location_id, anchor_day + timedelta(days=1), day)
        if anchor.kind == AnchorKind.FULL_RESET:
            delivered_from = self.periods.end_of_day(anchor_day)
        else:
            delivered_from = self.periods.start_of_day(anchor_day)
        delivered = ctx.aggregator.sum_deliveries(ctx.location_id, delivered_from, as_of, include_start=False)

        opening: Dict[str, float] = {}
        for raw_key, qty in snapshot.quantities.items():
            key = ctx.resolver.resolve_item_key(raw_key)
            opening[key] = opening.get(key, 0.0) + qty
        self.logger.debug(f"{ctx.location_id} {period.label}: {anchor.kind.value} anchor on {anchor_day}")
        return _Balance(anchor=anchor, opening=self._zero_filled(ctx, opening), produced=produced, delivered=delivered)

    # ---------- helpers ----------

    def _zero_filled(self, ctx: _Context, values: Dict[str, float]) -> Dict[str, float]:
        out = {key: 0.0 for key in ctx.resolver.applicable_item_keys(ctx.location_id)}
        for key, qty in values.items():
            out[key] = out.get(key, 0.0) + qty
        return out

    def _round(self, value: float) -> float:
        # Also normalizes -0.0
        return round(value, self.config.quantity_precision) + 0.0

    def _rounded(self, values: Dict[str, float]) -> Dict[str, float]:
        return {key: self._round(qty) for key, qty in values.items()}
