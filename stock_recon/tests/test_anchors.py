from datetime import date

import pytest

from stock_recon.data.models import AnchorKind
from stock_recon.engine.anchors import AnchorSelector
from stock_recon.engine.identity import IdentityResolver
from stock_recon.engine.periods import PeriodCalculator

from .builders import IST, at, recalibration


@pytest.fixture
def march():
    return PeriodCalculator(IST).current_period(at(2025, 3, 15))


@pytest.fixture
def select(make_store, locations, items):
    def _select(snapshots, location_id="PH-1", period=None, as_of=None):
        store = make_store(recalibrations=snapshots)
        selector = AnchorSelector(store, IdentityResolver(locations, items))
        return selector.select_anchor(location_id, period, as_of)
    return _select


def test_no_snapshot_means_no_anchor(select, march):
    result = select([], period=march)
    assert result.kind == AnchorKind.NONE
    assert result.snapshot is None


def test_first_day_snapshot_is_full_reset(select, march):
    result = select([recalibration("r1", "PH-1", date(2025, 3, 1), {"chicken": 500})], period=march)
    assert result.kind == AnchorKind.FULL_RESET
    assert result.snapshot.snapshot_id == "r1"


def test_later_snapshot_is_mid_period(select, march):
    result = select([recalibration("r1", "PH-1", date(2025, 3, 14), {"chicken": 420})], period=march)
    assert result.kind == AnchorKind.MID_PERIOD


def test_latest_effective_date_wins(select, march):
    snapshots = [
        recalibration("early", "PH-1", date(2025, 3, 1), {"chicken": 1}, created_at=at(2025, 3, 20)),
        recalibration("late", "PH-1", date(2025, 3, 10), {"chicken": 2}, created_at=at(2025, 3, 10)),
    ]
    assert select(snapshots, period=march).snapshot.snapshot_id == "late"


def test_same_day_most_recently_created_wins(select, march):
    snapshots = [
        recalibration("second", "PH-1", date(2025, 3, 5), {"chicken": 2}, created_at=at(2025, 3, 5, 18)),
        recalibration("first", "PH-1", date(2025, 3, 5), {"chicken": 1}, created_at=at(2025, 3, 5, 9)),
    ]
    assert select(snapshots, period=march).snapshot.snapshot_id == "second"


def test_snapshot_stored_under_alias_is_found(select, march):
    snapshots = [recalibration("r1", "STORE-7", date(2025, 3, 3), {"chicken": 5})]
    assert select(snapshots, "PH-1", period=march).snapshot.snapshot_id == "r1"
    assert select([recalibration("r2", "PH-1", date(2025, 3, 3), {})], "STORE-7", period=march).snapshot.snapshot_id == "r2"


def test_pending_and_rejected_snapshots_are_ignored(select, march):
    snapshots = [
        recalibration("p", "PH-1", date(2025, 3, 8), {"chicken": 1}, status="pending"),
        recalibration("x", "PH-1", date(2025, 3, 9), {"chicken": 1}, status="rejected"),
    ]
    assert select(snapshots, period=march).kind == AnchorKind.NONE


def test_snapshots_outside_the_period_are_ignored(select, march):
    snapshots = [
        recalibration("feb", "PH-1", date(2025, 2, 1), {"chicken": 1}),
        recalibration("apr", "PH-1", date(2025, 4, 1), {"chicken": 1}),
        recalibration("other", "PH-2", date(2025, 3, 2), {"chicken": 1}),
    ]
    assert select(snapshots, period=march).kind == AnchorKind.NONE


def test_snapshot_after_as_of_is_ignored(select, march):
    snapshots = [
        recalibration("r1", "PH-1", date(2025, 3, 1), {"chicken": 1}),
        recalibration("r2", "PH-1", date(2025, 3, 25), {"chicken": 2}),
    ]
    assert select(snapshots, period=march, as_of=date(2025, 3, 20)).snapshot.snapshot_id == "r1"
    assert select(snapshots, period=march).snapshot.snapshot_id == "r2"


def test_same_creation_time_goes_to_last_stored(select, march):
    created = at(2025, 3, 5, 18)
    snapshots = [
        recalibration("stored-first", "PH-1", date(2025, 3, 5), {"chicken": 1}, created_at=created),
        recalibration("stored-last", "PH-1", date(2025, 3, 5), {"chicken": 2}, created_at=created),
    ]
    assert select(snapshots, period=march).snapshot.snapshot_id == "stored-last"
