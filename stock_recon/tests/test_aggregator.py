from datetime import date

import pytest

from stock_recon.data.models import DeliveryRecord
from stock_recon.engine.aggregator import Aggregator
from stock_recon.engine.identity import IdentityResolver

from .builders import at, delivery, production


@pytest.fixture
def make_aggregator(make_store, locations, items):
    def _make(production=(), deliveries=()):
        return Aggregator(make_store(production, deliveries), IdentityResolver(locations, items))
    return _make


def test_empty_windows_are_zero_filled(make_aggregator):
    agg = make_aggregator()
    assert agg.sum_production("PH-1", date(2025, 3, 1), date(2025, 3, 31)) == {
        "chicken": 0.0, "veg": 0.0, "chicken_cheese": 0.0,
    }
    assert agg.sum_deliveries("PH-2", at(2025, 3, 1, 0), at(2025, 3, 31, 23)) == {
        "chicken": 0.0, "veg": 0.0, "chicken_cheese": 0.0, "paneer": 0.0,
    }


def test_production_counts_only_approved_records_in_range(make_aggregator):
    agg = make_aggregator(production=[
        production("p1", "PH-1", date(2025, 3, 1), {"chicken_momos": 10}),
        production("p2", "PH-1", date(2025, 3, 31), {"chickenMomos": 5, "veg": 2}),
        production("p3", "PH-1", date(2025, 3, 15), {"chicken": 100}, status="pending"),
        production("p4", "PH-1", date(2025, 3, 16), {"chicken": 100}, status="rejected"),
        production("p5", "PH-1", date(2025, 4, 1), {"chicken": 100}),
        production("p6", "PH-2", date(2025, 3, 10), {"chicken": 100}),
    ])
    totals = agg.sum_production("PH-1", date(2025, 3, 1), date(2025, 3, 31))
    assert totals == {"chicken": 15.0, "veg": 2.0, "chicken_cheese": 0.0}


def test_production_tagged_with_alias_counts(make_aggregator):
    agg = make_aggregator(production=[production("p1", "STORE-9", date(2025, 3, 2), {"paneer_momos": 7})])
    assert agg.sum_production("PH-2", date(2025, 3, 1), date(2025, 3, 31))["paneer"] == 7.0


def test_unmatched_item_key_kept_under_normalized_key(make_aggregator):
    agg = make_aggregator(production=[production("p1", "PH-1", date(2025, 3, 2), {"mutton_momos": 40})])
    totals = agg.sum_production("PH-1", date(2025, 3, 1), date(2025, 3, 31))
    assert totals["mutton"] == 40.0


def test_deliveries_count_only_delivered_status(make_aggregator):
    agg = make_aggregator(deliveries=[
        delivery("d1", "STORE-7", at(2025, 3, 5), {"chicken": 30}),
        delivery("d2", "STORE-7", at(2025, 3, 6), {"chicken": 99}, status="pending"),
        delivery("d3", "STORE-9", at(2025, 3, 6), {"chicken": 99}),
    ])
    assert agg.sum_deliveries("PH-1", at(2025, 3, 1, 0), at(2025, 3, 31, 23))["chicken"] == 30.0


def test_delivery_lower_bound_inclusive_or_exclusive(make_aggregator):
    start = at(2025, 3, 14, 0)
    agg = make_aggregator(deliveries=[
        delivery("d1", "PH-1", start, {"chicken": 1}),
        delivery("d2", "PH-1", at(2025, 3, 14, 10), {"chicken": 10}),
    ])
    assert agg.sum_deliveries("PH-1", start, at(2025, 3, 31))["chicken"] == 11.0
    assert agg.sum_deliveries("PH-1", start, at(2025, 3, 31), include_start=False)["chicken"] == 10.0


def test_delivery_upper_bound_is_inclusive(make_aggregator):
    end = at(2025, 3, 20, 15)
    agg = make_aggregator(deliveries=[
        delivery("d1", "PH-1", end, {"veg": 4}),
        delivery("d2", "PH-1", at(2025, 3, 20, 16), {"veg": 50}),
    ])
    assert agg.sum_deliveries("PH-1", at(2025, 3, 1, 0), end)["veg"] == 4.0


def test_effective_timestamp_falls_back_to_requested_then_created(make_aggregator):
    deliveries = [
        DeliveryRecord(record_id="d1", origin_ref="PH-1", status="delivered",
                       requested_at=at(2025, 3, 3), created_at=at(2025, 2, 27), quantities={"veg": 3}),
        DeliveryRecord(record_id="d2", origin_ref="PH-1", status="delivered",
                       created_at="2025-03-04T10:00:00", quantities={"veg": 4}),
        DeliveryRecord(record_id="d3", origin_ref="PH-1", status="delivered",
                       requested_at=at(2025, 2, 27), created_at=at(2025, 3, 4), quantities={"veg": 100}),
    ]
    agg = make_aggregator(deliveries=deliveries)
    assert agg.sum_deliveries("PH-1", at(2025, 3, 1, 0), at(2025, 3, 31))["veg"] == 7.0


def test_legacy_delivery_timestamp_format(make_aggregator):
    record = DeliveryRecord(record_id="d1", origin_ref="PH-1", status="delivered",
                            delivered_at="05/03/2025, 00:29:07", quantities={"veg": 6})
    assert record.effective_ts == at(2025, 3, 5, 0, 29).replace(second=7)
    agg = make_aggregator(deliveries=[record])
    assert agg.sum_deliveries("PH-1", at(2025, 3, 1, 0), at(2025, 3, 31))["veg"] == 6.0
