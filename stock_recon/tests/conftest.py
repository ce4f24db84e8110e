import pytest

from stock_recon.config import get_config, set_config_for_test
from stock_recon.data.backends.memory_backend import InMemoryDataAccess
from stock_recon.data.models import Item, Location
from stock_recon.engine import ReconciliationEngine

from .builders import at


@pytest.fixture(autouse=True)
def recon_config():
    set_config_for_test(log_level="WARNING", reference_utc_offset_minutes=330)
    yield get_config()


@pytest.fixture
def locations():
    return [
        Location(location_id="PH-1", name="Central Kitchen", alias_ids=["STORE-7"]),
        Location(location_id="PH-2", name="North Kitchen", alias_ids=["STORE-9", "STORE-10"]),
    ]


@pytest.fixture
def items():
    return [
        Item(key="chicken", display_name="Chicken Momos", item_id="itm-001"),
        Item(key="veg", display_name="Veg Momos", item_id="itm-002"),
        Item(key="chicken_cheese", display_name="Chicken Cheese Momos"),
        Item(key="paneer", display_name="Paneer Momos", scope="location", location_id="PH-2"),
        Item(key="corn", display_name="Corn Momos", is_active=False),
    ]


@pytest.fixture
def make_store(locations, items):
    def _make(production=(), deliveries=(), recalibrations=()):
        return InMemoryDataAccess(
            locations=locations,
            items=items,
            production=production,
            deliveries=deliveries,
            recalibrations=recalibrations,
        )
    return _make


@pytest.fixture
def make_engine(make_store):
    def _make(production=(), deliveries=(), recalibrations=(), now=None):
        store = make_store(production, deliveries, recalibrations)
        return ReconciliationEngine(store, clock=lambda: now or at(2025, 3, 20))
    return _make
