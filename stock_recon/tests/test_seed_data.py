from stock_recon.data.backends.csv_backend import CsvDataAccess
from stock_recon.data.models import AnchorKind
from stock_recon.engine import ReconciliationEngine
from stock_recon.seed_data import main

from .builders import at

ARGS = ["--start-date", "2025-02-01", "--days", "45", "--seed", "7"]


def test_seeded_data_loads_and_reconciles(tmp_path):
    assert main(ARGS + ["--output-dir", str(tmp_path)]) == 0

    da = CsvDataAccess(tmp_path)
    assert [loc.location_id for loc in da.list_locations()] == ["PH-1", "PH-2", "PH-3"]

    engine = ReconciliationEngine(da, clock=lambda: at(2025, 3, 10))
    ph1 = engine.compute_state("PH-1")
    # Every raw spelling resolves, so only catalog keys come back
    assert set(ph1.lines) == {"chicken", "veg", "paneer", "chicken_cheese", "corn"}
    assert ph1.anchor.kind == AnchorKind.NONE

    february = engine.periods.period_for(2025, 2)
    assert engine.compute_state("PH-2", at(2025, 2, 10)).anchor.kind == AnchorKind.FULL_RESET
    assert engine.compute_state("PH-1", at(2025, 2, 20)).anchor.kind == AnchorKind.MID_PERIOD
    assert set(engine.closing_balance_of("PH-2", february)) == {"chicken", "veg", "paneer", "chicken_cheese"}


def test_same_seed_writes_same_files(tmp_path):
    main(ARGS + ["--output-dir", str(tmp_path / "a")])
    main(ARGS + ["--output-dir", str(tmp_path / "b")])
    for name in ("locations", "production", "deliveries", "recalibrations"):
        assert (tmp_path / "a" / f"{name}.csv").read_text() == (tmp_path / "b" / f"{name}.csv").read_text()


def test_no_overwrite_refuses_existing_files(tmp_path):
    main(ARGS + ["--output-dir", str(tmp_path)])
    assert main(ARGS + ["--output-dir", str(tmp_path), "--no-overwrite"]) == 2
