from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List

import pandas as pd

from ...config import get_config
from ...errors import DataUnavailableError
from ..interface import DataAccess
from ..models import (
    ProductionFilters, DeliveryFilters, RecalibrationFilters,
    Location, Item, ProductionRecord, DeliveryRecord,
    RecalibrationItem, RecalibrationSnapshot,
)
from ..models.data_filters import as_list
from ..models.timestamps import parse_timestamp

LOCATION_COLUMNS = ["location_id", "name", "alias_ids", "location_type"]
ITEM_COLUMNS = ["key", "display_name", "unit", "scope", "location_id", "item_id", "is_active"]
PRODUCTION_COLUMNS = ["record_id", "location_ref", "date", "approval_status", "created_at", "item_key", "quantity"]
DELIVERY_COLUMNS = ["record_id", "origin_ref", "status", "delivered_at", "requested_at", "created_at", "item_key", "quantity"]
RECALIBRATION_COLUMNS = [
    "snapshot_id", "location_ref", "location_type", "effective_date", "status", "created_at", "submitted_by",
    "item_key", "actual_quantity", "system_quantity", "difference", "adjustment_type", "notes",
]


@dataclass
class _Tables:
    locations: pd.DataFrame
    items: pd.DataFrame
    # Long form: one row per (record, item) pair
    production: pd.DataFrame
    deliveries: pd.DataFrame
    recalibrations: pd.DataFrame


class CsvDataAccess(DataAccess):
    """
    CSV-backed implementation.
    - Loads CSVs from `data_dir` once at construction.
    - Every method call performs a fresh filter pass over the loaded frames.
    - save_recalibration appends to recalibrations.csv and to the loaded frame.
    """

    def __init__(self, data_dir: str | Path = None) -> None:
        if data_dir is None:
            config = get_config()
            data_dir = config.data_dir

        self.data_dir = Path(data_dir)

        # If the path is relative, make it relative to the repository root
        if not self.data_dir.is_absolute():
            current = Path.cwd()
            repo_root = None

            # Look up the directory tree for pyproject.toml
            for parent in [current] + list(current.parents):
                if (parent / "pyproject.toml").exists():
                    repo_root = parent
                    break

            self.data_dir = (repo_root or current) / self.data_dir

        self._tz = get_config().reference_tz
        self._tables = self._load_tables(self.data_dir)

    # ---------- loading helpers ----------

    def _load_tables(self, data_dir: Path) -> _Tables:
        if not data_dir.exists():
            raise DataUnavailableError(
                f"Data directory not found: {data_dir}\n"
                f"Set DATA_DIR to a directory containing locations.csv and items.csv, "
                f"or generate sample data with stock-recon-seed",
                source=str(data_dir),
            )

        required_files = ["locations.csv", "items.csv"]
        missing_files = [f for f in required_files if not (data_dir / f).exists()]
        if missing_files:
            raise DataUnavailableError(
                f"Required CSV files missing in {data_dir}:\n"
                f"  Missing: {', '.join(missing_files)}\n"
                f"  Expected files: {', '.join(required_files)}",
                source=str(data_dir),
            )

        try:
            locations = self._read(data_dir / "locations.csv", LOCATION_COLUMNS)
            items = self._read(data_dir / "items.csv", ITEM_COLUMNS)
            production = self._read(data_dir / "production.csv", PRODUCTION_COLUMNS)
            deliveries = self._read(data_dir / "deliveries.csv", DELIVERY_COLUMNS)
            recalibrations = self._read(data_dir / "recalibrations.csv", RECALIBRATION_COLUMNS)

            production["quantity"] = production["quantity"].astype(float)
            production["day"] = pd.to_datetime(production["date"], format="%Y-%m-%d").dt.date
            deliveries["quantity"] = deliveries["quantity"].astype(float)
            deliveries["effective_ts"] = self._effective_ts(deliveries)
            recalibrations["actual_quantity"] = recalibrations["actual_quantity"].astype(float)
            recalibrations["day"] = pd.to_datetime(recalibrations["effective_date"], format="%Y-%m-%d").dt.date
        except (OSError, ValueError, KeyError) as e:
            raise DataUnavailableError(
                f"Error reading CSV files from {data_dir}: {e}\n"
                f"Please check that the CSV files are valid and readable.",
                source=str(data_dir),
            ) from e

        return _Tables(
            locations=locations,
            items=items,
            production=production,
            deliveries=deliveries,
            recalibrations=recalibrations,
        )

    @staticmethod
    def _read(path: Path, columns: List[str]) -> pd.DataFrame:
        # Everything is read as text; optional files load as empty frames
        if not path.exists():
            return pd.DataFrame(columns=columns)
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        for col in columns:
            if col not in df.columns:
                df[col] = ""
        return df

    def _effective_ts(self, deliveries: pd.DataFrame) -> pd.Series:
        def first_available(row) -> object:
            for col in ("delivered_at", "requested_at", "created_at"):
                ts = parse_timestamp(row[col], self._tz)
                if ts is not None:
                    return ts
            return None

        if deliveries.empty:
            return pd.Series([], dtype="datetime64[ns, UTC]")
        return pd.to_datetime(deliveries.apply(first_available, axis=1), utc=True)

    @staticmethod
    def _group(df: pd.DataFrame, id_col: str, build: Callable[[pd.DataFrame], object]) -> list:
        return [build(rows) for _, rows in df.groupby(id_col, sort=False)]

    @staticmethod
    def _quantities(rows: pd.DataFrame) -> Dict[str, float]:
        return rows.groupby("item_key", sort=False)["quantity"].sum().to_dict()

    # ---------- interface implementation ----------

    def list_locations(self) -> List[Location]:
        out = []
        for row in self._tables.locations.to_dict("records"):
            out.append(Location(
                location_id=row["location_id"],
                name=row["name"],
                alias_ids=[a for a in row["alias_ids"].split("|") if a],
                location_type=row["location_type"] or "production_house",
            ))
        return out

    def list_items(self) -> List[Item]:
        out = []
        for row in self._tables.items.to_dict("records"):
            out.append(Item(
                key=row["key"],
                display_name=row["display_name"],
                unit=row["unit"] or "pieces",
                scope=row["scope"] or "global",
                location_id=row["location_id"] or None,
                item_id=row["item_id"] or None,
                is_active=row["is_active"].strip().lower() not in ("false", "0", "no"),
            ))
        return out

    def get_production(self, filters: ProductionFilters) -> List[ProductionRecord]:
        df = self._tables.production

        mask = pd.Series(True, index=df.index)
        refs = as_list(filters.location_ref)
        if refs is not None:
            mask &= df["location_ref"].isin(refs)
        if filters.approval_status:
            mask &= (df["approval_status"] == filters.approval_status)
        if filters.start_date:
            mask &= (df["day"] >= filters.start_date)
        if filters.end_date:
            mask &= (df["day"] <= filters.end_date)

        def build(rows: pd.DataFrame) -> ProductionRecord:
            head = rows.iloc[0]
            return ProductionRecord(
                record_id=head["record_id"],
                location_ref=head["location_ref"],
                date=head["day"],
                approval_status=head["approval_status"] or "pending",
                created_at=head["created_at"] or None,
                quantities=self._quantities(rows),
            )

        return self._group(df.loc[mask], "record_id", build)

    def get_deliveries(self, filters: DeliveryFilters) -> List[DeliveryRecord]:
        df = self._tables.deliveries

        mask = pd.Series(True, index=df.index)
        refs = as_list(filters.origin_ref)
        if refs is not None:
            mask &= df["origin_ref"].isin(refs)
        if filters.status:
            mask &= (df["status"] == filters.status)
        if filters.start_ts:
            mask &= (df["effective_ts"] >= pd.Timestamp(filters.start_ts))
        if filters.end_ts:
            mask &= (df["effective_ts"] <= pd.Timestamp(filters.end_ts))

        def build(rows: pd.DataFrame) -> DeliveryRecord:
            head = rows.iloc[0]
            return DeliveryRecord(
                record_id=head["record_id"],
                origin_ref=head["origin_ref"],
                status=head["status"],
                delivered_at=head["delivered_at"] or None,
                requested_at=head["requested_at"] or None,
                created_at=head["created_at"] or None,
                quantities=self._quantities(rows),
            )

        return self._group(df.loc[mask], "record_id", build)

    def get_recalibrations(self, filters: RecalibrationFilters) -> List[RecalibrationSnapshot]:
        df = self._tables.recalibrations

        mask = pd.Series(True, index=df.index)
        refs = as_list(filters.location_ref)
        if refs is not None:
            mask &= df["location_ref"].isin(refs)
        statuses = as_list(filters.status)
        if statuses is not None:
            mask &= df["status"].isin(statuses)
        if filters.start_date:
            mask &= (df["day"] >= filters.start_date)
        if filters.end_date:
            mask &= (df["day"] <= filters.end_date)

        def build(rows: pd.DataFrame) -> RecalibrationSnapshot:
            head = rows.iloc[0]
            items = [
                RecalibrationItem(
                    item_key=row["item_key"],
                    actual_quantity=row["actual_quantity"],
                    system_quantity=row["system_quantity"] or None,
                    difference=row["difference"] or None,
                    adjustment_type=row["adjustment_type"] or None,
                    notes=row["notes"],
                )
                for row in rows.to_dict("records")
            ]
            return RecalibrationSnapshot(
                snapshot_id=head["snapshot_id"],
                location_ref=head["location_ref"],
                location_type=head["location_type"] or "production_house",
                effective_date=head["day"],
                items=items,
                status=head["status"],
                created_at=head["created_at"],
                submitted_by=head["submitted_by"] or None,
            )

        return self._group(df.loc[mask], "snapshot_id", build)

    def save_recalibration(self, snapshot: RecalibrationSnapshot) -> str:
        rows = pd.DataFrame(
            [
                {
                    "snapshot_id": snapshot.snapshot_id,
                    "location_ref": snapshot.location_ref,
                    "location_type": snapshot.location_type,
                    "effective_date": snapshot.effective_date.isoformat(),
                    "status": snapshot.status.value,
                    "created_at": snapshot.created_at.isoformat(),
                    "submitted_by": snapshot.submitted_by or "",
                    "item_key": item.item_key,
                    "actual_quantity": item.actual_quantity,
                    "system_quantity": "" if item.system_quantity is None else str(item.system_quantity),
                    "difference": "" if item.difference is None else str(item.difference),
                    "adjustment_type": item.adjustment_type or "",
                    "notes": item.notes,
                }
                for item in snapshot.items
            ],
            columns=RECALIBRATION_COLUMNS,
        )

        path = self.data_dir / "recalibrations.csv"
        try:
            rows.to_csv(path, mode="a", header=not path.exists(), index=False)
        except OSError as e:
            raise DataUnavailableError(f"Could not write {path}: {e}", source=str(path)) from e

        rows["day"] = snapshot.effective_date
        self._tables.recalibrations = pd.concat([self._tables.recalibrations, rows], ignore_index=True)
        return snapshot.snapshot_id
