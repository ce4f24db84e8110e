#!/usr/bin/env python3
"""
seed_data.py

Generates sample stock records to CSVs under a local folder (default: config.data_dir)
so the CSV backend has something to read out of the box.

Files:
- locations, items, production, deliveries, recalibrations

Every location gets a full-reset count on the first day of the window's first
month; the first location also gets a mid-period count. Item keys and
delivery timestamps are written in the mixed raw forms real exports carry.

Run:
  stock-recon-seed --locations 3 --days 45
"""

from __future__ import annotations
import argparse
import csv
import random
import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Dict, List, Optional

from stock_recon.config import get_config
from stock_recon.data.backends.csv_backend import (
    DELIVERY_COLUMNS,
    ITEM_COLUMNS,
    LOCATION_COLUMNS,
    PRODUCTION_COLUMNS,
    RECALIBRATION_COLUMNS,
)

# -----------------------------
# Catalog
# -----------------------------

ITEMS = [
    # key, display name, scope
    ("chicken", "Chicken Momos", "global"),
    ("veg", "Veg Momos", "global"),
    ("paneer", "Paneer Momos", "global"),
    ("chicken_cheese", "Chicken Cheese Momos", "global"),
    ("corn", "Corn Cheese Momos", "location"),
]

# Raw spellings seen in production and shipment exports
RAW_VARIANTS = {
    "chicken": ["chicken", "chicken_momos", "chickenMomos", "Chicken Momos"],
    "veg": ["veg", "veg_momos", "vegMomos"],
    "paneer": ["paneer", "paneer_momos", "Paneer Momos"],
    "chicken_cheese": ["chicken_cheese", "chickenCheeseMomos"],
    "corn": ["corn", "corn_momos"],
}

KITCHENS = ["Central Kitchen", "North Kitchen", "South Kitchen", "East Kitchen", "West Kitchen"]


# -----------------------------
# Generators
# -----------------------------

def gen_locations(n: int) -> List[Dict]:
    rows = []
    for i in range(n):
        aliases = [f"STORE-{10 * (i + 1) + j}" for j in range(random.randint(1, 2))]
        rows.append({
            "location_id": f"PH-{i + 1}",
            "name": KITCHENS[i % len(KITCHENS)],
            "alias_ids": "|".join(aliases),
            "location_type": "production_house",
        })
    return rows


def gen_items(locations: List[Dict]) -> List[Dict]:
    rows = []
    for i, (key, name, scope) in enumerate(ITEMS):
        rows.append({
            "key": key,
            "display_name": name,
            "unit": "pieces",
            "scope": scope,
            # Location-scoped items belong to the first kitchen
            "location_id": locations[0]["location_id"] if scope == "location" else "",
            "item_id": f"itm-{i + 1:03d}",
            "is_active": "true",
        })
    return rows


def item_keys_at(location_id: str, items: List[Dict]) -> List[str]:
    return [it["key"] for it in items if it["scope"] == "global" or it["location_id"] == location_id]


def raw_key(key: str) -> str:
    return random.choice(RAW_VARIANTS[key])


def gen_recalibrations(locations: List[Dict], items: List[Dict], start_d: date) -> List[Dict]:
    rows = []
    first_of_month = start_d.replace(day=1)
    for loc in locations:
        counts = [(first_of_month, "full")]
        if loc is locations[0]:
            counts.append((first_of_month + timedelta(days=14), "mid"))
        for day, tag in counts:
            snapshot_id = f"RC-{loc['location_id']}-{day:%Y%m%d}"
            created = datetime.combine(day, time(10, 0))
            for key in item_keys_at(loc["location_id"], items):
                rows.append({
                    "snapshot_id": snapshot_id,
                    "location_ref": loc["location_id"],
                    "location_type": loc["location_type"],
                    "effective_date": day.isoformat(),
                    "status": "approved",
                    "created_at": created.isoformat(),
                    "submitted_by": "seed",
                    "item_key": key,
                    "actual_quantity": random.randint(150, 400) if tag == "full" else random.randint(100, 300),
                    "system_quantity": "",
                    "difference": "",
                    "adjustment_type": "",
                    "notes": "",
                })
    return rows


def gen_production(locations: List[Dict], items: List[Dict], start_d: date, end_d: date) -> List[Dict]:
    rows = []
    day = start_d
    while day <= end_d:
        for loc in locations:
            # Not every kitchen produces every day
            if random.random() < 0.2:
                continue
            record_id = f"PR-{loc['location_id']}-{day:%Y%m%d}"
            status = random.choices(["approved", "pending", "rejected"], weights=[85, 10, 5])[0]
            created = datetime.combine(day, time(random.randint(15, 20), random.randint(0, 59)))
            for key in item_keys_at(loc["location_id"], items):
                rows.append({
                    "record_id": record_id,
                    "location_ref": loc["location_id"],
                    "date": day.isoformat(),
                    "approval_status": status,
                    "created_at": created.isoformat(),
                    "item_key": raw_key(key),
                    "quantity": random.randint(20, 120),
                })
        day += timedelta(days=1)
    return rows


def format_ts(ts: datetime) -> str:
    # Older exports wrote en-IN locale strings
    if random.random() < 0.25:
        return ts.strftime("%d/%m/%Y, %H:%M:%S")
    return ts.isoformat()


def gen_deliveries(locations: List[Dict], items: List[Dict], start_d: date, end_d: date) -> List[Dict]:
    rows = []
    seq = 0
    day = start_d
    while day <= end_d:
        for loc in locations:
            aliases = loc["alias_ids"].split("|")
            for _ in range(random.randint(0, 3)):
                seq += 1
                ts = datetime.combine(day, time(random.randint(8, 21), random.randint(0, 59)))
                status = random.choices(["delivered", "in_transit", "cancelled"], weights=[85, 10, 5])[0]
                delivered_at = format_ts(ts) if status == "delivered" and random.random() < 0.9 else ""
                # Shipments are tagged with either form of the location id
                origin_ref = random.choice([loc["location_id"]] + aliases)
                keys = item_keys_at(loc["location_id"], items)
                for key in random.sample(keys, k=random.randint(1, len(keys))):
                    rows.append({
                        "record_id": f"SH-{seq:06d}",
                        "origin_ref": origin_ref,
                        "status": status,
                        "delivered_at": delivered_at,
                        "requested_at": (ts - timedelta(hours=2)).isoformat(),
                        "created_at": (ts - timedelta(hours=3)).isoformat(),
                        "item_key": raw_key(key),
                        "quantity": random.randint(5, 40),
                    })
        day += timedelta(days=1)
    return rows


def write_csv(path: Path, rows: List[Dict], headers: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers)
        w.writeheader()
        for r in rows:
            w.writerow(r)


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate sample stock records to CSVs.")
    parser.add_argument("--locations", type=int, default=3, help="Number of production locations.")
    parser.add_argument("--days", type=int, default=45, help="Number of days of activity.")
    parser.add_argument("--start-date", type=str, default=None,
                        help="YYYY-MM-DD (defaults to the first day of last month)")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if CSVs already exist.")
    args = parser.parse_args(argv)

    random.seed(args.seed)

    outdir = Path(args.output_dir)
    outdir.mkdir(parents=True, exist_ok=True)

    files = {
        name: outdir / f"{name}.csv"
        for name in ("locations", "items", "production", "deliveries", "recalibrations")
    }
    if args.no_overwrite:
        for p in files.values():
            if p.exists():
                print(f"Refusing to overwrite existing file: {p}", file=sys.stderr)
                return 2

    if args.start_date:
        start_d = date.fromisoformat(args.start_date)
    else:
        today = datetime.now(config.reference_tz).date()
        start_d = (today.replace(day=1) - timedelta(days=1)).replace(day=1)
    end_d = start_d + timedelta(days=args.days - 1)

    locations = gen_locations(args.locations)
    items = gen_items(locations)
    recalibrations = gen_recalibrations(locations, items, start_d)
    production = gen_production(locations, items, start_d, end_d)
    deliveries = gen_deliveries(locations, items, start_d, end_d)

    write_csv(files["locations"], locations, LOCATION_COLUMNS)
    write_csv(files["items"], items, ITEM_COLUMNS)
    write_csv(files["production"], production, PRODUCTION_COLUMNS)
    write_csv(files["deliveries"], deliveries, DELIVERY_COLUMNS)
    write_csv(files["recalibrations"], recalibrations, RECALIBRATION_COLUMNS)

    print(f"Generated data in {outdir}")
    print(f" locations: {len(locations)} | items: {len(items)}")
    print(f" production rows: {len(production)} | delivery rows: {len(deliveries)}"
          f" | recalibration rows: {len(recalibrations)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
