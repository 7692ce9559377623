"""
Sample rows for trying the dashboard without real data.

One row per day (three for performance metrics), ending yesterday.
"""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .backend import BackendClient
from .rules import DATA_KINDS

logger = logging.getLogger(__name__)

MIN_COUNT = 1
MAX_COUNT = 365

# name, target, low, high
PERFORMANCE_METRICS = (
    ("Customer Satisfaction", 4.5, 4.0, 5.0),
    ("Response Time", 2.0, 1.0, 3.0),
    ("Uptime", 99.9, 98.0, 100.0),
)


def _days(count: int, today: date):
    start = today - timedelta(days=count)
    for i in range(count):
        yield (start + timedelta(days=i)).isoformat()


def sales_rows(count: int, today: date, rng: random.Random) -> List[Dict[str, Any]]:
    return [
        {
            "date": day,
            "revenue": rng.randint(10000, 59999),
            "orders": rng.randint(20, 119),
            "conversion_rate": rng.uniform(2, 7),
        }
        for day in _days(count, today)
    ]


def traffic_rows(count: int, today: date, rng: random.Random) -> List[Dict[str, Any]]:
    return [
        {
            "date": day,
            "visitors": rng.randint(1000, 5999),
            "page_views": rng.randint(3000, 17999),
            "bounce_rate": rng.uniform(20, 50),
            "avg_session_duration": rng.randint(60, 359),
        }
        for day in _days(count, today)
    ]


def performance_rows(count: int, today: date, rng: random.Random) -> List[Dict[str, Any]]:
    rows = []
    for day in _days(count, today):
        for name, target, low, high in PERFORMANCE_METRICS:
            rows.append({
                "date": day,
                "metric_name": name,
                "metric_value": rng.uniform(low, high),
                "target_value": target,
            })
    return rows


_GENERATORS = {
    "sales": sales_rows,
    "traffic": traffic_rows,
    "performance": performance_rows,
}


def resolve_kinds(kind: str) -> List[str]:
    if kind == "all":
        return list(DATA_KINDS)
    if kind not in DATA_KINDS:
        raise ValueError(f"unknown sample data kind: {kind}")
    return [kind]


def generate(
    kind: str,
    count: int,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """Rows to insert, keyed by table name."""
    if not MIN_COUNT <= count <= MAX_COUNT:
        raise ValueError(f"count must be between {MIN_COUNT} and {MAX_COUNT}")
    today = today or date.today()
    rng = rng or random.Random()
    return {DATA_KINDS[k]: _GENERATORS[k](count, today, rng) for k in resolve_kinds(kind)}


def seed(backend: BackendClient, kind: str, count: int) -> Dict[str, int]:
    inserted = {}
    for table, rows in generate(kind, count).items():
        backend.insert(table, rows)
        inserted[table] = len(rows)
    logger.info("seeded sample data: %s", inserted)
    return inserted


def clear(backend: BackendClient, kind: str) -> List[str]:
    tables = [DATA_KINDS[k] for k in resolve_kinds(kind)]
    for table in tables:
        backend.delete_all(table)
    logger.info("cleared sample data from %s", ", ".join(tables))
    return tables
