"""KPI card figures for the sales, traffic and performance pages."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .backend import BackendClient
from .errors import UnknownTableError
from .rules import DATA_KINDS


def _num(value: Any) -> float:
    # numeric columns come back as JSON strings for NUMERIC types
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _total(rows: List[Dict[str, Any]], column: str) -> float:
    return sum(_num(r.get(column)) for r in rows)


def _mean(rows: List[Dict[str, Any]], column: str) -> float:
    return _total(rows, column) / (len(rows) or 1)


def sales_summary(rows: List[Dict[str, Any]]) -> Dict[str, float]:
    return {
        "total_revenue": _total(rows, "revenue"),
        "total_orders": _total(rows, "orders"),
        "avg_conversion_rate": _mean(rows, "conversion_rate"),
    }


def traffic_summary(rows: List[Dict[str, Any]]) -> Dict[str, float]:
    return {
        "total_visitors": _total(rows, "visitors"),
        "total_page_views": _total(rows, "page_views"),
        "avg_bounce_rate": _mean(rows, "bounce_rate"),
        "avg_session_duration": _mean(rows, "avg_session_duration"),
    }


def latest_metrics(rows: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Most recent row per metric_name; on equal dates the first row seen wins."""
    latest: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        name = row.get("metric_name")
        current = latest.get(name)
        if current is None or str(row.get("date") or "") > str(current.get("date") or ""):
            latest[name] = row
    return latest


def summarize(backend: BackendClient, kind: str) -> Dict[str, Any]:
    if kind not in DATA_KINDS:
        raise UnknownTableError(f"unknown KPI group: {kind}")

    rows = backend.select(DATA_KINDS[kind], order_by="date")
    if kind == "sales":
        return sales_summary(rows)
    if kind == "traffic":
        return traffic_summary(rows)
    return latest_metrics(rows)
