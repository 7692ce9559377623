from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from . import transcode
from .backend import BackendClient
from .errors import NoDataError, UnknownTableError, UnsupportedFormat
from .rules import EXPORT_FILENAME, EXPORT_ORDER_COLUMN, MEDIA_TYPES, TABLES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportFile:
    filename: str
    media_type: str
    content: str
    records: int


@dataclass(frozen=True)
class ImportResult:
    table: str
    records: int


def check_table(table: str) -> str:
    if table not in TABLES:
        raise UnknownTableError(f"unknown table: {table}")
    return table


def export_filename(table: str, fmt: str, day: date) -> str:
    return EXPORT_FILENAME.format(table=table, day=day.isoformat(), ext=fmt)


def export_table(
    backend: BackendClient,
    table: str,
    fmt: str = "csv",
    today: Optional[date] = None,
) -> ExportFile:
    """
    Fetch every row of `table`, newest first, and encode it as a download.

    Raises NoDataError when the table is empty, for both formats.
    """
    check_table(table)
    if fmt not in MEDIA_TYPES:
        raise UnsupportedFormat("unsupported format")

    rows = backend.select(table, order_by=EXPORT_ORDER_COLUMN, descending=True)
    if not rows:
        raise NoDataError(f"No records found in {table}.")

    content = transcode.to_csv(rows) if fmt == "csv" else transcode.to_json(rows)
    day = today or date.today()
    logger.info("exported %d records from %s as %s", len(rows), table, fmt)
    return ExportFile(
        filename=export_filename(table, fmt, day),
        media_type=MEDIA_TYPES[fmt],
        content=content,
        records=len(rows),
    )


def import_file(
    backend: BackendClient,
    table: str,
    filename: Optional[str],
    raw: bytes,
) -> ImportResult:
    """
    Parse an uploaded CSV/JSON file and insert its rows into `table`.

    The file is parsed completely before anything is sent, so a format
    error never leaves a partial import behind.
    """
    check_table(table)
    batch = transcode.parse_upload(filename, raw)
    clean = transcode.sanitize_for_import(batch)
    backend.insert(table, clean)
    logger.info("imported %d records into %s from %s", len(clean), table, filename)
    return ImportResult(table=table, records=len(clean))
