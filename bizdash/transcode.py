"""
Conversion between row batches and the CSV/JSON files users download or upload.

Responsibilities:
- CSV and JSON encoding for export
- encoding detection + newline normalization for uploads
- CSV and JSON decoding for import
- stripping backend-owned fields before insert

The CSV reader is deliberately simple: lines are split on commas without
honouring quotes, so quoted values containing commas or newlines do not
survive an import.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from charset_normalizer import from_bytes

from .errors import FormatError, NoDataError, UnsupportedFormat
from .rules import (
    BACKEND_OWNED_FIELDS,
    CSV_DELIMITER,
    CSV_LINE_SEPARATOR,
    CSV_QUOTE,
    JSON_INDENT,
    MEDIA_TYPES,
)

Record = Dict[str, Any]
Batch = List[Record]


def _render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        # 100.0 is written as 100
        return str(int(value))
    if isinstance(value, (dict, list)):
        value = json.dumps(value, ensure_ascii=False)
    if isinstance(value, str):
        if CSV_DELIMITER in value or CSV_QUOTE in value:
            return CSV_QUOTE + value.replace(CSV_QUOTE, CSV_QUOTE * 2) + CSV_QUOTE
        return value
    return str(value)


def to_csv(batch: Batch) -> str:
    """
    Encode a batch as CSV text.

    The header is taken from the first record and applied to every row.
    An empty batch raises NoDataError instead of producing a header-only file.
    """
    if not batch:
        raise NoDataError("no data to export")

    headers = list(batch[0].keys())
    lines = [CSV_DELIMITER.join(headers)]
    for record in batch:
        lines.append(CSV_DELIMITER.join(_render_value(record.get(h)) for h in headers))
    return CSV_LINE_SEPARATOR.join(lines)


def to_json(batch: Batch) -> str:
    return json.dumps(batch, indent=JSON_INDENT, ensure_ascii=False)


def _clean_cell(cell: str) -> str:
    return cell.strip().replace(CSV_QUOTE, "")


def parse_csv(text: str) -> Batch:
    """
    Decode CSV text into a batch of string-valued records.

    Blank lines are skipped and the first remaining line is the header.
    Values are matched to headers by position; a short line leaves the
    trailing fields as None and surplus values are dropped.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        raise FormatError("empty CSV")

    headers = [_clean_cell(h) for h in lines[0].split(CSV_DELIMITER)]
    batch: Batch = []
    for line in lines[1:]:
        values = [_clean_cell(v) for v in line.split(CSV_DELIMITER)]
        batch.append({
            header: values[i] if i < len(values) else None
            for i, header in enumerate(headers)
        })
    return batch


def parse_json(text: str) -> Batch:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise FormatError("JSON import must be a list of objects")
    return data


def sanitize_for_import(batch: Batch) -> Batch:
    return [
        {k: v for k, v in record.items() if k not in BACKEND_OWNED_FIELDS}
        for record in batch
    ]


def detect_format(filename: str | None) -> str:
    name = (filename or "").lower()
    for fmt in MEDIA_TYPES:
        if name.endswith("." + fmt):
            return fmt
    raise UnsupportedFormat("unsupported format")


def decode_upload(raw: bytes) -> str:
    """
    Decode uploaded bytes to text with LF newlines.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is dropped.
    - Bytes that cannot be decoded are replaced rather than rejected.
    """
    if not raw:
        return ""

    match = from_bytes(raw).best()
    encoding = match.encoding if match is not None else "utf-8"

    # Decode UTF-8 with a BOM as utf-8-sig so the BOM does not end up in the first header.
    if raw.startswith(b"\xef\xbb\xbf") and encoding.lower().replace("-", "_") in ("utf_8", "utf8"):
        encoding = "utf-8-sig"

    try:
        text = raw.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        text = raw.decode("utf-8", errors="replace")

    return text.replace("\r\n", "\n").replace("\r", "\n")


def parse_upload(filename: str | None, raw: bytes) -> Batch:
    fmt = detect_format(filename)
    text = decode_upload(raw)
    if fmt == "csv":
        return parse_csv(text)
    return parse_json(text)
