"""
Fixed rules for moving dashboard rows in and out of the backend.

Field ownership, file formats and the set of tables the dashboard reads.
"""

# Assigned by the backend on insert; never sent by the client.
BACKEND_OWNED_FIELDS = ("id", "created_at", "updated_at")

CSV_DELIMITER = ","
CSV_QUOTE = '"'
CSV_LINE_SEPARATOR = "\n"
JSON_INDENT = 2

MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
}

EXPORT_FILENAME = "{table}_export_{day}.{ext}"
EXPORT_ORDER_COLUMN = "created_at"

TABLES = {
    "sales_data": "Sales Data",
    "traffic_data": "Traffic Data",
    "performance_metrics": "Performance Metrics",
}

# Short names used by the KPI and sample-data endpoints.
DATA_KINDS = {
    "sales": "sales_data",
    "traffic": "traffic_data",
    "performance": "performance_metrics",
}
