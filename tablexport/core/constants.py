# Export Paging
DEFAULT_PAGE_SIZE = 500
FIRST_ROW_PROBE_LIMIT = 1

# JSON Output
JSON_PRETTY_INDENT = 2
JSON_ROW_SEPARATOR = ","

# CSV Output
CSV_DELIMITER = ","
CSV_LINE_TERMINATOR = "\n"

# File Output
OUTPUT_ENCODING = "utf-8"
STREAM_BUFFER_SIZE = 65536

# Media types served by the download endpoint
MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "sql": "application/sql",
}
