from typing import Any, List, Optional

from .base import Row, Serializer, encode_value


def _quote_identifier(identifier: str) -> str:
    return '"' + str(identifier).replace('"', '""') + '"'


def _sql_literal(value: Any) -> str:
    value = encode_value(value)
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return repr(value)
    return "'" + str(value).replace("'", "''") + "'"


class SqlSerializer(Serializer):
    """
    One INSERT statement per row.

    Options:
        table_name: target table in the generated statements (required)
    """

    format_name = "sql"

    def __init__(self, options=None):
        super().__init__(options)
        table_name = self.options.get("table_name")
        if not table_name:
            raise ValueError("SQL export requires a 'table_name' output option")
        self.table_ident = _quote_identifier(table_name)

    def render_header(self, first_row: Optional[Row]) -> Optional[str]:
        return None

    def render_footer(self) -> Optional[str]:
        return None

    def _render_row(self, row: Row) -> str:
        columns = ", ".join(_quote_identifier(c) for c in row.keys())
        values = ", ".join(_sql_literal(v) for v in row.values())
        return f"INSERT INTO {self.table_ident} ({columns}) VALUES ({values});"

    def render_chunk(self, rows: List[Row]) -> str:
        return "\n".join(self._render_row(row) for row in rows)
