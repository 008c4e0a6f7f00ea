import json
from typing import List, Optional

from tablexport.core.constants import JSON_PRETTY_INDENT, JSON_ROW_SEPARATOR
from .base import Row, Serializer, encode_value


class JsonSerializer(Serializer):
    """
    Writes the rows as a JSON array, one object per line.

    Every row, including the last one, is followed by a separator, so the
    closing bracket is preceded by a trailing comma. Consumers of existing
    exports depend on this exact layout.
    """

    format_name = "json"

    def render_header(self, first_row: Optional[Row]) -> Optional[str]:
        return "["

    def render_footer(self) -> Optional[str]:
        return "]"

    def _render_row(self, row: Row) -> str:
        values = {key: encode_value(value) for key, value in row.items()}
        if self.options.get("prettyprint"):
            return json.dumps(
                values,
                indent=JSON_PRETTY_INDENT,
                ensure_ascii=False,
                default=encode_value,
            )
        return json.dumps(
            values, separators=(",", ":"), ensure_ascii=False, default=encode_value
        )

    def render_chunk(self, rows: List[Row]) -> str:
        return "\n".join(self._render_row(row) + JSON_ROW_SEPARATOR for row in rows)
