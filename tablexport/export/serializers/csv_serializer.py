from typing import List, Optional

import pandas as pd

from tablexport.core.constants import CSV_DELIMITER, CSV_LINE_TERMINATOR
from .base import Row, Serializer, encode_value


class CsvSerializer(Serializer):
    """
    Delimited text output. The column order is fixed by the first row; an
    empty source produces neither a header line nor any rows.

    Options:
        delimiter: field separator (default ",")
        include_header: write the column-name line (default True)
    """

    format_name = "csv"

    def __init__(self, options=None):
        super().__init__(options)
        self.delimiter = self.options.get("delimiter", CSV_DELIMITER)
        self.columns: Optional[List[str]] = None

    def _to_csv(self, frame: pd.DataFrame, header: bool) -> str:
        text = frame.to_csv(
            index=False,
            header=header,
            sep=self.delimiter,
            lineterminator=CSV_LINE_TERMINATOR,
        )
        # The engine terminates every appended block itself
        if text.endswith(CSV_LINE_TERMINATOR):
            text = text[: -len(CSV_LINE_TERMINATOR)]
        return text

    def render_header(self, first_row: Optional[Row]) -> Optional[str]:
        if first_row is None:
            return None
        self.columns = list(first_row.keys())
        if not self.options.get("include_header", True):
            return None
        return self._to_csv(pd.DataFrame(columns=self.columns), header=True)

    def render_footer(self) -> Optional[str]:
        return None

    def render_chunk(self, rows: List[Row]) -> str:
        if not rows:
            return ""
        records = [{k: encode_value(v) for k, v in row.items()} for row in rows]
        frame = pd.DataFrame(records, columns=self.columns, dtype=object)
        return self._to_csv(frame, header=False)
