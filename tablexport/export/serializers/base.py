"""
Serializer contract for export output formats.

A serializer is handed the job's output options once and is then asked for a
header (before any rows), one rendering per page, and a footer (only when the
export completes). Header and footer may be None, meaning "write nothing".
"""

import math
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional

Row = Dict[str, Any]


def encode_value(value: Any) -> Any:
    """Maps driver values that have no native text encoding to plain ones."""
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class Serializer(ABC):
    """Base class for output format plugins."""

    format_name: str = ""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = options or {}

    @abstractmethod
    def render_header(self, first_row: Optional[Row]) -> Optional[str]:
        """
        Content written once before any row data.

        Args:
            first_row: A representative row, or None when the source is empty
        """
        pass

    @abstractmethod
    def render_footer(self) -> Optional[str]:
        """Content written once after all rows, on the completion path only."""
        pass

    @abstractmethod
    def render_chunk(self, rows: List[Row]) -> str:
        """Render every row of one page. The result is appended verbatim."""
        pass
