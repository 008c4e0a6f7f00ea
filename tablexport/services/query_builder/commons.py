from typing import Optional
from .base import SQLGenerationError


class CommonsMixin:
    """Utility methods for quoting and qualifying identifiers."""

    def _quote_identifier(self, identifier: str) -> str:
        """
        Safely quote a single table or column name.
        Embedded double quotes are doubled. Oracle names are normalized to
        UPPERCASE; other dialects preserve case.
        """
        if identifier is None or not str(identifier).strip():
            raise SQLGenerationError("Empty identifier", context=identifier)
        val = str(identifier).replace('"', '""')
        if getattr(self, "dialect", None) == "oracle":
            val = val.upper()
        return f'"{val}"'

    def _qualified_table(self, table_name: str, schema: Optional[str] = None) -> str:
        """Returns a quoted, optionally schema-qualified table reference."""
        if schema:
            return f"{self._quote_identifier(schema)}.{self._quote_identifier(table_name)}"
        return self._quote_identifier(table_name)
