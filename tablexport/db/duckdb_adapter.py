import threading
from typing import Any, Dict, List, Optional, Sequence

import duckdb

from .base import BaseDatabaseAdapter
from tablexport.core.logger import logger
from tablexport.services.query_builder.service import QueryBuilderService


class DuckDBAdapter(BaseDatabaseAdapter):
    """
    Embedded DuckDB implementation of the database adapter.
    A single database connection is shared; each call runs on its own cursor
    so export worker threads never share statement state.
    """

    def __init__(self, path: str = ":memory:", connection=None):
        self._conn = connection if connection is not None else duckdb.connect(path)
        self._lock = threading.Lock()
        self._builder = QueryBuilderService(dialect="duckdb")

    def _cursor(self):
        with self._lock:
            return self._conn.cursor()

    def execute_query(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute query and return list of dictionaries."""
        cursor = self._cursor()
        try:
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            columns = [col[0] for col in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def get_row_count(
        self,
        table_name: str,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> int:
        query, params = self._builder.build_count_query(table_name, filters, schema)
        rows = self.execute_query(query, params)
        return rows[0]["total_rows"] if rows else 0

    def select_top(
        self,
        table_name: str,
        offset: int,
        limit: int,
        order_by: Optional[Sequence[Any]] = None,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        query, params = self._builder.build_page_query(
            table_name, offset, limit, order_by, filters, schema
        )
        rows = self.execute_query(query, params)
        total = self.get_row_count(table_name, filters, schema)
        return {"result": rows, "total_records": total}

    def close(self):
        logger.info("Closing DuckDB connection...")
        try:
            self._conn.close()
            logger.info("DuckDB connection closed successfully.")
        except duckdb.Error as e:
            logger.error(f"Error closing DuckDB connection: {e}")
