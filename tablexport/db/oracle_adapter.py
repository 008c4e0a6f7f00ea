import oracledb
from typing import Any, Dict, List, Optional, Sequence
import contextlib

from .base import BaseDatabaseAdapter
from tablexport.core.logger import logger
from tablexport.services.query_builder.service import QueryBuilderService


class OracleAdapter(BaseDatabaseAdapter):
    """
    Enterprise Oracle implementation of the database adapter.
    Supports connection pooling; pages are read with OFFSET/FETCH NEXT.
    """

    def __init__(
        self, user: str, password: str, dsn: str, min_pool: int = 2, max_pool: int = 10
    ):
        self._user = user.upper()
        self.pool = oracledb.create_pool(
            user=user,
            password=password,
            dsn=dsn,
            min=min_pool,
            max=max_pool,
            increment=1,
            wait_timeout=2000,  # Fail fast (2s) if pool is exhausted
        )
        self._builder = QueryBuilderService(dialect="oracle")

    @contextlib.contextmanager
    def connection(self):
        """Safe connection context manager with auto-release."""
        try:
            conn = self.pool.acquire()
        except oracledb.DatabaseError as e:
            error_obj = e.args[0] if e.args else None
            # ORA-12541: TNS:no listener, ORA-12170: TNS:Connect timeout,
            # ORA-12537: TNS:connection closed
            if hasattr(error_obj, "code") and error_obj.code in (12541, 12170, 12537, 28759):
                raise RuntimeError(f"Oracle Database is unreachable: {str(e)}") from e

            if "DPY-6001" in str(e) or "pool exhausted" in str(e).lower():
                raise ValueError(
                    "DATABASE_POOL_EXHAUSTED: All available connections are in use. Please try again in a moment."
                ) from e

            raise

        try:
            logger.debug("Acquired connection from pool")
            yield conn
        finally:
            self.pool.release(conn)
            logger.debug("Released connection back to pool")

    def execute_query(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute query and return list of dictionaries."""
        with self.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(query, params or {})
                columns = [col[0] for col in cursor.description]
                results = []
                for row in cursor:
                    results.append(dict(zip(columns, row)))
                return results

    def get_row_count(
        self,
        table_name: str,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> int:
        query, params = self._builder.build_count_query(
            table_name, filters, schema or self._user
        )
        with self.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(query, params)
                return cursor.fetchone()[0]

    def select_top(
        self,
        table_name: str,
        offset: int,
        limit: int,
        order_by: Optional[Sequence[Any]] = None,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        owner = schema or self._user
        query, params = self._builder.build_page_query(
            table_name, offset, limit, order_by, filters, owner
        )
        rows = self.execute_query(query, params)
        total = self.get_row_count(table_name, filters, owner)
        return {"result": rows, "total_records": total}

    def get_pool_metrics(self) -> Dict[str, int]:
        """Returns current utilization of the database pool."""
        return {
            "pool_max": self.pool.max,
            "pool_min": self.pool.min,
            "pool_busy": self.pool.busy,
            "pool_open": self.pool.opened,
        }

    def close(self):
        logger.info("Closing Oracle connection pool...")
        try:
            self.pool.close()
            logger.info("Oracle connection pool closed successfully.")
        except oracledb.Error as e:
            logger.error(f"Error closing Oracle connection pool: {e}")
