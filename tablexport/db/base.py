from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence


class BaseDatabaseAdapter(ABC):
    """
    Abstract base class defining the contract for all database adapters.
    The export engine only ever sees a source through select_top(), so it is
    completely decoupled from the underlying database technology.
    """

    @abstractmethod
    def select_top(
        self,
        table_name: str,
        offset: int,
        limit: int,
        order_by: Optional[Sequence[Any]] = None,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch one page of rows from a table.
        Should return a dictionary:
        - result: List[Dict[str, Any]] (at most `limit` rows, in source order)
        - total_records: int (row count after filters, before paging)
        An offset past the end yields an empty result, never an exception.
        """
        pass

    @abstractmethod
    def get_row_count(
        self,
        table_name: str,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> int:
        """
        Get the total row count for a table, optionally restricted by filters.
        """
        pass

    @abstractmethod
    def execute_query(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute a parameterized SQL query securely and return rows as dictionaries.
        """
        pass

    @abstractmethod
    def close(self):
        """
        Close the database connection cleanly.
        """
        pass
