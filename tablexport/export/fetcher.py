from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from tablexport.db.base import BaseDatabaseAdapter


@dataclass
class Page:
    """One fetch result: the rows at `offset` plus the source's current total."""

    offset: int
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total_records: int = 0


class PageFetcher(ABC):
    """Contract the export engine uses to read a data source page by page."""

    @abstractmethod
    def fetch(
        self,
        table_name: str,
        offset: int,
        limit: int,
        order_by: Optional[Sequence[Any]] = None,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> Optional[Page]:
        """
        Return the page starting at `offset`, at most `limit` rows long.

        An offset past the end returns an empty page with the known total.
        Returning None signals the source could not produce a page without
        raising; genuine source faults raise.
        """
        pass


class AdapterPageFetcher(PageFetcher):
    """Reads pages through a database adapter's select_top()."""

    def __init__(self, adapter: BaseDatabaseAdapter):
        self.adapter = adapter

    def fetch(
        self,
        table_name: str,
        offset: int,
        limit: int,
        order_by: Optional[Sequence[Any]] = None,
        filters: Optional[Sequence[Any]] = None,
        schema: Optional[str] = None,
    ) -> Optional[Page]:
        response = self.adapter.select_top(
            table_name, offset, limit, order_by or [], filters or [], schema
        )
        if response is None:
            return None
        return Page(
            offset=offset,
            rows=list(response.get("result") or []),
            total_records=int(response.get("total_records") or 0),
        )
