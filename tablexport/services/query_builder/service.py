from typing import Tuple, Dict, Any, List, Optional, Sequence, Union
import logging
from tablexport.schemas.query import FilterCondition, SortCondition
from .base import SQLGenerationError, ParamGenerator, PLACEHOLDER_PREFIX
from .commons import CommonsMixin
from .filters import FilteringMixin

logger = logging.getLogger(__name__)

FilterLike = Union[FilterCondition, Dict[str, Any]]
SortLike = Union[SortCondition, Dict[str, Any], str]


class QueryBuilderService(CommonsMixin, FilteringMixin):
    """
    Builds parameterized page and count statements for a single table,
    restricted by an AND-joined list of filter predicates.
    """

    def __init__(self, dialect: str = "oracle"):
        if dialect not in PLACEHOLDER_PREFIX:
            raise SQLGenerationError(f"Unsupported SQL dialect: {dialect}")
        self.dialect = dialect

    def _normalize_filters(
        self, filters: Optional[Sequence[FilterLike]]
    ) -> List[FilterCondition]:
        normalized = []
        for f in filters or []:
            if isinstance(f, FilterCondition):
                normalized.append(f)
            elif isinstance(f, dict):
                try:
                    normalized.append(FilterCondition.model_validate(f))
                except ValueError as e:
                    raise SQLGenerationError("Invalid filter condition", context=f) from e
            else:
                raise SQLGenerationError("Unrecognized filter type", context=f)
        return normalized

    def _build_order_by(self, order_by: Optional[Sequence[SortLike]]) -> str:
        parts = []
        for item in order_by or []:
            if isinstance(item, str):
                item = SortCondition(column=item)
            elif isinstance(item, dict):
                item = SortCondition.model_validate(item)
            parts.append(f"{self._quote_identifier(item.column)} {item.direction}")
        return ", ".join(parts)

    def _from_where(
        self,
        table_name: str,
        filters: Optional[Sequence[FilterLike]],
        schema: Optional[str],
        param_gen: ParamGenerator,
    ) -> str:
        sql = f"FROM {self._qualified_table(table_name, schema)}"
        where = self._build_where(self._normalize_filters(filters), param_gen)
        if where:
            sql += f" WHERE {where}"
        return sql

    def build_page_query(
        self,
        table_name: str,
        offset: int,
        limit: int,
        order_by: Optional[Sequence[SortLike]] = None,
        filters: Optional[Sequence[FilterLike]] = None,
        schema: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Assemble a SELECT for one page of rows.
        Returns: (Full SQL Statement, Dict of bind parameters)
        """
        offset, limit = int(offset), int(limit)
        if offset < 0 or limit <= 0:
            raise SQLGenerationError(
                "Invalid paging window", context={"offset": offset, "limit": limit}
            )

        param_gen = ParamGenerator(self.dialect)
        sql = f"SELECT * {self._from_where(table_name, filters, schema, param_gen)}"

        order_sql = self._build_order_by(order_by)
        if order_sql:
            sql += f" ORDER BY {order_sql}"

        if self.dialect == "oracle":
            sql += f" OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"
        else:
            sql += f" LIMIT {limit} OFFSET {offset}"

        logger.debug(f"Built page query: {sql}")
        return sql, param_gen.params

    def build_count_query(
        self,
        table_name: str,
        filters: Optional[Sequence[FilterLike]] = None,
        schema: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Assemble a COUNT(*) over the same filtered table as the page query."""
        param_gen = ParamGenerator(self.dialect)
        sql = f"SELECT COUNT(*) AS total_rows {self._from_where(table_name, filters, schema, param_gen)}"
        return sql, param_gen.params
