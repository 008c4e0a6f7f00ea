from typing import List, Any
from tablexport.schemas.query import FilterCondition, FilterOperator
from .base import SQLGenerationError, ParamGenerator

COMPARISON_SQL = {
    FilterOperator.EQUALS: "=",
    FilterOperator.NOT_EQUALS: "!=",
    FilterOperator.GREATER_THAN: ">",
    FilterOperator.GREATER_THAN_EQUAL: ">=",
    FilterOperator.LESS_THAN: "<",
    FilterOperator.LESS_THAN_EQUAL: "<=",
}

WILDCARD_PATTERNS = {
    FilterOperator.CONTAINS: "%{}%",
    FilterOperator.NOT_CONTAINS: "%{}%",
    FilterOperator.STARTS_WITH: "{}%",
    FilterOperator.ENDS_WITH: "%{}",
}


class FilteringMixin:
    """Translates a flat list of filter predicates into an AND-joined WHERE body."""

    def _bind_value(
        self, condition: FilterCondition, value: Any, param_gen: ParamGenerator
    ) -> str:
        """Binds a value, casting date/timestamp strings on the database side."""
        placeholder = param_gen.add(value)
        if not isinstance(value, str) or condition.datatype not in ("date", "timestamp"):
            return placeholder

        if getattr(self, "dialect", "oracle") == "oracle":
            if condition.datatype == "date":
                return f"TO_DATE({placeholder}, 'YYYY-MM-DD')"
            return f"TO_TIMESTAMP({placeholder}, 'YYYY-MM-DD HH24:MI:SS')"
        sql_type = "DATE" if condition.datatype == "date" else "TIMESTAMP"
        return f"CAST({placeholder} AS {sql_type})"

    def _build_condition(
        self, condition: FilterCondition, param_gen: ParamGenerator
    ) -> str:
        column_ident = self._quote_identifier(condition.column)
        op = condition.operator
        val = condition.value

        if op == FilterOperator.IS_NULL:
            return f"{column_ident} IS NULL"
        if op == FilterOperator.IS_NOT_NULL:
            return f"{column_ident} IS NOT NULL"

        if op in COMPARISON_SQL:
            return f"{column_ident} {COMPARISON_SQL[op]} {self._bind_value(condition, val, param_gen)}"

        if op in WILDCARD_PATTERNS:
            sql_op = "NOT LIKE" if op == FilterOperator.NOT_CONTAINS else "LIKE"
            placeholder = param_gen.add(WILDCARD_PATTERNS[op].format(val))
            return f"UPPER({column_ident}) {sql_op} UPPER({placeholder})"

        if op in (FilterOperator.IN, FilterOperator.NOT_IN):
            placeholders = ", ".join(
                self._bind_value(condition, item, param_gen) for item in val
            )
            sql_op = "NOT IN" if op == FilterOperator.NOT_IN else "IN"
            return f"{column_ident} {sql_op} ({placeholders})"

        if op == FilterOperator.BETWEEN:
            low = self._bind_value(condition, val[0], param_gen)
            high = self._bind_value(condition, val[1], param_gen)
            return f"{column_ident} BETWEEN {low} AND {high}"

        raise SQLGenerationError(f"Unsupported operator: {op}", context=condition)

    def _build_where(
        self, filters: List[FilterCondition], param_gen: ParamGenerator
    ) -> str:
        """Returns the WHERE body (without the keyword), or an empty string."""
        if not filters:
            return ""
        clauses = [self._build_condition(f, param_gen) for f in filters]
        return " AND ".join(f"({c})" for c in clauses)
