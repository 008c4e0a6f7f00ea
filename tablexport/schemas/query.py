from typing import Optional, Any, Literal
from enum import Enum
from pydantic import BaseModel, Field, model_validator


class FilterOperator(str, Enum):
    """
    Supported filter operators that define how the query builder will
    construct the WHERE clauses of a page query.
    """

    # Text operators
    EQUALS = "eq"
    NOT_EQUALS = "neq"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"

    # Numeric/Date operators
    GREATER_THAN = "gt"
    GREATER_THAN_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_EQUAL = "lte"
    BETWEEN = "between"

    # Array operators
    IN = "in"
    NOT_IN = "not_in"

    # Null operators
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


_COMPARISON_OPERATORS = {
    FilterOperator.EQUALS,
    FilterOperator.NOT_EQUALS,
    FilterOperator.LESS_THAN,
    FilterOperator.GREATER_THAN,
    FilterOperator.LESS_THAN_EQUAL,
    FilterOperator.GREATER_THAN_EQUAL,
    FilterOperator.IS_NULL,
    FilterOperator.IS_NOT_NULL,
}

ALLOWED_OPERATORS = {
    "number": _COMPARISON_OPERATORS
    | {FilterOperator.IN, FilterOperator.NOT_IN, FilterOperator.BETWEEN},
    "string": {
        FilterOperator.EQUALS,
        FilterOperator.NOT_EQUALS,
        FilterOperator.CONTAINS,
        FilterOperator.NOT_CONTAINS,
        FilterOperator.STARTS_WITH,
        FilterOperator.ENDS_WITH,
        FilterOperator.IN,
        FilterOperator.NOT_IN,
        FilterOperator.IS_NULL,
        FilterOperator.IS_NOT_NULL,
    },
    "date": _COMPARISON_OPERATORS | {FilterOperator.BETWEEN},
    "timestamp": _COMPARISON_OPERATORS | {FilterOperator.BETWEEN},
}


class FilterCondition(BaseModel):
    """
    A single row filter predicate targeting a specific column.
    Export jobs carry a list of these; they are AND-joined by the query builder.
    """

    column: str = Field(..., description="The name of the column to filter on")
    datatype: Literal["number", "string", "date", "timestamp"] = Field(
        "string", description="The data type of the column being filtered"
    )
    operator: FilterOperator = Field(..., description="The operation to apply")
    value: Optional[Any] = Field(
        None,
        description="The value to filter against. For 'between', expect a list of 2 items. Can be null for 'is_null'.",
    )

    @model_validator(mode="after")
    def validate_condition(self) -> "FilterCondition":
        op = self.operator
        dt = self.datatype
        val = self.value

        if op not in ALLOWED_OPERATORS.get(dt, set()):
            raise ValueError(
                f"Operator '{op.value}' is not allowed for datatype '{dt}'"
            )

        if op in [FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL]:
            return self

        if op in [FilterOperator.IN, FilterOperator.NOT_IN]:
            if not isinstance(val, list) or not val:
                raise ValueError(
                    f"Value must be a non-empty list for operator '{op.value}'"
                )

        if op == FilterOperator.BETWEEN:
            if not isinstance(val, list) or len(val) != 2:
                raise ValueError(
                    f"Value must be a list of EXACTLY 2 items for operator '{op.value}'"
                )

        return self


class SortCondition(BaseModel):
    """
    Defines sorting order for a specific column.
    """

    column: str = Field(..., description="The column to sort by")
    direction: Literal["ASC", "DESC"] = Field("ASC", description="Sort direction")


class TableRef(BaseModel):
    """A table or view, optionally qualified by its schema/owner."""

    name: str = Field(..., min_length=1, description="Table or view name")
    schema_name: Optional[str] = Field(
        None, alias="schema", description="Owning schema, if not the default"
    )

    model_config = {"populate_by_name": True}
