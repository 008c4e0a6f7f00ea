from typing import Tuple, Dict, Any

# Bind placeholder prefix per SQL dialect
PLACEHOLDER_PREFIX = {
    "oracle": ":",
    "duckdb": "$",
}


class SQLGenerationError(Exception):
    """Raised when the query builder encounters an invalid or unsafe filter state."""

    def __init__(self, message: str, context: Any = None):
        if context:
            super().__init__(f"{message} (Context: {context})")
        else:
            super().__init__(message)
        self.context = context


class ParamGenerator:
    """Encapsulates parameter naming and value mapping to prevent collisions."""

    def __init__(self, dialect: str = "oracle", start_counter: int = 1):
        if dialect not in PLACEHOLDER_PREFIX:
            raise SQLGenerationError(f"Unsupported SQL dialect: {dialect}")
        self.prefix = PLACEHOLDER_PREFIX[dialect]
        self.counter = start_counter
        self.params: Dict[str, Any] = {}

    def add(self, value: Any, prefix: str = "p") -> str:
        """Binds a value under a fresh parameter name and returns its placeholder."""
        name = f"{prefix}_{self.counter}"
        self.counter += 1
        self.params[name] = value
        return f"{self.prefix}{name}"
