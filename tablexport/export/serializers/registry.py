from typing import Any, Dict, Optional, Type

from .base import Serializer
from .csv_serializer import CsvSerializer
from .json_serializer import JsonSerializer
from .sql_serializer import SqlSerializer

SERIALIZERS: Dict[str, Type[Serializer]] = {
    JsonSerializer.format_name: JsonSerializer,
    CsvSerializer.format_name: CsvSerializer,
    SqlSerializer.format_name: SqlSerializer,
}


def get_serializer(format_name: str, options: Optional[Dict[str, Any]] = None) -> Serializer:
    """Instantiate the serializer registered for `format_name`."""
    serializer_cls = SERIALIZERS.get(format_name.lower())
    if serializer_cls is None:
        raise ValueError(
            f"Unsupported export format '{format_name}'. "
            f"Expected one of: {', '.join(sorted(SERIALIZERS))}"
        )
    return serializer_cls(options)
