import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tablexport.core.constants import DEFAULT_PAGE_SIZE
from tablexport.export.fetcher import PageFetcher
from tablexport.schemas.export import ExportStatus


@dataclass
class ExportJob:
    """
    Tracks the state of a single export invocation.

    Owned by the caller that created it and mutated in place by its engine.
    ``total_rows`` stays None until the data source has answered once.
    """

    file_name: str
    fetcher: PageFetcher
    table_name: str
    schema: Optional[str] = None
    filters: List[Any] = field(default_factory=list)
    order_by: List[Any] = field(default_factory=list)
    output_options: Dict[str, Any] = field(default_factory=dict)
    page_size: int = DEFAULT_PAGE_SIZE
    format: str = "json"
    status: ExportStatus = ExportStatus.IDLE
    rows_exported: int = 0
    total_rows: Optional[int] = None
    file_size: int = 0
    time_left: float = 0.0
    last_page_time: Optional[float] = None
    error: Optional[str] = None
    job_id: str = field(default_factory=lambda: str(uuid.uuid4())[:12])
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

    @property
    def progress_pct(self) -> int:
        if self.status == ExportStatus.COMPLETED:
            return 100
        if not self.total_rows:
            return 0
        return min(99, int((self.rows_exported / self.total_rows) * 100))
