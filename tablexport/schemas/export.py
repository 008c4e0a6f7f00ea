"""
Export-related request/response schemas and the job lifecycle states.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from enum import Enum

from tablexport.core.constants import DEFAULT_PAGE_SIZE
from tablexport.schemas.query import FilterCondition, SortCondition, TableRef


class ExportStatus(str, Enum):
    """Lifecycle states for an export job. Only EXPORTING permits page fetches."""

    IDLE = "idle"
    EXPORTING = "exporting"
    PAUSED = "paused"
    ABORTED = "aborted"
    COMPLETED = "completed"
    ERROR = "error"


class ExportRequest(BaseModel):
    """Payload sent to POST /export."""

    table: TableRef = Field(..., description="The table or view to export")
    format: Literal["json", "csv", "sql"] = Field("json", description="Output format")
    filters: List[FilterCondition] = Field(
        default_factory=list, description="Row filter predicates, AND-joined"
    )
    order_by: List[SortCondition] = Field(
        default_factory=list, description="Optional ordering applied to every page"
    )
    page_size: int = Field(
        DEFAULT_PAGE_SIZE, gt=0, le=100000, description="Rows fetched per page"
    )
    output_options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Format-specific options, e.g. {'prettyprint': true}",
    )


class ExportJobResponse(BaseModel):
    """Returned immediately when an export job is created."""

    job_id: str = Field(..., description="Unique identifier for the export job")
    status: ExportStatus = Field(ExportStatus.IDLE, description="Initial job status")
    message: str = Field("", description="Human-readable status message")


class ExportStatusResponse(BaseModel):
    """Returned when polling /export/status/{job_id}."""

    job_id: str
    status: ExportStatus
    format: str
    rows_exported: int = 0
    total_rows: Optional[int] = None
    progress_pct: int = Field(0, ge=0, le=100, description="Export progress percentage")
    file_size_bytes: int = Field(0, description="Size of the output written so far")
    time_left_seconds: float = Field(0.0, description="Estimated time remaining")
    download_url: Optional[str] = Field(
        None, description="URL to download the file when complete"
    )
    error: Optional[str] = Field(None, description="Error message if the job failed")
