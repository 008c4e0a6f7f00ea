import os
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from tablexport.core.config import get_settings
from tablexport.core.constants import MEDIA_TYPES, STREAM_BUFFER_SIZE
from tablexport.core.rate_limit import limiter
from tablexport.export.job import ExportJob
from tablexport.schemas.export import (
    ExportJobResponse,
    ExportRequest,
    ExportStatus,
    ExportStatusResponse,
)
from tablexport.services.export_service import ExportService, get_export_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_job(service: ExportService, job_id: str) -> ExportJob:
    job = service.get_job(job_id)
    if not job:
        raise HTTPException(
            status_code=404, detail=f"Export job '{job_id}' not found or expired."
        )
    return job


def _status_response(job: ExportJob) -> ExportStatusResponse:
    download_url = None
    if job.status == ExportStatus.COMPLETED:
        download_url = f"/api/v1/export/download/{job.job_id}"

    return ExportStatusResponse(
        job_id=job.job_id,
        status=job.status,
        format=job.format,
        rows_exported=job.rows_exported,
        total_rows=job.total_rows,
        progress_pct=job.progress_pct,
        file_size_bytes=job.file_size,
        time_left_seconds=job.time_left,
        download_url=download_url,
        error=job.error,
    )


@router.post("/export", response_model=ExportJobResponse)
@limiter.limit(get_settings().EXPORT_RATE_LIMIT)  # Throttle heavy exports
def create_export(
    request: Request,  # Required by slowapi
    export_request: ExportRequest,
    service: ExportService = Depends(get_export_service),
):
    """
    Queue a paged export of one table to a file in the requested format.
    Poll /export/status/{job_id} for progress.
    """
    try:
        job = service.submit_job(
            table_name=export_request.table.name,
            schema=export_request.table.schema_name,
            format=export_request.format,
            filters=export_request.filters,
            order_by=export_request.order_by,
            page_size=export_request.page_size,
            output_options=export_request.output_options,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Queued export job {job.job_id} for {export_request.table.name}")
    return ExportJobResponse(
        job_id=job.job_id,
        status=job.status,
        message=f"Export job queued. Poll /export/status/{job.job_id} for progress.",
    )


@router.get("/export/status/{job_id}", response_model=ExportStatusResponse)
def get_export_status(
    job_id: str,
    service: ExportService = Depends(get_export_service),
    settings=Depends(get_settings),
):
    """
    Poll the status of an export job.
    Returns progress and a download URL once complete.
    """
    service.cleanup_old_jobs(max_age_minutes=settings.EXPORT_JOB_MAX_AGE_MINUTES)
    return _status_response(_require_job(service, job_id))


@router.post("/export/{job_id}/pause", response_model=ExportStatusResponse)
def pause_export(job_id: str, service: ExportService = Depends(get_export_service)):
    """Stop a job after its current page. Paused jobs cannot be resumed."""
    _require_job(service, job_id)
    return _status_response(service.pause_job(job_id))


@router.post("/export/{job_id}/abort", response_model=ExportStatusResponse)
def abort_export(job_id: str, service: ExportService = Depends(get_export_service)):
    """Stop a job after its current page and delete its output."""
    _require_job(service, job_id)
    return _status_response(service.abort_job(job_id))


@router.get("/export/download/{job_id}")
def download_export(job_id: str, service: ExportService = Depends(get_export_service)):
    """
    Serve the completed export file.
    """
    job = _require_job(service, job_id)

    if job.status != ExportStatus.COMPLETED:
        raise HTTPException(
            status_code=409,
            detail=f"Export job is still '{job.status.value}'. Please wait until complete.",
        )

    if not job.file_name or not os.path.exists(job.file_name):
        raise HTTPException(
            status_code=410, detail="Export file has expired or been deleted."
        )

    def file_iterator():
        with open(job.file_name, "rb") as f:
            while chunk := f.read(STREAM_BUFFER_SIZE):
                yield chunk

    response = StreamingResponse(
        file_iterator(),
        media_type=MEDIA_TYPES.get(job.format, "application/octet-stream"),
    )
    response.headers["Content-Disposition"] = (
        f"attachment; filename={job.table_name}_export.{job.format}"
    )
    return response
