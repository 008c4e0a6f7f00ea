"""
Export Service — Background job manager for paged table exports.

Manages the lifecycle of export jobs:
  - Submit a job → returns the ExportJob immediately
  - A worker thread drives the job's ExportEngine page by page
  - Poll for status/progress, pause or abort by job id
  - Stale job records and their files are cleaned up on demand

Each job gets its own engine; the service only keeps the bookkeeping.
"""

import os
import time
import threading
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional
from concurrent.futures import Future, ThreadPoolExecutor

from tablexport.core.config import get_settings
from tablexport.export.engine import ExportEngine
from tablexport.export.errors import ExportAborted, ExportError
from tablexport.export.fetcher import AdapterPageFetcher, PageFetcher
from tablexport.export.job import ExportJob
from tablexport.export.progress import ProgressEstimator
from tablexport.export.serializers.registry import get_serializer
from tablexport.export.sink import FileSink, LocalFileSink
from tablexport.schemas.export import ExportStatus

logger = logging.getLogger(__name__)


def _default_fetcher() -> PageFetcher:
    from tablexport.db.factory import get_database_adapter

    return AdapterPageFetcher(get_database_adapter())


class ExportService:
    """
    Thread-safe registry of export jobs.
    Uses a bounded ThreadPoolExecutor to protect the database and memory.
    """

    def __init__(
        self,
        output_dir: str,
        max_workers: int = 4,
        fetcher_factory: Callable[[], PageFetcher] = _default_fetcher,
        sink: Optional[FileSink] = None,
        estimator_factory: Callable[[], ProgressEstimator] = ProgressEstimator,
    ):
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)
        self._fetcher_factory = fetcher_factory
        self._sink = sink or LocalFileSink()
        self._estimator_factory = estimator_factory
        self._jobs: Dict[str, ExportJob] = {}
        self._engines: Dict[str, ExportEngine] = {}
        self._futures: Dict[str, Future] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ExportWorker"
        )

    def submit_job(
        self,
        table_name: str,
        format: str = "json",
        schema: Optional[str] = None,
        filters: Optional[List[Any]] = None,
        order_by: Optional[List[Any]] = None,
        page_size: Optional[int] = None,
        output_options: Optional[Dict[str, Any]] = None,
        fetcher: Optional[PageFetcher] = None,
    ) -> ExportJob:
        """
        Create an export job and queue it on the worker pool.
        Returns the ExportJob immediately; processing happens in background.
        Raises ValueError for an unknown format or invalid options.
        """
        options = dict(output_options or {})
        if format == "sql":
            options.setdefault("table_name", table_name)
        serializer = get_serializer(format, options)

        job = ExportJob(
            file_name="",
            fetcher=fetcher or self._fetcher_factory(),
            table_name=table_name,
            schema=schema,
            filters=list(filters or []),
            order_by=list(order_by or []),
            output_options=options,
            page_size=page_size or get_settings().EXPORT_PAGE_SIZE,
            format=format,
        )
        job.file_name = os.path.join(self.output_dir, f"{job.job_id}.{format}")

        engine = ExportEngine(
            job, serializer, sink=self._sink, estimator=self._estimator_factory()
        )
        with self._lock:
            self._jobs[job.job_id] = job
            self._engines[job.job_id] = engine

        future = self._executor.submit(self._worker, engine)
        with self._lock:
            self._futures[job.job_id] = future
        return job

    def _worker(self, engine: ExportEngine) -> None:
        job = engine.job
        try:
            engine.run()
        except ExportAborted:
            logger.info(f"Export job {job.job_id} was aborted")
        except ExportError as e:
            # The engine already recorded the status and message
            logger.error(f"Export job {job.job_id} ended with {type(e).__name__}: {e}")
        except Exception as e:
            job.error = str(e)
            logger.exception(f"Export job {job.job_id} crashed: {e}")

    def get_job(self, job_id: str) -> Optional[ExportJob]:
        """Retrieve a job by ID."""
        with self._lock:
            return self._jobs.get(job_id)

    def _get_engine(self, job_id: str) -> Optional[ExportEngine]:
        with self._lock:
            return self._engines.get(job_id)

    def pause_job(self, job_id: str) -> Optional[ExportJob]:
        """Signal a job to stop after its in-flight page. None if unknown."""
        engine = self._get_engine(job_id)
        if engine is None:
            return None
        engine.pause()
        return engine.job

    def abort_job(self, job_id: str) -> Optional[ExportJob]:
        """Signal a job to stop and delete its output. None if unknown."""
        engine = self._get_engine(job_id)
        if engine is None:
            return None
        engine.abort()
        return engine.job

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[ExportJob]:
        """Block until the job's worker has returned."""
        with self._lock:
            job = self._jobs.get(job_id)
            future = self._futures.get(job_id)
        if job is None:
            return None
        if future is not None:
            future.result(timeout=timeout)
        return job

    def _is_running(self, job_id: str) -> bool:
        # Caller holds self._lock
        if self._jobs[job_id].status in (ExportStatus.IDLE, ExportStatus.EXPORTING):
            return True
        future = self._futures.get(job_id)
        return future is not None and not future.done()

    def cleanup_old_jobs(self, max_age_minutes: int = 30):
        """
        Delete stale output files and job records.
        Jobs whose worker has not returned yet are kept regardless of age.
        """
        cutoff = time.time() - (max_age_minutes * 60)
        with self._lock:
            stale_ids = [
                jid
                for jid, job in self._jobs.items()
                if job.created_at < cutoff and not self._is_running(jid)
            ]
            stale_jobs = [self._jobs.pop(jid) for jid in stale_ids]
            for jid in stale_ids:
                self._engines.pop(jid, None)
                self._futures.pop(jid, None)

        for job in stale_jobs:
            if job.file_name and os.path.exists(job.file_name):
                try:
                    os.remove(job.file_name)
                except OSError as e:
                    logger.warning(f"Could not remove stale export {job.file_name}: {e}")
        return len(stale_jobs)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


@lru_cache()
def get_export_service() -> ExportService:
    """Cached singleton of the export service."""
    settings = get_settings()
    return ExportService(
        output_dir=settings.EXPORT_OUTPUT_DIR,
        max_workers=settings.EXPORT_MAX_WORKERS,
    )
