"""
Export Engine: drives one export job from a paged data source to a file.

Lifecycle of a run:
  - Probe the first row so the serializer can shape its header
  - IDLE → EXPORTING, truncate the output, write the header
  - Fetch, render and append one page at a time until every row is written
    or the job leaves EXPORTING
  - COMPLETED (footer written), PAUSED (partial file kept),
    ABORTED (partial file deleted) or ERROR (fault re-raised, file kept)

pause() and abort() may be called from any thread. The loop only looks at the
status between pages, so a page already in flight always finishes first.
"""

import contextlib
import logging
import threading
from typing import Optional, Type

from tablexport.core.constants import FIRST_ROW_PROBE_LIMIT
from tablexport.export.errors import (
    ExportAborted,
    ExportError,
    ExportFault,
    FetchFault,
    SerializeFault,
    SinkFault,
)
from tablexport.export.fetcher import Page
from tablexport.export.job import ExportJob
from tablexport.export.progress import ProgressEstimator
from tablexport.export.serializers.base import Row, Serializer
from tablexport.export.sink import FileSink, LocalFileSink
from tablexport.schemas.export import ExportStatus

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _faults_as(fault_cls: Type[ExportFault], message: str):
    """Re-raises collaborator exceptions as the given engine fault."""
    try:
        yield
    except ExportError:
        raise
    except Exception as e:
        raise fault_cls(message, context=e) from e


class ExportEngine:
    """
    Runs a single ExportJob. One engine per job; the job is mutated in place.
    """

    def __init__(
        self,
        job: ExportJob,
        serializer: Serializer,
        sink: Optional[FileSink] = None,
        estimator: Optional[ProgressEstimator] = None,
    ):
        self.job = job
        self.serializer = serializer
        self.sink = sink or LocalFileSink()
        self.estimator = estimator or ProgressEstimator()
        self._lock = threading.Lock()

    # ── Status (shared with signalling threads) ──

    @property
    def status(self) -> ExportStatus:
        with self._lock:
            return self.job.status

    def _set_status(self, status: ExportStatus) -> None:
        with self._lock:
            self.job.status = status

    def _begin(self) -> bool:
        """IDLE → EXPORTING. A signal that arrived during setup is kept."""
        with self._lock:
            if self.job.status == ExportStatus.IDLE:
                self.job.status = ExportStatus.EXPORTING
                return True
            return False

    def pause(self) -> None:
        """Stop after the in-flight page. There is no resume."""
        logger.info(f"Export job {self.job.job_id}: pause requested")
        self._set_status(ExportStatus.PAUSED)

    def abort(self) -> None:
        """Stop after the in-flight page and delete the partial output."""
        logger.info(f"Export job {self.job.job_id}: abort requested")
        self._set_status(ExportStatus.ABORTED)

    # ── Collaborator calls ──

    def _fetch(self, offset: int, limit: int) -> Optional[Page]:
        job = self.job
        with _faults_as(
            FetchFault, f"Failed to fetch {limit} rows at offset {offset} from {job.table_name}"
        ):
            return job.fetcher.fetch(
                job.table_name, offset, limit, job.order_by, job.filters, job.schema
            )

    def _append(self, content: str) -> None:
        with _faults_as(SinkFault, f"Failed to write to {self.job.file_name}"):
            self.sink.append_line(self.job.file_name, content)

    def _probe_first_row(self) -> Optional[Row]:
        page = self._fetch(0, FIRST_ROW_PROBE_LIMIT)
        if page is None:
            return None
        self.job.total_rows = page.total_records
        return page.rows[0] if page.rows else None

    def _has_more_rows(self) -> bool:
        job = self.job
        return job.total_rows is None or job.rows_exported < job.total_rows

    def _fail(self, error: Exception) -> None:
        self._set_status(ExportStatus.ERROR)
        self.job.error = str(error)
        logger.error(f"Export job {self.job.job_id} failed: {error}")

    # ── Main loop ──

    def _export_pages(self) -> Optional[str]:
        """Everything up to (not including) the footer. Returns the footer."""
        job = self.job

        first_row = self._probe_first_row()
        with _faults_as(SerializeFault, "Failed to render header/footer"):
            header = self.serializer.render_header(first_row)
            footer = self.serializer.render_footer()
        logger.debug(
            f"Export job {job.job_id}: header={header is not None}, footer={footer is not None}"
        )

        if not self._begin():
            logger.info(f"Export job {job.job_id} was {self.status.value} before it started")

        with _faults_as(SinkFault, f"Failed to create {job.file_name}"):
            self.sink.truncate_and_open(job.file_name)

        if header:
            self._append(header)

        while self.status == ExportStatus.EXPORTING and self._has_more_rows():
            page = self._fetch(job.rows_exported, job.page_size)

            if page is None:
                logger.warning(
                    f"Export job {job.job_id}: source returned no page at offset {job.rows_exported}, aborting"
                )
                self._set_status(ExportStatus.ABORTED)
                break

            with _faults_as(
                SerializeFault, f"Failed to render rows at offset {page.offset}"
            ):
                content = self.serializer.render_chunk(page.rows)
            if content:
                self._append(content)

            job.total_rows = page.total_records
            job.rows_exported += len(page.rows)

            with _faults_as(SinkFault, f"Failed to stat {job.file_name}"):
                job.file_size = self.sink.size(job.file_name)
            self.estimator.update(job)

            logger.debug(
                f"Export job {job.job_id}: {job.rows_exported}/{job.total_rows} rows, "
                f"{job.file_size} bytes, ~{job.time_left:.1f}s left"
            )

            if not page.rows:
                # Source holds fewer rows than its count claims
                break

        return footer

    def run(self) -> ExportStatus:
        """
        Execute the export.

        Returns:
            ExportStatus.COMPLETED, or ExportStatus.PAUSED if pause() stopped the loop

        Raises:
            ExportAborted: abort() was called or the source returned no page;
                the output file has been deleted
            FetchFault, SinkFault, SerializeFault: the job is in ERROR and
                the partial output is left on disk
        """
        job = self.job
        logger.info(
            f"Export job {job.job_id} starting: {job.table_name} → {job.file_name} "
            f"({job.format}, {job.page_size} rows/page)"
        )

        try:
            footer = self._export_pages()
        except Exception as e:
            self._fail(e)
            raise

        status = self.status

        if status == ExportStatus.ABORTED:
            try:
                with _faults_as(SinkFault, f"Failed to delete aborted output {job.file_name}"):
                    self.sink.delete(job.file_name)
            except Exception as e:
                self._fail(e)
                raise
            logger.info(
                f"Export job {job.job_id} aborted after {job.rows_exported} rows; output deleted"
            )
            raise ExportAborted()

        if status == ExportStatus.PAUSED:
            logger.info(
                f"Export job {job.job_id} paused after {job.rows_exported} rows"
            )
            return ExportStatus.PAUSED

        try:
            if footer:
                self._append(footer)
        except Exception as e:
            self._fail(e)
            raise

        self._set_status(ExportStatus.COMPLETED)
        logger.info(
            f"Export job {job.job_id} complete: {job.rows_exported} rows → {job.file_name}"
        )
        return ExportStatus.COMPLETED
