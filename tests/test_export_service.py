"""
Export Service Tests.

Jobs run on the service's real worker pool against in-memory fetchers;
tests block on ExportService.wait() instead of sleeping.
"""

import json
import os
import threading

import pytest

from fakes import FakeFetcher, make_rows
from tablexport.schemas.export import ExportStatus
from tablexport.services.export_service import ExportService


def _blocking_fetcher(rows, block_on_call=2):
    """FakeFetcher that parks inside the given call until released."""
    started = threading.Event()
    release = threading.Event()

    def on_fetch(call_no, offset, limit):
        if call_no == block_on_call:
            started.set()
            assert release.wait(5)

    return FakeFetcher(rows, on_fetch=on_fetch), started, release


@pytest.fixture
def service(tmp_path):
    svc = ExportService(
        output_dir=str(tmp_path / "exports"),
        max_workers=2,
        fetcher_factory=lambda: FakeFetcher(make_rows(5)),
    )
    yield svc
    svc.shutdown(wait=True)


class TestSubmit:
    def test_job_runs_to_completion(self, service):
        job = service.submit_job("people", format="json", page_size=2)

        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.COMPLETED
        assert job.rows_exported == 5
        assert job.total_rows == 5
        assert job.progress_pct == 100
        assert job.file_name == os.path.join(service.output_dir, f"{job.job_id}.json")
        with open(job.file_name, encoding="utf-8") as f:
            lines = f.read().splitlines()
        assert lines[0] == "["
        assert lines[-1] == "]"
        assert json.loads(lines[1].rstrip(",")) == {"id": 0, "name": "row-0"}

    def test_explicit_fetcher_and_query_shape(self, service):
        fetcher = FakeFetcher(make_rows(3))
        job = service.submit_job(
            "people",
            format="csv",
            schema="hr",
            filters=[{"column": "name", "operator": "eq", "value": "x"}],
            order_by=["id"],
            page_size=10,
            fetcher=fetcher,
        )

        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.COMPLETED
        assert fetcher.received[-1] == {
            "table": "people",
            "order_by": ["id"],
            "filters": [{"column": "name", "operator": "eq", "value": "x"}],
            "schema": "hr",
        }
        with open(job.file_name, encoding="utf-8") as f:
            assert f.read() == "id,name\n0,row-0\n1,row-1\n2,row-2\n"

    def test_sql_defaults_target_table(self, service):
        job = service.submit_job("people", format="sql", fetcher=FakeFetcher(make_rows(1)))
        service.wait(job.job_id, timeout=5)

        assert job.output_options["table_name"] == "people"
        with open(job.file_name, encoding="utf-8") as f:
            assert f.read().startswith('INSERT INTO "people"')

    def test_default_page_size_from_settings(self, service):
        job = service.submit_job("people")
        service.wait(job.job_id, timeout=5)
        assert job.page_size == 500

    def test_unknown_format_is_rejected(self, service):
        with pytest.raises(ValueError, match="Unsupported export format"):
            service.submit_job("people", format="xlsx")

    def test_fault_is_recorded_on_the_job(self, service):
        fetcher = FakeFetcher(make_rows(5), fail_on_call=2)
        job = service.submit_job("people", page_size=2, fetcher=fetcher)

        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.ERROR
        assert "connection reset by peer" in job.error
        assert os.path.exists(job.file_name)


class TestSignals:
    def test_pause_keeps_partial_output(self, service):
        fetcher, started, release = _blocking_fetcher(make_rows(10))
        job = service.submit_job("people", format="csv", page_size=3, fetcher=fetcher)

        assert started.wait(5)
        assert service.pause_job(job.job_id) is job
        release.set()
        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.PAUSED
        assert job.rows_exported == 3
        with open(job.file_name, encoding="utf-8") as f:
            assert f.read() == "id,name\n0,row-0\n1,row-1\n2,row-2\n"

    def test_abort_deletes_output(self, service):
        fetcher, started, release = _blocking_fetcher(make_rows(10))
        job = service.submit_job("people", page_size=3, fetcher=fetcher)

        assert started.wait(5)
        assert service.abort_job(job.job_id) is job
        release.set()
        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.ABORTED
        assert not os.path.exists(job.file_name)

    def test_unknown_job_ids(self, service):
        assert service.get_job("missing") is None
        assert service.pause_job("missing") is None
        assert service.abort_job("missing") is None
        assert service.wait("missing") is None


class TestCleanup:
    def test_stale_jobs_and_files_are_removed(self, service):
        old = service.submit_job("people")
        fresh = service.submit_job("people")
        service.wait(old.job_id, timeout=5)
        service.wait(fresh.job_id, timeout=5)
        old.created_at = 0

        assert service.cleanup_old_jobs(max_age_minutes=30) == 1

        assert service.get_job(old.job_id) is None
        assert not os.path.exists(old.file_name)
        assert service.get_job(fresh.job_id) is fresh
        assert os.path.exists(fresh.file_name)

    def test_running_job_survives_cleanup(self, service):
        fetcher, started, release = _blocking_fetcher(make_rows(4))
        job = service.submit_job("people", page_size=2, fetcher=fetcher)
        assert started.wait(5)
        job.created_at = 0

        try:
            assert service.cleanup_old_jobs(max_age_minutes=30) == 0
            assert service.get_job(job.job_id) is job
            assert os.path.exists(job.file_name)
        finally:
            release.set()
        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.COMPLETED
        with open(job.file_name, encoding="utf-8") as f:
            lines = f.read().splitlines()
        assert lines[0] == "["
        assert len(lines) == 6
        assert lines[-1] == "]"

    def test_paused_job_is_still_cancellable_after_cleanup(self, service):
        fetcher, started, release = _blocking_fetcher(make_rows(6))
        job = service.submit_job("people", page_size=2, fetcher=fetcher)
        assert started.wait(5)
        service.pause_job(job.job_id)
        job.created_at = 0

        try:
            assert service.cleanup_old_jobs(max_age_minutes=30) == 0
            assert service.abort_job(job.job_id) is job
        finally:
            release.set()
        service.wait(job.job_id, timeout=5)

        assert job.status == ExportStatus.ABORTED
        assert not os.path.exists(job.file_name)
        assert service.cleanup_old_jobs(max_age_minutes=30) == 1
