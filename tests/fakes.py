"""
Fakes shared by the export tests: page sources, clocks and sinks.
"""

from typing import Any, Callable, Dict, List, Optional

from tablexport.export.fetcher import Page, PageFetcher
from tablexport.export.sink import LocalFileSink


class FakeFetcher(PageFetcher):
    """
    In-memory page source. Calls are numbered from 1; the first call of a run
    is the single-row probe.
    """

    def __init__(
        self,
        rows: List[Dict[str, Any]],
        total: Optional[int] = None,
        absent_on_call: Optional[int] = None,
        fail_on_call: Optional[int] = None,
        error: Optional[Exception] = None,
        on_fetch: Optional[Callable[[int, int, int], None]] = None,
    ):
        self.rows = rows
        self.total = total
        self.absent_on_call = absent_on_call
        self.fail_on_call = fail_on_call
        self.error = error or ConnectionError("connection reset by peer")
        self.on_fetch = on_fetch
        self.calls: List[tuple] = []
        self.received: List[dict] = []

    @property
    def page_calls(self) -> List[tuple]:
        """Calls after the probe."""
        return self.calls[1:]

    def fetch(self, table_name, offset, limit, order_by=None, filters=None, schema=None):
        self.calls.append((offset, limit))
        self.received.append(
            {"table": table_name, "order_by": order_by, "filters": filters, "schema": schema}
        )
        call_no = len(self.calls)

        if self.on_fetch:
            self.on_fetch(call_no, offset, limit)
        if call_no == self.fail_on_call:
            raise self.error
        if call_no == self.absent_on_call:
            return None

        total = len(self.rows) if self.total is None else self.total
        return Page(offset=offset, rows=self.rows[offset : offset + limit], total_records=total)


class FakeClock:
    """Returns the scripted timestamps in order, then keeps returning the last one."""

    def __init__(self, times: List[float]):
        self.times = list(times)
        self.calls = 0

    def __call__(self) -> float:
        value = self.times[min(self.calls, len(self.times) - 1)]
        self.calls += 1
        return value


class FailingSink(LocalFileSink):
    """LocalFileSink that raises on a chosen operation."""

    def __init__(self, fail_on: str, after: int = 0):
        super().__init__()
        self.fail_on = fail_on
        self.after = after
        self.counts: Dict[str, int] = {}

    def _maybe_fail(self, op: str):
        self.counts[op] = self.counts.get(op, 0) + 1
        if op == self.fail_on and self.counts[op] > self.after:
            raise OSError(28, "No space left on device")

    def truncate_and_open(self, target):
        self._maybe_fail("truncate")
        super().truncate_and_open(target)

    def append_line(self, target, content):
        self._maybe_fail("append")
        super().append_line(target, content)

    def size(self, target):
        self._maybe_fail("size")
        return super().size(target)

    def delete(self, target):
        self._maybe_fail("delete")
        super().delete(target)


def make_rows(n: int) -> List[Dict[str, Any]]:
    return [{"id": i, "name": f"row-{i}"} for i in range(n)]


