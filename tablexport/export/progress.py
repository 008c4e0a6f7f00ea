import math
import time
from typing import Callable

from tablexport.export.job import ExportJob

Clock = Callable[[], float]


class ProgressEstimator:
    """
    Estimates time remaining from the duration of the most recent page only.

    Each estimate is remaining_pages * (now - previous page completion), so it
    jumps with page latency. The first page of a run only records its timestamp.
    """

    def __init__(self, clock: Clock = time.monotonic):
        self.clock = clock

    def update(self, job: ExportJob) -> None:
        now = self.clock()

        if job.last_page_time is not None:
            elapsed = now - job.last_page_time
            remaining_rows = (job.total_rows or 0) - job.rows_exported
            # Half-up rounding, not Python's banker's rounding
            pages_left = math.floor(remaining_rows / job.page_size + 0.5)
            job.time_left = pages_left * elapsed

        job.last_page_time = now
