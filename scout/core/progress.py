"""In-memory progress of running sync jobs.

Best-effort and process-local: entries are cleared when a job ends and are
lost on restart. Durable state lives only in the job store.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any

from scout.core.datetime_utils import utc_now

ProgressCallback = Callable[..., None]


@dataclass
class JobProgress:
    step: str
    current: int | None = None
    total: int | None = None
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ProgressTracker:
    """Maps job id to its latest reported step."""

    def __init__(self) -> None:
        self._entries: dict[int, JobProgress] = {}

    def report(
        self, job_id: int, step: str, current: int | None = None, total: int | None = None
    ) -> None:
        self._entries[job_id] = JobProgress(
            step=step, current=current, total=total, updated_at=utc_now().isoformat()
        )

    def get(self, job_id: int) -> JobProgress | None:
        return self._entries.get(job_id)

    def clear(self, job_id: int) -> None:
        self._entries.pop(job_id, None)

    def sink(self, job_id: int) -> ProgressCallback:
        """A callback reporting progress for one job: sink(step, current=None, total=None)."""

        def report(step: str, current: int | None = None, total: int | None = None) -> None:
            self.report(job_id, step, current, total)

        return report


def noop_progress(step: str, current: int | None = None, total: int | None = None) -> None:
    return None
