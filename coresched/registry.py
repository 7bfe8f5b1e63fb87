from __future__ import annotations

from collections.abc import Iterator

from .errors import SchedulerContractError
from .job import Job


class JobRegistry:
    """Every job submitted to an engine, keyed by id in arrival order."""

    def __init__(self) -> None:
        self._jobs: dict[int, Job] = {}
        self._last_id: int | None = None

    def register(self, job: Job) -> Job:
        if self._last_id is not None and job.job_id <= self._last_id:
            msg = f"job ids must be strictly increasing, got {job.job_id} after {self._last_id}"
            raise SchedulerContractError(msg)
        self._jobs[job.job_id] = job
        self._last_id = job.job_id
        return job

    def get(self, job_id: int) -> Job:
        return self._jobs[job_id]

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs.values())

    def clear(self) -> None:
        self._jobs.clear()
