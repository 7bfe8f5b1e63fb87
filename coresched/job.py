from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class JobSpec:
    """Immutable arrival record fed to the engine by a workload."""

    job_id: int
    arrival_time: int
    duration: int
    priority: int = 0

    def __post_init__(self) -> None:
        if self.duration <= 0:
            msg = "duration must be strictly positive"
            raise ValueError(msg)
        if self.arrival_time < 0:
            msg = "arrival_time cannot be negative"
            raise ValueError(msg)


@dataclass(slots=True)
class Job:
    """Mutable scheduling state for a job, from arrival until statistics are read."""

    job_id: int
    arrival_time: int
    duration: int
    priority: int
    remaining_time: int
    wait_time: Optional[int] = None
    start_wait: Optional[int] = None
    response_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    rr_sequence: Optional[int] = None
    assigned_core: Optional[int] = None

    @classmethod
    def arrive(cls, job_id: int, time: int, duration: int, priority: int) -> Job:
        return cls(job_id=job_id, arrival_time=time, duration=duration, priority=priority, remaining_time=duration)

    @property
    def is_running(self) -> bool:
        return self.assigned_core is not None

    @property
    def is_complete(self) -> bool:
        return self.turnaround_time is not None

    def recompute_remaining(self, now: int) -> None:
        """Derive remaining time from elapsed time minus accumulated waiting.

        Only meaningful for a job that is running or has just stopped running;
        the engine never decrements remaining time on a clock tick.
        """

        waited = self.wait_time if self.wait_time is not None else 0
        self.remaining_time = self.duration - (now - self.arrival_time - waited)

    def dispatch_on_arrival(self, core: int) -> None:
        self.wait_time = 0
        self.response_time = 0
        self.assigned_core = core

    def resume(self, core: int, now: int) -> None:
        if self.response_time is None:
            self.response_time = now - self.arrival_time
            self.wait_time = now - self.arrival_time
        elif self.start_wait is not None:
            self.wait_time = (self.wait_time or 0) + (now - self.start_wait)
            self.start_wait = None
        self.assigned_core = core

    def suspend(self, now: int) -> None:
        self.recompute_remaining(now)
        self.assigned_core = None
        self.start_wait = now

    def reset_timing(self) -> None:
        self.response_time = None
        self.wait_time = None
        self.start_wait = None

    def finish(self, now: int) -> None:
        self.recompute_remaining(now)
        self.turnaround_time = now - self.arrival_time
        self.assigned_core = None
        self.rr_sequence = None
