from __future__ import annotations

from dataclasses import dataclass
from statistics import mean
from typing import Iterable, Sequence

from .errors import SchedulerContractError
from .job import Job
from .registry import JobRegistry


@dataclass(slots=True)
class JobMetrics:
    job_id: int
    arrival_time: int
    duration: int
    priority: int
    wait_time: int
    response_time: int
    turnaround_time: int
    completion_time: int
    slowdown: float


@dataclass(slots=True)
class AggregateMetrics:
    count: int
    mean_wait_time: float
    mean_response_time: float
    mean_turnaround_time: float
    mean_slowdown: float
    p50_wait: float
    p90_wait: float
    p99_wait: float
    p50_turnaround: float
    p90_turnaround: float
    p99_turnaround: float
    throughput: float


@dataclass(frozen=True, slots=True)
class StatisticsSummary:
    avg_wait: float
    avg_turnaround: float
    avg_response: float


class StatisticsCollector:
    """Averages over a registry, computed when asked.

    Every registered job must have completed; a registry with no jobs
    reports 0.0 for every average.
    """

    def __init__(self, registry: JobRegistry) -> None:
        self._registry = registry

    def average_wait_time(self) -> float:
        return self._average("wait_time")

    def average_turnaround_time(self) -> float:
        return self._average("turnaround_time")

    def average_response_time(self) -> float:
        return self._average("response_time")

    def summary(self) -> StatisticsSummary:
        return StatisticsSummary(
            avg_wait=self.average_wait_time(),
            avg_turnaround=self.average_turnaround_time(),
            avg_response=self.average_response_time(),
        )

    def _average(self, field_name: str) -> float:
        count = 0
        total = 0
        for job in self._registry:
            value = getattr(job, field_name)
            if value is None:
                msg = f"job {job.job_id} has no {field_name}; statistics need every job to have completed"
                raise SchedulerContractError(msg)
            total += value
            count += 1
        if count == 0:
            return 0.0
        return total / count


def build_job_metrics(jobs: Iterable[Job]) -> list[JobMetrics]:
    metrics: list[JobMetrics] = []
    for job in jobs:
        if job.turnaround_time is None or job.response_time is None or job.wait_time is None:
            continue
        metrics.append(
            JobMetrics(
                job_id=job.job_id,
                arrival_time=job.arrival_time,
                duration=job.duration,
                priority=job.priority,
                wait_time=job.wait_time,
                response_time=job.response_time,
                turnaround_time=job.turnaround_time,
                completion_time=job.arrival_time + job.turnaround_time,
                slowdown=job.turnaround_time / job.duration,
            ),
        )
    return metrics


def summarise(metrics: Sequence[JobMetrics], total_time: float) -> AggregateMetrics:
    if not metrics:
        return AggregateMetrics(
            count=0,
            mean_wait_time=0.0,
            mean_response_time=0.0,
            mean_turnaround_time=0.0,
            mean_slowdown=0.0,
            p50_wait=0.0,
            p90_wait=0.0,
            p99_wait=0.0,
            p50_turnaround=0.0,
            p90_turnaround=0.0,
            p99_turnaround=0.0,
            throughput=0.0,
        )
    wait_values = [m.wait_time for m in metrics]
    turnaround_values = [m.turnaround_time for m in metrics]
    return AggregateMetrics(
        count=len(metrics),
        mean_wait_time=mean(wait_values),
        mean_response_time=mean(m.response_time for m in metrics),
        mean_turnaround_time=mean(turnaround_values),
        mean_slowdown=mean(m.slowdown for m in metrics),
        p50_wait=_percentile(wait_values, 50),
        p90_wait=_percentile(wait_values, 90),
        p99_wait=_percentile(wait_values, 99),
        p50_turnaround=_percentile(turnaround_values, 50),
        p90_turnaround=_percentile(turnaround_values, 90),
        p99_turnaround=_percentile(turnaround_values, 99),
        throughput=len(metrics) / total_time if total_time else 0.0,
    )


def _percentile(values: Sequence[float], percentile: float) -> float:
    if not values:
        return 0.0
    sorted_values = sorted(values)
    k = (len(sorted_values) - 1) * percentile / 100
    f = int(k)
    c = min(f + 1, len(sorted_values) - 1)
    if f == c:
        return float(sorted_values[f])
    d0 = sorted_values[f] * (c - k)
    d1 = sorted_values[c] * (k - f)
    return d0 + d1
