from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from random import Random

from .job import JobSpec


@dataclass(slots=True)
class Arrival:
    at: int
    duration: int
    priority: int = 0


def periodic_workload(period: int, duration: int, count: int, *, priority: int = 0) -> list[JobSpec]:
    if period <= 0:
        msg = "period must be strictly positive"
        raise ValueError(msg)
    return [JobSpec(job_id=i, arrival_time=i * period, duration=duration, priority=priority) for i in range(count)]


def poisson_workload(
    rate: float,
    duration_sampler: Sequence[int] | Callable[[Random], int] | Iterable[int],
    count: int,
    *,
    seed: int | None = None,
    priority_sampler: Sequence[int] | Callable[[Random], int] | Iterable[int] | None = None,
) -> list[JobSpec]:
    """Jobs with exponential inter-arrival gaps, rounded to whole time units.

    Every gap after the first is at least one unit so that arrival times stay
    unique.
    """

    rng = Random(seed)
    jobs: list[JobSpec] = []
    current_time = 0
    for i in range(count):
        gap = int(round(rng.expovariate(rate)))
        if i > 0:
            gap = max(gap, 1)
        current_time += gap
        duration = _sample_positive(duration_sampler, rng)
        priority = int(_sample_value(priority_sampler, rng)) if priority_sampler is not None else 0
        jobs.append(JobSpec(job_id=i, arrival_time=current_time, duration=duration, priority=priority))
    return jobs


def from_arrivals(arrivals: Sequence[Arrival]) -> list[JobSpec]:
    ordered = sorted(arrivals, key=lambda a: a.at)
    return [JobSpec(job_id=idx, arrival_time=a.at, duration=a.duration, priority=a.priority) for idx, a in enumerate(ordered)]


_FIELD_SPLIT = re.compile(r"[,\s]+")


def parse_trace(lines: Iterable[str]) -> list[JobSpec]:
    """Read ``arrival,duration,priority`` records, one per line.

    Fields may be separated by commas or whitespace; blank lines and ``#``
    comments are skipped. The priority column is optional and defaults to 0.
    """

    arrivals: list[Arrival] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        fields = [item for item in _FIELD_SPLIT.split(line) if item]
        if len(fields) not in (2, 3):
            msg = f"line {lineno}: expected arrival,duration[,priority], got {raw.strip()!r}"
            raise ValueError(msg)
        try:
            values = [int(item) for item in fields]
        except ValueError as exc:
            msg = f"line {lineno}: fields must be integers"
            raise ValueError(msg) from exc
        arrivals.append(Arrival(*values))
    return from_arrivals(arrivals)


def load_trace(path: str | Path) -> list[JobSpec]:
    with open(path, encoding="utf-8") as handle:
        return parse_trace(handle)


def _sample_positive(source: Sequence[int] | Callable[[Random], int] | Iterable[int], rng: Random) -> int:
    value = int(_sample_value(source, rng))
    if value <= 0:
        msg = "sampled duration must be positive"
        raise ValueError(msg)
    return value


def _sample_value(source: Sequence[int] | Callable[[Random], int] | Iterable[int], rng: Random) -> int:
    if isinstance(source, Sequence):
        if not source:
            msg = "sampler sequence must not be empty"
            raise ValueError(msg)
        return rng.choice(source)
    if isinstance(source, Iterable):
        materialised = tuple(source)
        if not materialised:
            msg = "sampler iterable must not be empty"
            raise ValueError(msg)
        return rng.choice(materialised)
    return source(rng)
