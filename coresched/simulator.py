from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from .engine import NO_CHANGE, SchedulingEngine
from .job import Job, JobSpec
from .metrics import StatisticsSummary
from .policies import Policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Decision:
    time: int
    kind: str
    core: int
    job_id: int


@dataclass(slots=True)
class SimulationResult:
    jobs: list[Job]
    total_time: int
    core_busy_time: list[int]
    statistics: StatisticsSummary
    decisions: list[Decision] = field(default_factory=list)
    preemptions: int = 0
    context_switches: int = 0
    queue_log: list[tuple[int, str]] = field(default_factory=list)

    @property
    def utilization(self) -> float:
        if self.total_time == 0 or not self.core_busy_time:
            return 0.0
        return sum(self.core_busy_time) / (self.total_time * len(self.core_busy_time))


@dataclass(slots=True)
class SimulationConfig:
    cores: int = 1
    policy: Any = Policy.FCFS
    quantum: int = 2
    record_queue: bool = False

    def __post_init__(self) -> None:
        if self.cores <= 0:
            msg = "cores must be strictly positive"
            raise ValueError(msg)
        if self.quantum <= 0:
            msg = "quantum must be strictly positive"
            raise ValueError(msg)
        self.policy = Policy.parse(self.policy)


class Simulation:
    """Event-driven driver that replays a workload through a scheduling engine.

    The driver owns the notion of time: it tracks how long each job has really
    executed and raises completion and quantum events when they fall due. At a
    single instant, completions are delivered first, then quantum expiries,
    then arrivals.
    """

    def __init__(
        self,
        jobs: Sequence[JobSpec],
        config: SimulationConfig | None = None,
        *,
        engine_factory: Callable[[int, Policy], SchedulingEngine] = SchedulingEngine,
    ) -> None:
        self.config = config or SimulationConfig()
        self._engine_factory = engine_factory
        self._specs = sorted(jobs, key=lambda j: (j.arrival_time, j.job_id))
        _validate_arrivals(self._specs)
        self._pending: deque[JobSpec] = deque(self._specs)
        self._durations = {spec.job_id: spec.duration for spec in self._specs}
        self._executed: dict[int, int] = {}
        self._running: list[Optional[int]] = [None] * self.config.cores
        self._slice_start: list[int] = [0] * self.config.cores
        self._busy = [0] * self.config.cores
        self._now = 0
        self._decisions: list[Decision] = []
        self._queue_log: list[tuple[int, str]] = []
        self._preemptions = 0
        self._context_switches = 0

    def run(self) -> SimulationResult:
        engine = self._engine_factory(self.config.cores, self.config.policy)
        while self._pending or any(job_id is not None for job_id in self._running):
            next_time = self._next_event_time()
            self._advance(next_time)
            self._deliver_completions(engine)
            if engine.policy.quantum_driven:
                self._deliver_quantum_expiries(engine)
            self._deliver_arrivals(engine)

        statistics = engine.finalize_statistics()
        jobs = list(engine.registry)
        engine.shutdown()
        logger.info(
            "simulated %d job(s) on %d core(s) under %s in %d time unit(s)",
            len(jobs),
            self.config.cores,
            engine.policy.name,
            self._now,
        )
        return SimulationResult(
            jobs=jobs,
            total_time=self._now,
            core_busy_time=list(self._busy),
            statistics=statistics,
            decisions=list(self._decisions),
            preemptions=self._preemptions,
            context_switches=self._context_switches,
            queue_log=list(self._queue_log),
        )

    def _next_event_time(self) -> int:
        candidates: list[int] = []
        if self._pending:
            candidates.append(self._pending[0].arrival_time)
        quantum_driven = self.config.policy.quantum_driven
        for core, job_id in enumerate(self._running):
            if job_id is None:
                continue
            candidates.append(self._now + self._durations[job_id] - self._executed[job_id])
            if quantum_driven:
                candidates.append(self._slice_start[core] + self.config.quantum)
        return max(self._now, min(candidates))

    def _advance(self, until: int) -> None:
        elapsed = until - self._now
        if elapsed > 0:
            for core, job_id in enumerate(self._running):
                if job_id is None:
                    continue
                self._executed[job_id] += elapsed
                self._busy[core] += elapsed
        self._now = until

    def _deliver_completions(self, engine: SchedulingEngine) -> None:
        for core, job_id in enumerate(self._running):
            if job_id is None or self._executed[job_id] < self._durations[job_id]:
                continue
            self._running[core] = None
            chosen = engine.on_completion(core, job_id, self._now)
            self._record("completion", core, chosen, engine)
            if chosen != NO_CHANGE:
                self._start(core, chosen)

    def _deliver_quantum_expiries(self, engine: SchedulingEngine) -> None:
        for core, job_id in enumerate(self._running):
            if job_id is None or self._now - self._slice_start[core] < self.config.quantum:
                continue
            chosen = engine.on_quantum_expired(core, self._now)
            self._record("quantum", core, chosen, engine)
            if chosen == NO_CHANGE:
                self._running[core] = None
            elif chosen == job_id:
                self._slice_start[core] = self._now
            else:
                self._running[core] = None
                self._start(core, chosen)

    def _deliver_arrivals(self, engine: SchedulingEngine) -> None:
        while self._pending and self._pending[0].arrival_time == self._now:
            spec = self._pending.popleft()
            self._executed[spec.job_id] = 0
            core = engine.on_arrival(spec.job_id, spec.arrival_time, spec.duration, spec.priority)
            self._record("arrival", core, spec.job_id, engine)
            if core == NO_CHANGE:
                continue
            if self._running[core] is not None:
                self._preemptions += 1
                self._running[core] = None
            self._start(core, spec.job_id)

    def _start(self, core: int, job_id: int) -> None:
        self._running[core] = job_id
        self._slice_start[core] = self._now
        self._context_switches += 1

    def _record(self, kind: str, core: int, job_id: int, engine: SchedulingEngine) -> None:
        self._decisions.append(Decision(self._now, kind, core, job_id))
        if self.config.record_queue:
            self._queue_log.append((self._now, engine.format_queue()))

    @property
    def jobs(self) -> Iterable[JobSpec]:
        return list(self._specs)


def _validate_arrivals(specs: Sequence[JobSpec]) -> None:
    for previous, current in zip(specs, specs[1:]):
        if current.arrival_time == previous.arrival_time:
            msg = f"jobs {previous.job_id} and {current.job_id} share arrival time {current.arrival_time}"
            raise ValueError(msg)
        if current.job_id <= previous.job_id:
            msg = "job ids must increase with arrival time"
            raise ValueError(msg)
