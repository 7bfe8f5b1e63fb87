from __future__ import annotations

import logging
from typing import Any, Optional

from .cores import CoreTable
from .errors import SchedulerContractError
from .job import Job
from .metrics import StatisticsCollector, StatisticsSummary
from .ordered_set import OrderedJobSet
from .policies import Policy
from .registry import JobRegistry

logger = logging.getLogger(__name__)

NO_CHANGE = -1


class SchedulingEngine:
    """Dispatch decisions for a fixed set of cores under one policy.

    Running and waiting jobs share a single ordered set and are told apart by
    ``Job.assigned_core``. Each handler runs to completion and returns either a
    core index (arrivals), a job id (completions, quantum expiries) or
    ``NO_CHANGE``.
    """

    def __init__(self, cores: int, policy: Any = Policy.FCFS) -> None:
        if isinstance(cores, bool) or not isinstance(cores, int) or cores <= 0:
            msg = "cores must be a positive integer"
            raise ValueError(msg)
        self.policy = Policy.parse(policy)
        self._rule = self.policy.rule
        self._cores = CoreTable(cores)
        self._registry = JobRegistry()
        self._queue = OrderedJobSet(self._rule, self._registry.get)
        self._statistics = StatisticsCollector(self._registry)
        self._closed = False
        logger.debug("engine started with %d core(s) under %s", cores, self.policy.name)

    @property
    def core_count(self) -> int:
        return len(self._cores)

    @property
    def cores(self) -> CoreTable:
        return self._cores

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    @property
    def queue(self) -> OrderedJobSet:
        return self._queue

    @property
    def closed(self) -> bool:
        return self._closed

    def job(self, job_id: int) -> Job:
        self._ensure_open()
        return self._registry.get(job_id)

    def on_arrival(self, job_id: int, time: int, duration: int, priority: int = 0) -> int:
        self._ensure_open()
        job = self._registry.register(Job.arrive(job_id, time, duration, priority))
        self._refresh_running(time)

        core = self._cores.first_idle()
        if core is not None:
            job.dispatch_on_arrival(core)
            self._enqueue(job)
            self._cores.set_busy(core, job.job_id)
            logger.debug("t=%s job %d arrived and runs on idle core %d", time, job_id, core)
            return core

        if self._rule.preemptive:
            rank = self._queue.insert(job.job_id)
            if rank < self.core_count:
                core = self._preempt_lowest_running(time)
                job.dispatch_on_arrival(core)
                self._cores.set_busy(core, job.job_id)
                logger.debug("t=%s job %d arrived at rank %d and takes core %d", time, job_id, rank, core)
                return core
            logger.debug("t=%s job %d arrived at rank %d and waits", time, job_id, rank)
            return NO_CHANGE

        self._enqueue(job)
        logger.debug("t=%s job %d arrived and waits", time, job_id)
        return NO_CHANGE

    def on_completion(self, core_id: int, job_id: int, time: int) -> int:
        self._ensure_open()
        if self._cores.job_on(core_id) != job_id:
            msg = f"job {job_id} is not running on core {core_id}"
            raise SchedulerContractError(msg)
        job = self._registry.get(job_id)
        rank = self._queue.rank_of(job_id)
        job.finish(time)
        self._queue.remove_at(rank)
        self._cores.set_idle(core_id)
        logger.debug("t=%s job %d finished on core %d (turnaround %s)", time, job_id, core_id, job.turnaround_time)

        if self._rule.quantum_driven:
            self._renumber_turns()
        return self._dispatch_next(core_id, time)

    def on_quantum_expired(self, core_id: int, time: int) -> int:
        """Requeue the job on ``core_id`` at the tail and dispatch the next one.

        Only meaningful under round robin; under other policies the call is
        caller misuse and only a warning is logged.
        """

        self._ensure_open()
        if not self._rule.quantum_driven:
            logger.warning("quantum expiry on core %d under non round robin policy %s", core_id, self.policy.name)

        running_id = self._cores.job_on(core_id)
        if running_id is not None:
            job = self._registry.get(running_id)
            job.suspend(time)
            self._queue.remove_at(self._queue.rank_of(running_id))
            self._cores.set_idle(core_id)
            self._renumber_turns()
            job.rr_sequence = self._queue.size()
            self._queue.insert(running_id)
            logger.debug("t=%s quantum expired for job %d on core %d", time, running_id, core_id)
        else:
            self._renumber_turns()
        return self._dispatch_next(core_id, time)

    def average_wait_time(self) -> float:
        self._ensure_open()
        return self._statistics.average_wait_time()

    def average_turnaround_time(self) -> float:
        self._ensure_open()
        return self._statistics.average_turnaround_time()

    def average_response_time(self) -> float:
        self._ensure_open()
        return self._statistics.average_response_time()

    def finalize_statistics(self) -> StatisticsSummary:
        self._ensure_open()
        return self._statistics.summary()

    def show_queue(self) -> list[tuple[int, int]]:
        """Pairs of (job id, core or -1) in rank order."""

        self._ensure_open()
        return [
            (job.job_id, job.assigned_core if job.assigned_core is not None else NO_CHANGE)
            for job in self._queue
        ]

    def format_queue(self) -> str:
        return " ".join(f"{job_id}({core})" for job_id, core in self.show_queue())

    def shutdown(self) -> None:
        self._ensure_open()
        self._queue.clear()
        self._registry.clear()
        self._closed = True
        logger.debug("engine shut down")

    def _enqueue(self, job: Job) -> int:
        if self._rule.quantum_driven:
            job.rr_sequence = self._queue.size()
        return self._queue.insert(job.job_id)

    def _refresh_running(self, time: int) -> None:
        for job in self._queue:
            if job.is_running:
                job.recompute_remaining(time)

    def _preempt_lowest_running(self, time: int) -> int:
        for rank in range(self._queue.size() - 1, -1, -1):
            victim = self._queue.at(rank)
            if victim.assigned_core is None:
                continue
            core = victim.assigned_core
            victim.suspend(time)
            if victim.remaining_time == victim.duration:
                victim.reset_timing()
            self._cores.set_idle(core)
            logger.debug("t=%s job %d preempted from core %d (remaining %d)", time, victim.job_id, core, victim.remaining_time)
            return core
        msg = "no running job to preempt although every core is busy"
        raise SchedulerContractError(msg)

    def _renumber_turns(self) -> None:
        for rank, job in enumerate(self._queue):
            job.rr_sequence = rank

    def _dispatch_next(self, core_id: int, time: int) -> int:
        candidate: Optional[Job] = None
        for job in self._queue:
            if not job.is_running:
                candidate = job
                break
        if candidate is None:
            logger.debug("t=%s core %d stays idle", time, core_id)
            return NO_CHANGE
        candidate.resume(core_id, time)
        self._cores.set_busy(core_id, candidate.job_id)
        logger.debug("t=%s job %d dispatched to core %d", time, candidate.job_id, core_id)
        return candidate.job_id

    def _ensure_open(self) -> None:
        if self._closed:
            msg = "scheduling engine has been shut down"
            raise SchedulerContractError(msg)


def initialize(cores: int, policy: Any = Policy.FCFS) -> SchedulingEngine:
    """Build a fresh engine; the caller holds it for every later event."""

    return SchedulingEngine(cores, policy)
