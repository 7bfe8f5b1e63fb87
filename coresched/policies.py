from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .job import Job

logger = logging.getLogger(__name__)

SortKey = tuple[int, ...]


@dataclass(frozen=True, slots=True)
class OrderingRule:
    """How a policy ranks jobs and whether arrivals may displace running work."""

    key: Callable[[Job], SortKey]
    preemptive: bool = False
    quantum_driven: bool = False

    def outranks(self, candidate: Job, other: Job) -> bool:
        return self.key(candidate) < self.key(other)


def _by_arrival(job: Job) -> SortKey:
    return (job.job_id,)


def _by_duration(job: Job) -> SortKey:
    return (job.duration, job.job_id)


def _by_remaining(job: Job) -> SortKey:
    return (job.remaining_time, job.job_id)


def _by_priority(job: Job) -> SortKey:
    return (job.priority, job.job_id)


def _by_turn(job: Job) -> SortKey:
    # Members always carry a sequence under RR; unsequenced jobs sort last.
    if job.rr_sequence is None:
        return (1, 0)
    return (0, job.rr_sequence)


class Policy(Enum):
    FCFS = 0
    SJF = 1
    PSJF = 2
    PRI = 3
    PPRI = 4
    RR = 5

    @property
    def rule(self) -> OrderingRule:
        return _RULES[self]

    @property
    def preemptive(self) -> bool:
        return self.rule.preemptive

    @property
    def quantum_driven(self) -> bool:
        return self.rule.quantum_driven

    @classmethod
    def parse(cls, value: Any) -> Policy:
        """Resolve a policy from an enum member, a name or an integer code.

        Anything unrecognised selects FCFS, matching the engine's documented
        default rather than failing.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            member = cls.__members__.get(value.strip().upper())
            if member is not None:
                return member
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        logger.warning("unrecognised scheduling policy %r, falling back to FCFS", value)
        return cls.FCFS


_RULES: dict[Policy, OrderingRule] = {
    Policy.FCFS: OrderingRule(_by_arrival),
    Policy.SJF: OrderingRule(_by_duration),
    Policy.PSJF: OrderingRule(_by_remaining, preemptive=True),
    Policy.PRI: OrderingRule(_by_priority),
    Policy.PPRI: OrderingRule(_by_priority, preemptive=True),
    Policy.RR: OrderingRule(_by_turn, quantum_driven=True),
}
