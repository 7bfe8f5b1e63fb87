from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from . import metrics
from .job import JobSpec
from .policies import Policy
from .simulator import Simulation, SimulationConfig, SimulationResult


@dataclass(slots=True)
class EvaluationOutcome:
    name: str
    simulation: SimulationResult
    per_job: list[metrics.JobMetrics]
    aggregate: metrics.AggregateMetrics


def evaluate_policy(
    policy: Any,
    jobs: Sequence[JobSpec],
    *,
    cores: int = 1,
    quantum: int = 2,
) -> EvaluationOutcome:
    config = SimulationConfig(cores=cores, policy=policy, quantum=quantum)
    result = Simulation(jobs, config).run()
    per_job = metrics.build_job_metrics(result.jobs)
    aggregate = metrics.summarise(per_job, result.total_time)
    return EvaluationOutcome(name=config.policy.name, simulation=result, per_job=per_job, aggregate=aggregate)


def evaluate_suite(
    policies: Sequence[Any],
    jobs: Sequence[JobSpec],
    *,
    cores: int = 1,
    quantum: int = 2,
) -> list[EvaluationOutcome]:
    return [evaluate_policy(policy, jobs, cores=cores, quantum=quantum) for policy in policies]


def all_policies() -> list[Policy]:
    return list(Policy)
