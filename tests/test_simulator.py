"""Tests for the event-driven simulation driver.

The invariant checks wrap the engine so every handler call is followed by a
consistency check of cores against job assignments.
"""

import pytest

from coresched import JobSpec, Policy, SchedulingEngine, Simulation, SimulationConfig, workload

NON_PREEMPTIVE = [Policy.FCFS, Policy.SJF, Policy.PRI]


class CheckedEngine(SchedulingEngine):
    """Engine that asserts the core/assignment invariant after every event."""

    def on_arrival(self, job_id, time, duration, priority=0):
        result = super().on_arrival(job_id, time, duration, priority)
        self._check()
        return result

    def on_completion(self, core_id, job_id, time):
        result = super().on_completion(core_id, job_id, time)
        self._check()
        return result

    def on_quantum_expired(self, core_id, time):
        result = super().on_quantum_expired(core_id, time)
        self._check()
        return result

    def _check(self) -> None:
        assigned = [job.assigned_core for job in self.queue if job.assigned_core is not None]
        assert len(assigned) == len(set(assigned))
        assert len(assigned) == self.cores.busy_count() <= self.core_count
        for job in self.queue:
            if job.assigned_core is not None:
                assert self.cores.job_on(job.assigned_core) == job.job_id


def _sample_workload(seed: int = 7, count: int = 24) -> list[JobSpec]:
    return workload.poisson_workload(
        rate=0.6,
        duration_sampler=[1, 2, 3, 5, 8],
        count=count,
        seed=seed,
        priority_sampler=[0, 1, 2, 3],
    )


class TestScenarios:
    """Replay small hand-checked workloads."""

    def test_fcfs_single_core(self) -> None:
        jobs = [JobSpec(0, 0, 5), JobSpec(1, 1, 3)]
        result = Simulation(jobs, SimulationConfig(cores=1, policy=Policy.FCFS)).run()
        assert result.statistics.avg_wait == 2.0
        assert result.statistics.avg_turnaround == 6.0
        assert result.statistics.avg_response == 2.0
        assert result.total_time == 8
        assert result.utilization == 1.0

    def test_psjf_preemption(self) -> None:
        jobs = [JobSpec(0, 0, 10), JobSpec(1, 2, 2)]
        result = Simulation(jobs, SimulationConfig(cores=1, policy=Policy.PSJF)).run()
        by_id = {job.job_id: job for job in result.jobs}
        assert result.preemptions == 1
        assert by_id[1].response_time == 0
        assert by_id[1].turnaround_time == 2
        assert by_id[0].wait_time == 2
        assert by_id[0].turnaround_time == 12

    def test_round_robin_alternates(self) -> None:
        jobs = [JobSpec(0, 0, 4), JobSpec(1, 1, 3)]
        result = Simulation(jobs, SimulationConfig(cores=1, policy=Policy.RR, quantum=2)).run()
        by_id = {job.job_id: job for job in result.jobs}
        assert by_id[0].wait_time == 2
        assert by_id[1].wait_time == 3
        assert by_id[0].turnaround_time == 6
        assert by_id[1].turnaround_time == 6
        assert result.statistics.avg_response == 0.5
        assert [d.kind for d in result.decisions] == ["arrival", "arrival", "quantum", "quantum", "completion", "completion"]

    def test_empty_workload(self) -> None:
        result = Simulation([], SimulationConfig(cores=2)).run()
        assert result.jobs == []
        assert result.total_time == 0
        assert result.statistics.avg_wait == 0.0
        assert result.utilization == 0.0

    def test_queue_log_recorded_on_request(self) -> None:
        jobs = [JobSpec(0, 0, 5), JobSpec(1, 1, 3)]
        result = Simulation(jobs, SimulationConfig(policy=Policy.FCFS, record_queue=True)).run()
        assert result.queue_log[1] == (1, "0(0) 1(-1)")
        assert len(result.queue_log) == len(result.decisions)


class TestInvariants:
    """Properties that must hold for any workload and policy."""

    @pytest.mark.parametrize("policy", list(Policy))
    @pytest.mark.parametrize("cores", [1, 3])
    def test_timing_fields_are_consistent(self, policy: Policy, cores: int) -> None:
        jobs = _sample_workload()
        config = SimulationConfig(cores=cores, policy=policy, quantum=2)
        result = Simulation(jobs, config, engine_factory=CheckedEngine).run()

        assert len(result.jobs) == len(jobs)
        # A job displaced at the instant it was first dispatched never ran, so
        # that dispatch does not count as its response.
        first_dispatch: dict[int, int] = {}
        on_core: dict[int, int] = {}
        for decision in result.decisions:
            if decision.kind == "arrival":
                if decision.core == -1:
                    continue
                victim = on_core.get(decision.core)
                if victim is not None and first_dispatch.get(victim) == decision.time:
                    del first_dispatch[victim]
                on_core[decision.core] = decision.job_id
                first_dispatch.setdefault(decision.job_id, decision.time)
            elif decision.job_id == -1:
                on_core.pop(decision.core, None)
            else:
                on_core[decision.core] = decision.job_id
                first_dispatch.setdefault(decision.job_id, decision.time)
        for job in result.jobs:
            assert job.response_time is not None and job.response_time >= 0
            assert job.response_time == first_dispatch[job.job_id] - job.arrival_time
            assert job.turnaround_time >= job.duration
            assert job.remaining_time == 0
            assert job.turnaround_time == job.duration + job.wait_time

    @pytest.mark.parametrize("policy", NON_PREEMPTIVE)
    def test_non_preemptive_policies_dispatch_once(self, policy: Policy) -> None:
        result = Simulation(_sample_workload(), SimulationConfig(cores=2, policy=policy)).run()
        dispatched = [
            d.job_id for d in result.decisions if d.kind == "completion" and d.job_id != -1
        ] + [d.job_id for d in result.decisions if d.kind == "arrival" and d.core != -1]
        assert result.preemptions == 0
        assert len(dispatched) == len(set(dispatched)) == len(result.jobs)

    @pytest.mark.parametrize("policy", list(Policy))
    def test_identical_runs_are_identical(self, policy: Policy) -> None:
        config = SimulationConfig(cores=2, policy=policy, quantum=3)
        first = Simulation(_sample_workload(seed=11), config).run()
        second = Simulation(_sample_workload(seed=11), SimulationConfig(cores=2, policy=policy, quantum=3)).run()
        assert first.decisions == second.decisions
        assert first.statistics == second.statistics


class TestValidation:
    """Verify driver configuration checks."""

    def test_duplicate_arrival_times_rejected(self) -> None:
        with pytest.raises(ValueError, match="share arrival time"):
            Simulation([JobSpec(0, 1, 2), JobSpec(1, 1, 3)])

    def test_ids_must_follow_arrival_order(self) -> None:
        with pytest.raises(ValueError, match="increase"):
            Simulation([JobSpec(5, 0, 2), JobSpec(1, 1, 3)])

    @pytest.mark.parametrize("kwargs", [{"cores": 0}, {"quantum": 0}])
    def test_config_rejects_non_positive_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    def test_config_parses_policy_names(self) -> None:
        assert SimulationConfig(policy="rr").policy is Policy.RR
