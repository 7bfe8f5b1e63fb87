"""Tests for workload generation and trace parsing."""

import pytest

from coresched import JobSpec, workload


class TestJobSpec:
    """Verify arrival record validation."""

    def test_duration_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="duration"):
            JobSpec(0, 0, 0)

    def test_arrival_cannot_be_negative(self) -> None:
        with pytest.raises(ValueError, match="arrival_time"):
            JobSpec(0, -1, 3)


class TestGenerators:
    """Verify synthetic workloads."""

    def test_periodic_workload(self) -> None:
        jobs = workload.periodic_workload(period=3, duration=2, count=4, priority=1)
        assert [job.arrival_time for job in jobs] == [0, 3, 6, 9]
        assert [job.job_id for job in jobs] == [0, 1, 2, 3]
        assert all(job.duration == 2 and job.priority == 1 for job in jobs)

    def test_poisson_workload_has_unique_increasing_arrivals(self) -> None:
        jobs = workload.poisson_workload(rate=5.0, duration_sampler=[1, 2], count=50, seed=3)
        arrivals = [job.arrival_time for job in jobs]
        assert all(later > earlier for earlier, later in zip(arrivals, arrivals[1:]))
        assert [job.job_id for job in jobs] == list(range(50))

    def test_poisson_workload_is_seeded(self) -> None:
        first = workload.poisson_workload(rate=0.5, duration_sampler=[1, 4], count=10, seed=9, priority_sampler=[0, 5])
        second = workload.poisson_workload(rate=0.5, duration_sampler=[1, 4], count=10, seed=9, priority_sampler=[0, 5])
        assert first == second
        assert {job.priority for job in first} <= {0, 5}

    def test_callable_sampler(self) -> None:
        jobs = workload.poisson_workload(rate=1.0, duration_sampler=lambda rng: 7, count=3, seed=1)
        assert [job.duration for job in jobs] == [7, 7, 7]

    def test_empty_sampler_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            workload.poisson_workload(rate=1.0, duration_sampler=[], count=1)

    def test_non_positive_sampled_duration_rejected(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            workload.poisson_workload(rate=1.0, duration_sampler=[0], count=1)

    def test_from_arrivals_assigns_ids_in_arrival_order(self) -> None:
        jobs = workload.from_arrivals([workload.Arrival(5, 2), workload.Arrival(1, 3, 4)])
        assert jobs == [JobSpec(0, 1, 3, 4), JobSpec(1, 5, 2, 0)]


class TestTraces:
    """Verify the trace file format."""

    def test_parse_trace_accepts_commas_spaces_and_comments(self) -> None:
        lines = [
            "# arrival,duration,priority",
            "0,8,1",
            "",
            "1 3 0   # short job",
            "4,\t2",
        ]
        assert workload.parse_trace(lines) == [
            JobSpec(0, 0, 8, 1),
            JobSpec(1, 1, 3, 0),
            JobSpec(2, 4, 2, 0),
        ]

    def test_parse_trace_rejects_bad_field_count(self) -> None:
        with pytest.raises(ValueError, match="line 2"):
            workload.parse_trace(["0,1,1", "5"])

    def test_parse_trace_rejects_non_integers(self) -> None:
        with pytest.raises(ValueError, match="integers"):
            workload.parse_trace(["0,fast,1"])

    def test_load_trace(self, tmp_path) -> None:
        path = tmp_path / "jobs.csv"
        path.write_text("0,5,0\n1,3,0\n", encoding="utf-8")
        assert [job.duration for job in workload.load_trace(path)] == [5, 3]
