from __future__ import annotations

import argparse
import logging
from typing import Sequence

from . import evaluation, workload
from .job import JobSpec
from .simulator import Simulation, SimulationConfig


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate multicore CPU scheduling policies.")
    parser.add_argument("trace", nargs="?", help="Job trace with one arrival,duration[,priority] record per line.")
    parser.add_argument("-c", "--cores", type=int, default=1, help="Number of cores.")
    parser.add_argument(
        "-s",
        "--scheme",
        type=str,
        default="all",
        help="Scheduling policy (fcfs, sjf, psjf, pri, ppri, rr) or 'all' to compare every policy.",
    )
    parser.add_argument("-q", "--quantum", type=int, default=2, help="Round robin quantum (time units).")
    parser.add_argument("--jobs", type=int, default=16, help="Number of generated jobs when no trace is given.")
    parser.add_argument("--arrival-rate", type=float, default=0.5, help="Poisson arrival rate (jobs per time unit).")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for workload generation.")
    parser.add_argument(
        "--durations",
        type=str,
        default="1,2,4,8",
        help="Comma-separated list of possible job durations (time units).",
    )
    parser.add_argument(
        "--priorities",
        type=str,
        default="0,1,2,3",
        help="Comma-separated list of possible job priorities (lower is more urgent).",
    )
    parser.add_argument("--show-queue", action="store_true", help="Print the ready queue after every event.")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING...).")
    return parser.parse_args(argv)


def parse_int_list(raw: str, name: str) -> list[int]:
    values = [int(item.strip()) for item in raw.split(",") if item.strip()]
    if not values:
        msg = f"{name} must contain at least one value"
        raise ValueError(msg)
    return values


def build_workload(args: argparse.Namespace) -> list[JobSpec]:
    if args.trace:
        return workload.load_trace(args.trace)
    return workload.poisson_workload(
        rate=args.arrival_rate,
        duration_sampler=parse_int_list(args.durations, "durations"),
        count=args.jobs,
        seed=args.seed,
        priority_sampler=parse_int_list(args.priorities, "priorities"),
    )


def run_single(jobs: list[JobSpec], args: argparse.Namespace) -> None:
    config = SimulationConfig(cores=args.cores, policy=args.scheme, quantum=args.quantum, record_queue=args.show_queue)
    result = Simulation(jobs, config).run()
    if args.show_queue:
        for decision, (time, queue) in zip(result.decisions, result.queue_log):
            print(f"t={time:<5} {decision.kind:<10} queue: {queue}")
        print()
    print(f"Scheduler: {config.policy.name} on {config.cores} core(s)")
    print(f"Average waiting time    : {result.statistics.avg_wait:.2f}")
    print(f"Average turnaround time : {result.statistics.avg_turnaround:.2f}")
    print(f"Average response time   : {result.statistics.avg_response:.2f}")


def run_comparison(jobs: list[JobSpec], args: argparse.Namespace) -> None:
    outcomes = evaluation.evaluate_suite(evaluation.all_policies(), jobs, cores=args.cores, quantum=args.quantum)

    print(f"Simulated {len(jobs)} jobs on {args.cores} core(s) with quantum {args.quantum}\n")
    header_fmt = "{:<8} {:>9} {:>9} {:>9} {:>9} {:>9} {:>8} {:>10}"
    row_fmt = "{:<8} {:>9.3f} {:>9.3f} {:>9.3f} {:>9.3f} {:>9.3f} {:>8d} {:>10.3f}"
    print(header_fmt.format("Policy", "MeanWait", "MeanResp", "MeanTurn", "MeanSlow", "p90Wait", "Preempt", "Throughput"))
    for outcome in outcomes:
        m = outcome.aggregate
        print(
            row_fmt.format(
                outcome.name,
                m.mean_wait_time,
                m.mean_response_time,
                m.mean_turnaround_time,
                m.mean_slowdown,
                m.p90_wait,
                outcome.simulation.preemptions,
                m.throughput,
            ),
        )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_arguments(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    jobs = build_workload(args)
    if args.scheme.strip().lower() == "all":
        run_comparison(jobs, args)
    else:
        run_single(jobs, args)


if __name__ == "__main__":
    main()
