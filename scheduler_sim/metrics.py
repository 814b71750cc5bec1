from __future__ import annotations

from typing import Iterable, List

from .models import GanttEntry, Process, ProcessMetrics, ScheduleResult, ScheduleSummary


def compute_process_metrics(processes: Iterable[Process]) -> List[ProcessMetrics]:
    """
    Turnaround and waiting time for each completed process, in pid order.
    """
    metrics: List[ProcessMetrics] = []
    for p in sorted(processes, key=lambda p: p.pid):
        turnaround_time = p.finish_time - p.arrival_time
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                finish_time=p.finish_time,
                waiting_time=turnaround_time - p.burst_time,
                turnaround_time=turnaround_time,
            )
        )
    return metrics


def compute_summary(processes: List[ProcessMetrics], timeline: List[GanttEntry]) -> ScheduleSummary:
    """
    Aggregate averages, makespan and CPU utilization for one run.

    Makespan is the latest finish time, so idle gaps before and between
    processes count against utilization.
    """
    if not processes:
        return ScheduleSummary(
            avg_waiting=0.0,
            avg_turnaround=0.0,
            cpu_utilization=0.0,
            makespan=0,
            busy_time=0,
            idle_time=0,
        )

    makespan = max(p.finish_time for p in processes)
    busy_time = sum(p.burst_time for p in processes)
    averages = summarize_process_metrics(processes)

    # Everything inside [0, makespan) not covered by a slice is idle.
    idle_time = makespan - sum(entry.duration for entry in timeline)

    return ScheduleSummary(
        avg_waiting=averages["avg_waiting"],
        avg_turnaround=averages["avg_turnaround"],
        cpu_utilization=100.0 * busy_time / makespan if makespan > 0 else 0.0,
        makespan=makespan,
        busy_time=busy_time,
        idle_time=idle_time,
    )


def finalize_result(result: ScheduleResult, processes: Iterable[Process]) -> ScheduleResult:
    """
    Fill in per-process metrics and the summary from a finished snapshot.
    """
    result.processes = compute_process_metrics(processes)
    result.summary = compute_summary(result.processes, result.timeline)
    return result


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }
