from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple

from .gantt import GanttRecorder
from .metrics import finalize_result
from .models import Process, ScheduleResult

logger = logging.getLogger(__name__)

FCFS_NAME = "First-Come First-Served (FCFS)"
SRT_NAME = "Shortest Remaining Time (SRT)"
RR_NAME = "Round-Robin (RR)"


def _arrival_order(processes: Sequence[Process]) -> List[Process]:
    # sorted() is stable, so equal arrivals keep input (pid) order.
    return sorted(processes, key=lambda p: p.arrival_time)


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Served (non-preemptive) scheduling.

    Each process runs its whole burst in one slice, in arrival order. The CPU
    idles (no Gantt entry) until the next arrival when nothing is waiting.
    """
    procs = [p.fresh_copy() for p in processes]
    gantt = GanttRecorder()

    time = 0
    for p in _arrival_order(procs):
        if time < p.arrival_time:
            time = p.arrival_time

        gantt.record(p.pid, time, time + p.burst_time)
        logger.debug("FCFS t=%d: P%d runs for %d", time, p.pid, p.burst_time)

        time += p.burst_time
        p.remaining_time = 0
        p.finish_time = time

    result = ScheduleResult(algorithm=FCFS_NAME, quantum=None, timeline=list(gantt))
    return finalize_result(result, procs)


def schedule_srt(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time (preemptive SJF), decided once per time unit.

    The ready heap is keyed on ``(remaining_time, insertion_seq)``. The sequence
    number grows on every push, so among equal remaining times the process
    pushed earliest wins. A process that just ran is pushed back before the
    next tick's arrivals, so it keeps the CPU against a newcomer with the same
    remaining time.
    """
    procs = [p.fresh_copy() for p in processes]
    pending = _arrival_order(procs)
    gantt = GanttRecorder()

    ready: List[Tuple[int, int, Process]] = []
    seq = itertools.count()
    next_arrival = 0
    completed = 0
    time = 0

    def push(p: Process) -> None:
        heapq.heappush(ready, (p.remaining_time, next(seq), p))

    while completed < len(procs):
        while next_arrival < len(pending) and pending[next_arrival].arrival_time <= time:
            push(pending[next_arrival])
            next_arrival += 1

        if not ready:
            # Idle: nothing emitted until the next process shows up.
            time = pending[next_arrival].arrival_time
            continue

        _, _, current = heapq.heappop(ready)
        gantt.record(current.pid, time, time + 1)
        current.remaining_time -= 1
        time += 1

        if current.is_complete:
            current.finish_time = time
            completed += 1
            logger.debug("SRT t=%d: P%d finished", time, current.pid)
        else:
            push(current)

    result = ScheduleResult(algorithm=SRT_NAME, quantum=None, timeline=list(gantt))
    return finalize_result(result, procs)


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Every process is enqueued exactly once when it arrives. Processes that
    arrive while another one is running are enqueued before that process is
    put back at the tail of the queue.
    """
    if quantum is None or quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum (use --quantum)")

    procs = [p.fresh_copy() for p in processes]
    pending = _arrival_order(procs)
    gantt = GanttRecorder()

    ready: Deque[Process] = deque()
    next_arrival = 0
    completed = 0
    time = 0

    def enqueue_arrivals(current_time: int) -> None:
        nonlocal next_arrival
        while next_arrival < len(pending) and pending[next_arrival].arrival_time <= current_time:
            ready.append(pending[next_arrival])
            next_arrival += 1

    while completed < len(procs):
        enqueue_arrivals(time)

        if not ready:
            time = pending[next_arrival].arrival_time
            continue

        current = ready.popleft()
        run_time = min(quantum, current.remaining_time)
        gantt.record(current.pid, time, time + run_time)
        logger.debug("RR t=%d: P%d runs for %d", time, current.pid, run_time)

        current.remaining_time -= run_time
        time += run_time

        # Arrivals during (time - run_time, time] go ahead of the preempted process.
        enqueue_arrivals(time)

        if current.is_complete:
            current.finish_time = time
            completed += 1
        else:
            ready.append(current)

    result = ScheduleResult(algorithm=RR_NAME, quantum=quantum, timeline=list(gantt))
    return finalize_result(result, procs)


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "srt": schedule_srt,
    "rr": schedule_rr,
}

ALIASES = {
    "srtf": "srt",
    "round-robin": "rr",
}


def run_algorithm(name: str, processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Only round-robin uses the quantum.
    """
    key = name.lower()
    key = ALIASES.get(key, key)
    if key not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    func = ALGORITHMS[key]
    logger.debug("Running %s on %d processes", key, len(processes))
    return func(processes, quantum=quantum)
