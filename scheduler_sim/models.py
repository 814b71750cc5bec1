from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple


@dataclass
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    remaining_time: Optional[int] = None
    finish_time: int = 0  # 0 until the process completes

    def __post_init__(self) -> None:
        if self.remaining_time is None:
            self.remaining_time = self.burst_time

    @property
    def is_complete(self) -> bool:
        return self.remaining_time == 0

    def fresh_copy(self) -> "Process":
        """
        Independent copy with simulation state reset.
        """
        return Process(pid=self.pid, arrival_time=self.arrival_time, burst_time=self.burst_time)


@dataclass(frozen=True)
class GanttEntry:
    """
    One execution slice in the Gantt chart: `pid` ran from `start_time` up to
    (not including) `end_time`.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    finish_time: int
    waiting_time: int
    turnaround_time: int


@dataclass
class ScheduleSummary:
    avg_waiting: float
    avg_turnaround: float
    cpu_utilization: float  # percent
    makespan: int
    busy_time: int
    idle_time: int


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[GanttEntry] = field(default_factory=list)
    summary: Optional[ScheduleSummary] = None

    def finish_times(self) -> dict[int, int]:
        return {m.pid: m.finish_time for m in self.processes}


class ProcessSet:
    """
    Canonical, ordered set of processes loaded from a workload.

    Algorithms never touch these records directly: they run on `snapshot()`
    copies and the finished result is written back with `merge()`. Only the
    most recently merged run is kept.
    """

    def __init__(self, processes: Iterable[Process]):
        self._processes: List[Process] = list(processes)
        pids = [p.pid for p in self._processes]
        if pids != list(range(1, len(pids) + 1)):
            raise ValueError(f"Process ids must be 1..N in order, got {pids}")
        self.last_algorithm: Optional[str] = None

    @classmethod
    def from_records(cls, records: Iterable[Tuple[int, int]]) -> "ProcessSet":
        return cls(
            Process(pid=idx, arrival_time=arrival, burst_time=burst)
            for idx, (arrival, burst) in enumerate(records, start=1)
        )

    def __iter__(self) -> Iterator[Process]:
        return iter(self._processes)

    def __len__(self) -> int:
        return len(self._processes)

    def get(self, pid: int) -> Process:
        return self._processes[pid - 1]

    def snapshot(self) -> List[Process]:
        return [p.fresh_copy() for p in self._processes]

    def merge(self, result: ScheduleResult) -> None:
        finish = result.finish_times()
        for p in self._processes:
            p.finish_time = finish[p.pid]
            p.remaining_time = 0
        self.last_algorithm = result.algorithm

    def metrics(self) -> List[ProcessMetrics]:
        """
        Per-process metrics for the last merged run.
        """
        from .metrics import compute_process_metrics

        if self.last_algorithm is None:
            raise ValueError("No schedule has been merged into this process set yet")
        return compute_process_metrics(self._processes)
