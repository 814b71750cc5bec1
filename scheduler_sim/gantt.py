from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import GanttEntry


class GanttRecorder:
    """
    Append-only log of execution slices produced by a single run.
    """

    def __init__(self) -> None:
        self._entries: List[GanttEntry] = []

    def record(self, pid: int, start_time: int, end_time: int) -> GanttEntry:
        if end_time <= start_time:
            raise ValueError(f"Empty slice for process {pid}: {start_time}..{end_time}")
        if self._entries and start_time < self._entries[-1].end_time:
            raise ValueError(
                f"Slice for process {pid} at {start_time} overlaps the previous one "
                f"ending at {self._entries[-1].end_time}"
            )
        entry = GanttEntry(pid=pid, start_time=start_time, end_time=end_time)
        self._entries.append(entry)
        return entry

    def __iter__(self) -> Iterator[GanttEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> Tuple[GanttEntry, ...]:
        return tuple(self._entries)

    def coalesced(self) -> List[GanttEntry]:
        return coalesce(self._entries)


def coalesce(entries: Iterable[GanttEntry]) -> List[GanttEntry]:
    """
    Merge back-to-back slices of the same process into one range.
    """
    merged: List[GanttEntry] = []
    for entry in entries:
        if merged and merged[-1].pid == entry.pid and merged[-1].end_time == entry.start_time:
            merged[-1] = GanttEntry(pid=entry.pid, start_time=merged[-1].start_time, end_time=entry.end_time)
        else:
            merged.append(entry)
    return merged


def _label(pid: int) -> str:
    return f"P{pid}"


def render_trace(entries: Iterable[GanttEntry]) -> str:
    """
    One line per recorded slice, e.g. ``Time 4: Process 2``.
    """
    return "\n".join(f"Time {e.start_time}: Process {e.pid}" for e in entries)


def render_gantt(entries: List[GanttEntry]) -> str:
    """
    Plain-text Gantt chart; idle gaps are drawn with dots.
    """
    if not entries:
        return "(no execution)"

    entries = coalesce(sorted(entries, key=lambda e: (e.start_time, e.end_time)))

    line = "|"
    labels = ""
    time_marks = "0"
    last_time = 0

    for e in entries:
        idle_gap = e.start_time - last_time
        if idle_gap > 0:
            line += "." * idle_gap
            labels += " " * idle_gap
            last_time = e.start_time
            time_marks += f"{last_time:>3}"

        width = e.duration
        line += "=" * width
        labels += _label(e.pid)[:width].ljust(width)
        last_time = e.end_time
        time_marks += f"{last_time:>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(entries: List[GanttEntry]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not entries:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    entries = coalesce(sorted(entries, key=lambda e: (e.start_time, e.end_time)))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    bars = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for e in entries:
        idle_gap = e.start_time - last_time
        if idle_gap > 0:
            bars.append(" " * idle_gap)
            labels.append(" " * idle_gap)
            last_time = e.start_time
            time_marks += f"{last_time:>3}"

        width = e.duration
        bars.append(" " * width, style=f"on {pid_color(e.pid)}")
        labels.append(_label(e.pid)[:width].ljust(width), style="bold")

        last_time = e.end_time
        time_marks += f"{last_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
