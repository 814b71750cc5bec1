import pytest
from rich.panel import Panel

from scheduler_sim.gantt import GanttRecorder, build_rich_gantt, coalesce, render_gantt, render_trace
from scheduler_sim.models import GanttEntry


def test_recorder_is_append_only_and_ordered():
    gantt = GanttRecorder()
    gantt.record(1, 0, 2)
    gantt.record(2, 3, 4)
    assert len(gantt) == 2
    assert gantt.entries() == (GanttEntry(1, 0, 2), GanttEntry(2, 3, 4))

    with pytest.raises(ValueError):
        gantt.record(3, 3, 5)
    with pytest.raises(ValueError):
        gantt.record(3, 5, 5)


def test_coalesce_merges_adjacent_slices_of_same_process():
    gantt = GanttRecorder()
    for t in range(3):
        gantt.record(1, t, t + 1)
    gantt.record(2, 3, 4)
    gantt.record(2, 5, 6)

    assert gantt.coalesced() == [GanttEntry(1, 0, 3), GanttEntry(2, 3, 4), GanttEntry(2, 5, 6)]
    assert coalesce([]) == []


def test_render_trace():
    entries = [GanttEntry(1, 0, 4), GanttEntry(2, 4, 7)]
    assert render_trace(entries) == "Time 0: Process 1\nTime 4: Process 2"


def test_render_gantt_shows_idle_gap():
    text = render_gantt([GanttEntry(1, 0, 2), GanttEntry(2, 3, 5)])
    assert text.splitlines() == [
        "Gantt Chart:",
        "|==.==|",
        "P1 P2",
        "0  2  3  5",
    ]
    assert render_gantt([]) == "(no execution)"


def test_build_rich_gantt():
    panel, marks = build_rich_gantt([GanttEntry(1, 0, 2), GanttEntry(1, 2, 3)])
    assert isinstance(panel, Panel)
    assert marks == "0  3"

    panel, marks = build_rich_gantt([])
    assert marks == ""
