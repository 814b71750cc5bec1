import pytest

from scheduler_sim.algorithms import (
    run_algorithm,
    schedule_fcfs,
    schedule_rr,
    schedule_srt,
)
from scheduler_sim.gantt import coalesce
from scheduler_sim.models import GanttEntry, ProcessSet


def _procs(*records):
    return ProcessSet.from_records(records).snapshot()


def _slices(result):
    return [(e.pid, e.start_time, e.end_time) for e in result.timeline]


def _finish(result):
    return result.finish_times()


def test_fcfs_textbook():
    res = schedule_fcfs(_procs((0, 5), (1, 3), (2, 8)))
    assert _slices(res) == [(1, 0, 5), (2, 5, 8), (3, 8, 16)]
    assert _finish(res) == {1: 5, 2: 8, 3: 16}
    assert [p.waiting_time for p in res.processes] == [0, 4, 6]
    assert res.summary.avg_waiting == pytest.approx(10 / 3)
    assert res.summary.cpu_utilization == 100.0


def test_fcfs_equal_arrivals_keep_input_order():
    res = schedule_fcfs(_procs((2, 3), (0, 1), (2, 2)))
    assert _slices(res) == [(2, 0, 1), (1, 2, 5), (3, 5, 7)]
    assert res.summary.idle_time == 1


def test_fcfs_late_start_counts_idle_time():
    res = schedule_fcfs(_procs((3, 2)))
    assert _slices(res) == [(1, 3, 5)]
    assert res.summary.makespan == 5
    assert res.summary.cpu_utilization == pytest.approx(40.0)


def test_srt_textbook():
    res = schedule_srt(_procs((0, 8), (1, 4), (2, 9), (3, 5)))
    assert _finish(res) == {1: 17, 2: 5, 3: 26, 4: 10}
    assert [p.waiting_time for p in res.processes] == [9, 0, 15, 2]
    assert res.summary.avg_waiting == pytest.approx(6.5)

    # one entry per time unit
    assert len(res.timeline) == 26
    assert all(e.duration == 1 for e in res.timeline)
    assert coalesce(res.timeline) == [
        GanttEntry(1, 0, 1),
        GanttEntry(2, 1, 5),
        GanttEntry(4, 5, 10),
        GanttEntry(1, 10, 17),
        GanttEntry(3, 17, 26),
    ]


def test_srt_tie_goes_to_earliest_admitted():
    res = schedule_srt(_procs((0, 3), (0, 3)))
    assert _finish(res) == {1: 3, 2: 6}


def test_srt_incumbent_keeps_cpu_on_equal_remaining_time():
    # At t=2 P1 has 2 left and P2 arrives needing 2: P1 was queued first.
    res = schedule_srt(_procs((0, 4), (2, 2)))
    assert [e.pid for e in coalesce(res.timeline)] == [1, 2]
    assert _finish(res) == {1: 4, 2: 6}


def test_srt_preempts_for_shorter_arrival():
    res = schedule_srt(_procs((0, 6), (1, 2)))
    assert coalesce(res.timeline) == [GanttEntry(1, 0, 1), GanttEntry(2, 1, 3), GanttEntry(1, 3, 8)]


def test_srt_idle_before_first_arrival():
    res = schedule_srt(_procs((2, 1), (5, 2)))
    assert _slices(res) == [(1, 2, 3), (2, 5, 6), (2, 6, 7)]
    assert res.summary.idle_time == 4


def test_rr_textbook_quantum_4():
    res = schedule_rr(_procs((0, 5), (1, 3), (2, 8)), quantum=4)
    assert _slices(res) == [(1, 0, 4), (2, 4, 7), (3, 7, 11), (1, 11, 12), (3, 12, 16)]
    assert _finish(res) == {1: 12, 2: 7, 3: 16}
    assert res.quantum == 4


def test_rr_arrivals_go_before_preempted_process():
    res = schedule_rr(_procs((0, 4), (1, 2)), quantum=2)
    assert _slices(res) == [(1, 0, 2), (2, 2, 4), (1, 4, 6)]


def test_rr_arrival_at_slice_end_is_enqueued_once():
    res = schedule_rr(_procs((0, 4), (2, 2)), quantum=2)
    assert _slices(res) == [(1, 0, 2), (2, 2, 4), (1, 4, 6)]


def test_rr_arrival_during_final_slice_is_not_lost():
    res = schedule_rr(_procs((0, 2), (1, 3)), quantum=4)
    assert _slices(res) == [(1, 0, 2), (2, 2, 5)]


def test_rr_short_burst_is_one_dispatch():
    res = schedule_rr(_procs((0, 3)), quantum=5)
    assert _slices(res) == [(1, 0, 3)]


def test_rr_requires_positive_quantum():
    with pytest.raises(ValueError):
        schedule_rr(_procs((0, 3)))
    with pytest.raises(ValueError):
        schedule_rr(_procs((0, 3)), quantum=0)


@pytest.mark.parametrize("name", ["fcfs", "srt", "rr"])
def test_single_process_is_identical_everywhere(name):
    res = run_algorithm(name, _procs((0, 7)), quantum=3)
    assert _finish(res) == {1: 7}
    assert res.processes[0].waiting_time == 0
    assert res.summary.cpu_utilization == 100.0
    assert res.summary.makespan == 7


@pytest.mark.parametrize("name", ["fcfs", "srt", "rr"])
def test_input_processes_are_not_mutated(name):
    procs = _procs((0, 5), (1, 3), (2, 8))
    run_algorithm(name, procs, quantum=2)
    assert all(p.remaining_time == p.burst_time for p in procs)
    assert all(p.finish_time == 0 for p in procs)


@pytest.mark.parametrize("name", ["fcfs", "srt", "rr"])
def test_runs_are_deterministic(name):
    procs = _procs((0, 8), (1, 4), (2, 9), (3, 5), (3, 4))
    first = run_algorithm(name, procs, quantum=3)
    second = run_algorithm(name, procs, quantum=3)
    assert first == second


def test_run_algorithm_aliases_and_unknown_names():
    res = run_algorithm("SRTF", _procs((0, 2)))
    assert res.algorithm == "Shortest Remaining Time (SRT)"

    with pytest.raises(ValueError):
        run_algorithm("mlfq", _procs((0, 2)))
