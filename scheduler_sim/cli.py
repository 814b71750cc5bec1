from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, ALIASES, run_algorithm
from .gantt import build_rich_gantt, render_gantt, render_trace
from .metrics import summarize_process_metrics
from .models import ProcessSet, ScheduleResult
from .workload_io import WorkloadError, load_workload

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHMS = ["fcfs", "srt", "rr"]


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-sim",
        description="CPU scheduling simulator (FCFS, SRT, Round-Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    algorithm_choices = list(ALGORITHMS) + list(ALIASES)

    run_parser = subparsers.add_parser("run", help="Run scheduling algorithms on a workload file and show full results.")
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a text, JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=algorithm_choices,
        default=DEFAULT_ALGORITHMS,
        help="Algorithms to run, in order (default: fcfs srt rr).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=_positive_int,
        default=None,
        help="Round-robin time quantum (overrides the one in the workload file).",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Also list every Gantt entry as 'Time t: Process p'.",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of coloured bars.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms on the same workload and compare summary metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a text, JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=algorithm_choices,
        default=DEFAULT_ALGORITHMS,
        help="Algorithms to compare (default: fcfs srt rr).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=_positive_int,
        default=None,
        help="Round-robin time quantum (overrides the one in the workload file).",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _is_rr(name: str) -> bool:
    return ALIASES.get(name, name) == "rr"


def _run_all(process_set: ProcessSet, algorithms: List[str], quantum: Optional[int]):
    """
    Run each algorithm on a fresh snapshot and merge it back into the set.

    Yields each result right after it has been merged, so the canonical set
    reflects that run while the caller presents it.
    """
    for name in algorithms:
        q = quantum if _is_rr(name) else None
        result = run_algorithm(name, process_set.snapshot(), quantum=q)
        process_set.merge(result)
        logger.debug("%s finished at t=%d", result.algorithm, result.summary.makespan)
        yield result


def _print_result(
    result: ScheduleResult,
    process_set: ProcessSet,
    console: Console,
    trace: bool = False,
    plain: bool = False,
) -> None:
    console.print(f"\n[bold]=== {result.algorithm} Results ===[/bold]")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), highlight=False, markup=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    if trace:
        console.print()
        console.print(render_trace(result.timeline), highlight=False)

    console.print()

    headers = ["Process", "Arrival", "Burst", "Finish", "Wait", "Turnaround"]

    proc_table = Table(title="Process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h == "Process" else "right"
        proc_table.add_column(h, justify=justify)

    for p in process_set.metrics():
        proc_table.add_row(
            str(p.pid),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.finish_time),
            str(p.waiting_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)
    console.print()

    summary = result.summary
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Average waiting time", f"{summary.avg_waiting:.2f}")
    sys_table.add_row("Average turnaround time", f"{summary.avg_turnaround:.2f}")
    sys_table.add_row("CPU utilization", f"{summary.cpu_utilization:.2f}%")
    sys_table.add_row("Makespan", str(summary.makespan))
    sys_table.add_row("Idle time", str(summary.idle_time))

    console.print(sys_table)


def _print_comparison(results: List[ScheduleResult], title: str, console: Console) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("CPU utilization", justify="right")
    summary_table.add_column("Makespan", justify="right")

    for result in results:
        averages = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{averages['avg_waiting']:.2f}",
            f"{averages['avg_turnaround']:.2f}",
            f"{result.summary.cpu_utilization:.2f}%",
            str(result.summary.makespan),
        )

    console.print(summary_table)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()
    err_console = Console(stderr=True)

    try:
        workload = load_workload(Path(args.workload))
    except (WorkloadError, ValueError, OSError) as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    quantum = args.quantum if args.quantum is not None else workload.quantum
    if quantum is None and any(_is_rr(name) for name in args.algorithms):
        err_console.print("[red]Error: Round Robin requires a quantum (use --quantum or put it in the workload)[/red]")
        return 1

    if args.command == "run":
        for result in _run_all(workload.processes, args.algorithms, quantum):
            _print_result(result, workload.processes, console, trace=args.trace, plain=args.plain)
        return 0

    if args.command == "compare":
        results = list(_run_all(workload.processes, args.algorithms, quantum))
        console.print(f"[bold]Workload:[/bold] {escape(args.workload)}")
        _print_comparison(results, "Algorithm comparison", console)
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
