"""
Scheduler simulator package.

Simulates FCFS, Shortest Remaining Time and Round-Robin CPU scheduling over a
fixed set of processes and reports Gantt charts and timing metrics.
"""

__all__ = ["algorithms", "cli", "gantt", "metrics", "models", "workload_io"]
