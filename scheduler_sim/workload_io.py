from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .models import ProcessSet

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {"", ".txt", ".dat"}


class WorkloadError(ValueError):
    """Raised when a workload file is malformed or violates the input constraints."""


@dataclass
class Workload:
    processes: ProcessSet
    quantum: Optional[int] = None


def load_workload(path: str | Path) -> Workload:
    """
    Load a workload from a text, JSON or CSV file.

    The text format is the classic one: the first two integers are the
    number of processes and the round-robin quantum, followed by one
    ``arrival burst`` pair per process.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in TEXT_SUFFIXES:
        workload = _load_text(path)
    elif suffix == ".json":
        workload = _load_json(path)
    elif suffix == ".csv":
        workload = _load_csv(path)
    else:
        raise WorkloadError(f"Unsupported workload format: {suffix} (use .txt, .json or .csv)")

    logger.info("Loaded %d processes from %s", len(workload.processes), path)
    return workload


def _load_text(path: Path) -> Workload:
    tokens = _read_text(path).split()

    try:
        values = [int(tok) for tok in tokens]
    except ValueError as exc:
        raise WorkloadError(f"Invalid file format: non-integer value in {path}") from exc

    if len(values) < 2:
        raise WorkloadError("Invalid file format: expected process count and quantum")

    count, quantum = values[0], values[1]
    if count <= 0 or quantum <= 0:
        raise WorkloadError(f"Invalid parameters: process count {count}, quantum {quantum}")

    pairs = values[2:]
    if len(pairs) != 2 * count:
        raise WorkloadError(f"Expected {count} arrival/burst pairs, found {len(pairs)} values after the header")

    records = []
    for idx in range(count):
        arrival, burst = pairs[2 * idx], pairs[2 * idx + 1]
        records.append(_validate_record(idx + 1, arrival, burst))

    return Workload(processes=ProcessSet.from_records(records), quantum=quantum)


def _load_json(path: Path) -> Workload:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except UnicodeDecodeError as exc:
            raise WorkloadError(f"{path} is not valid UTF-8 text") from exc
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"Invalid JSON in {path}: {exc}") from exc

    quantum = None
    if isinstance(raw, dict):
        quantum = _parse_quantum(raw.get("quantum"))
        raw = raw.get("processes")

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    records = [_record_from_mapping(idx, entry) for idx, entry in enumerate(raw, start=1)]
    return Workload(processes=_build_set(records), quantum=quantum)


def _load_csv(path: Path) -> Workload:
    records: List[Tuple[int, int]] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        try:
            for idx, row in enumerate(reader, start=1):
                records.append(_record_from_mapping(idx, row))
        except UnicodeDecodeError as exc:
            raise WorkloadError(f"{path} is not valid UTF-8 text") from exc
    return Workload(processes=_build_set(records))


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise WorkloadError(f"{path} is not valid UTF-8 text") from exc


def _as_int(value) -> int:
    # JSON gives bools and floats; only whole numbers are accepted.
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(value)


def _build_set(records: List[Tuple[int, int]]) -> ProcessSet:
    if not records:
        raise WorkloadError("Workload contains no processes")
    return ProcessSet.from_records(records)


def _parse_quantum(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        quantum = _as_int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise WorkloadError(f"Invalid quantum: {value!r}") from exc
    if quantum <= 0:
        raise WorkloadError(f"Quantum must be positive, got {quantum}")
    return quantum


def _record_from_mapping(idx: int, mapping) -> Tuple[int, int]:
    try:
        arrival_time = _as_int(mapping["arrival_time"])
        burst_time = _as_int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError, OverflowError) as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    return _validate_record(idx, arrival_time, burst_time)


def _validate_record(idx: int, arrival_time: int, burst_time: int) -> Tuple[int, int]:
    if arrival_time < 0:
        raise WorkloadError(f"Process {idx}: arrival time must be >= 0, got {arrival_time}")
    if burst_time <= 0:
        raise WorkloadError(f"Process {idx}: burst time must be > 0, got {burst_time}")
    return arrival_time, burst_time
