"""
Advisory diagnostics for matrices and raw records.

Nothing here mutates or repairs data and nothing raises: every problem found
is reported as an error (the matrix is internally inconsistent) or a warning
(usable, but worth surfacing to an operator).
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Callable, Iterable, Mapping, Optional

import numpy as np

from forecast_matrix.config import Config, cfg
from forecast_matrix.data_models import ValidationResult
from forecast_matrix.records import (
    ingest_clients,
    ingest_staff,
    ingest_tasks,
    normalize_staff_id,
)
from forecast_matrix.recurrence import canonical_type

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class _Report:
    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def error(self, msg: str) -> None:
        self.errors.append(msg)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    def result(self) -> ValidationResult:
        return ValidationResult(
            is_valid=not self.errors,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
        )


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _is_seq(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        return False
    return not np.isnan(value)


def _seq(matrix: Any, name: str) -> list[Any]:
    value = _field(matrix, name)
    return list(value) if _is_seq(value) else []


def _close(a: float, b: float, tol: float) -> bool:
    return bool(np.isclose(a, b, rtol=1e-9, atol=tol))


# ----------------------------
# Structural checks
# ----------------------------
def _check_containers(matrix: Any, report: _Report, C: Config) -> None:
    for name in ("months", "skills", "data_points"):
        value = _field(matrix, name)
        if value is None:
            report.error(f"'{name}' is missing.")
        elif not _is_seq(value):
            report.error(f"'{name}' must be an array, got {type(value).__name__}.")
    summary = _field(matrix, "skill_summary")
    if summary is None:
        report.error("'skill_summary' is missing.")
    elif not isinstance(summary, Mapping):
        report.error(f"'skill_summary' must be a mapping, got {type(summary).__name__}.")


def _check_totals(matrix: Any, report: _Report, C: Config) -> None:
    for name in ("total_demand", "total_tasks", "total_clients"):
        value = _field(matrix, name)
        if not _is_number(value):
            report.error(f"'{name}' must be a number, got {value!r}.")


def _check_axes(matrix: Any, report: _Report, C: Config) -> None:
    keys = [_field(m, "key") for m in _seq(matrix, "months")]
    for key, n in Counter(keys).items():
        if n > 1:
            report.error(f"Month '{key}' is declared {n} times.")
    for key in keys:
        if not isinstance(key, str) or not _MONTH_KEY.match(key):
            report.error(f"Month key {key!r} is not in YYYY-MM form.")
    str_keys = [k for k in keys if isinstance(k, str)]
    if str_keys != sorted(str_keys):
        report.warn("Months are not in chronological order.")

    skills = _seq(matrix, "skills")
    for skill, n in Counter(map(str, skills)).items():
        if n > 1:
            report.error(f"Skill '{skill}' is declared {n} times.")
    names = [str(s) for s in skills]
    if names != sorted(names):
        report.warn("Skills are not sorted.")


def _check_points(matrix: Any, report: _Report, C: Config) -> None:
    declared_skills = {str(s) for s in _seq(matrix, "skills")}
    declared_months = {_field(m, "key") for m in _seq(matrix, "months")}
    undeclared: dict[str, int] = {}
    stray_months: set[str] = set()
    seen: Counter[tuple[Any, Any]] = Counter()

    for i, p in enumerate(_seq(matrix, "data_points")):
        skill = _field(p, "skill_type")
        month = _field(p, "month")
        if not isinstance(skill, str) or not skill.strip():
            report.error(f"Data point {i} has no valid skill_type ({skill!r}).")
        elif skill not in declared_skills:
            undeclared[skill] = undeclared.get(skill, 0) + 1
        if not isinstance(month, str) or not _MONTH_KEY.match(month):
            report.error(f"Data point {i} has an invalid month ({month!r}).")
        elif month not in declared_months:
            stray_months.add(month)
        if not _is_number(_field(p, "demand_hours")):
            report.error(f"Data point {i} has non-numeric demand_hours.")
        if not _is_number(_field(p, "task_count")):
            report.error(f"Data point {i} has non-numeric task_count.")
        try:
            seen[(skill, month)] += 1
        except TypeError:
            pass

    for skill, n in sorted(undeclared.items()):
        report.error(
            f"Skill '{skill}' is used by {n} data point(s) but is not declared in skills."
        )
    for month in sorted(stray_months):
        report.error(f"Month '{month}' is used by data points but is not declared in months.")
    for (skill, month), n in seen.items():
        if n > 1:
            report.error(f"Cell ({skill}, {month}) appears {n} times.")


def _check_staff_refs(matrix: Any, report: _Report, C: Config) -> None:
    bad = 0
    for p in _seq(matrix, "data_points"):
        breakdown = _field(p, "task_breakdown", ())
        if not _is_seq(breakdown):
            continue
        for entry in breakdown:
            for name in ("preferred_staff_id", "preferred_staff_name"):
                value = _field(entry, name)
                if value is None:
                    continue
                if not isinstance(value, str) or not value.strip():
                    bad += 1
                    if bad <= 10:
                        report.warn(
                            f"Task {_field(entry, 'recurring_task_id')!r}: malformed "
                            f"{name} {value!r}; shown as {C.UNASSIGNED_STAFF_LABEL}."
                        )
    if bad > 10:
        report.warn(f"{bad - 10} more malformed preferred staff reference(s).")


def _check_empty(matrix: Any, report: _Report, C: Config) -> None:
    points = _seq(matrix, "data_points")
    if not points:
        report.warn("Matrix has no data points.")
    elif all(_field(p, "task_count") == 0 for p in points):
        report.warn("Matrix has no demand data: every cell is zero.")
    if not _seq(matrix, "skills"):
        report.warn("Matrix declares no skills.")


# ----------------------------
# Bottom-up consistency checks
# ----------------------------
def _check_cells(matrix: Any, report: _Report, C: Config) -> None:
    for i, p in enumerate(_seq(matrix, "data_points")):
        breakdown = _field(p, "task_breakdown")
        if not _is_seq(breakdown):
            report.error(f"Data point {i} has no task_breakdown array.")
            continue
        hours = [_field(e, "monthly_hours") for e in breakdown]
        if not all(_is_number(h) for h in hours):
            report.error(f"Data point {i} has non-numeric monthly_hours in its breakdown.")
            continue
        if any(h < 0 for h in hours):
            report.error(f"Data point {i} has negative monthly_hours in its breakdown.")
        label = f"({_field(p, 'skill_type')}, {_field(p, 'month')})"
        demand = _field(p, "demand_hours")
        if _is_number(demand) and not _close(demand, float(sum(hours)), C.FLOAT_TOLERANCE):
            report.error(
                f"Cell {label}: demand_hours {demand} != breakdown sum {sum(hours)}."
            )
        count = _field(p, "task_count")
        if _is_number(count) and count != len(breakdown):
            report.error(f"Cell {label}: task_count {count} != {len(breakdown)} entries.")
        clients = len({_field(e, "client_id") for e in breakdown})
        if _field(p, "client_count") != clients:
            report.error(
                f"Cell {label}: client_count {_field(p, 'client_count')} != {clients}."
            )


def _check_matrix_totals(matrix: Any, report: _Report, C: Config) -> None:
    points = _seq(matrix, "data_points")
    hours = [_field(p, "demand_hours") for p in points]
    counts = [_field(p, "task_count") for p in points]
    total = _field(matrix, "total_demand")
    if _is_number(total) and all(_is_number(h) for h in hours):
        if not _close(total, float(sum(hours)), C.FLOAT_TOLERANCE):
            report.error(f"total_demand {total} != sum of cells {sum(hours)}.")
    tasks = _field(matrix, "total_tasks")
    if _is_number(tasks) and all(_is_number(c) for c in counts):
        if tasks != sum(counts):
            report.error(f"total_tasks {tasks} != sum of cell task counts {sum(counts)}.")
    clients: set[Any] = set()
    for p in points:
        breakdown = _field(p, "task_breakdown", ())
        if _is_seq(breakdown):
            clients.update(_field(e, "client_id") for e in breakdown)
    total_clients = _field(matrix, "total_clients")
    if _is_number(total_clients) and total_clients != len(clients):
        report.error(
            f"total_clients {total_clients} != {len(clients)} distinct clients in cells."
        )


def _check_skill_summary(matrix: Any, report: _Report, C: Config) -> None:
    summary = _field(matrix, "skill_summary")
    if not isinstance(summary, Mapping):
        return
    hours: dict[str, float] = {}
    tasks: dict[str, float] = {}
    for p in _seq(matrix, "data_points"):
        skill, h, n = _field(p, "skill_type"), _field(p, "demand_hours"), _field(p, "task_count")
        if isinstance(skill, str) and _is_number(h) and _is_number(n):
            hours[skill] = hours.get(skill, 0.0) + h
            tasks[skill] = tasks.get(skill, 0) + n
    for skill, entry in summary.items():
        stored_h = _field(entry, "total_hours")
        stored_n = _field(entry, "task_count")
        if _is_number(stored_h) and not _close(stored_h, hours.get(skill, 0.0), C.FLOAT_TOLERANCE):
            report.error(
                f"skill_summary['{skill}'].total_hours {stored_h} != {hours.get(skill, 0.0)} from cells."
            )
        if _is_number(stored_n) and stored_n != tasks.get(skill, 0):
            report.error(
                f"skill_summary['{skill}'].task_count {stored_n} != {tasks.get(skill, 0)} from cells."
            )
    for skill in sorted(set(hours) - set(summary)):
        if tasks.get(skill, 0):
            report.error(f"skill_summary has no entry for skill '{skill}'.")


_CHECKS: tuple[Callable[[Any, _Report, Config], None], ...] = (
    _check_containers,
    _check_totals,
    _check_axes,
    _check_points,
    _check_staff_refs,
    _check_empty,
    _check_cells,
    _check_matrix_totals,
    _check_skill_summary,
)


def validate(matrix: Any, *, config: Optional[Config] = None) -> ValidationResult:
    """
    Run every matrix check and collect all findings.

    Accepts MatrixData or any object/mapping with the same fields; never raises.
    """
    C = config or cfg
    report = _Report()
    if matrix is None:
        report.error("Matrix is missing.")
        return report.result()
    for check in _CHECKS:
        try:
            check(matrix, report, C)
        except Exception as exc:  # report, do not propagate
            report.error(f"{check.__name__.lstrip('_')} could not complete: {exc}")
    return report.result()


# ----------------------------
# Raw record diagnostics
# ----------------------------
def _records(
    rows: Iterable[Any], parse: Callable[[Iterable[Any]], tuple[Any, ...]], what: str, report: _Report
) -> tuple[Any, ...]:
    try:
        return parse(rows)
    except TypeError as exc:
        report.error(f"{what} could not be read: {exc}")
        return ()


def validate_records(
    tasks: Iterable[Any],
    clients: Iterable[Any],
    staff: Iterable[Any],
    *,
    config: Optional[Config] = None,
) -> ValidationResult:
    """Pre-build diagnostics on raw task, client and staff records."""
    report = _Report()
    task_records = _records(tasks, ingest_tasks, "Tasks", report)
    client_records = _records(clients, ingest_clients, "Clients", report)
    staff_records = _records(staff, ingest_staff, "Staff", report)

    for tid, n in Counter(t.id for t in task_records).items():
        if n > 1:
            report.error(f"Task id '{tid}' appears {n} times.")
    for cid, n in Counter(c.id for c in client_records).items():
        if n > 1:
            report.warn(f"Client id '{cid}' appears {n} times.")

    known_clients = {c.id for c in client_records}
    known_staff = {
        sid for sid in (normalize_staff_id(s.staff_id) for s in staff_records) if sid
    }

    for t in task_records:
        kind = canonical_type(t.recurrence_type)
        if kind is None:
            report.error(f"Task {t.id}: unknown recurrence type {t.recurrence_type!r}.")
        interval = t.recurrence_interval
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            report.error(f"Task {t.id}: recurrence interval {interval!r} is not an integer >= 1.")
        if kind == "Custom":
            if t.custom_monthly_hours is None:
                report.warn(f"Task {t.id}: Custom recurrence without monthly hours.")
        elif not _is_number(t.estimated_hours) or t.estimated_hours <= 0:
            report.warn(f"Task {t.id}: estimated hours {t.estimated_hours!r} contribute nothing.")
        if kind == "Quarterly" and t.due_date is None:
            report.warn(
                f"Task {t.id}: quarterly task has no due date; hours are spread evenly."
            )
        if not t.required_skills:
            report.warn(f"Task {t.id}: no required skills.")
        if t.client_id not in known_clients:
            report.warn(f"Task {t.id}: client '{t.client_id}' is not in the client list.")
        sid = normalize_staff_id(t.preferred_staff_id)
        if sid is not None and known_staff and sid not in known_staff:
            report.warn(
                f"Task {t.id}: preferred staff '{t.preferred_staff_id}' is not in the staff list."
            )
        elif t.preferred_staff_id is not None and sid is None:
            report.warn(
                f"Task {t.id}: preferred staff {t.preferred_staff_id!r} is not a usable reference."
            )

    for s in staff_records:
        if not s.assigned_skills:
            report.warn(f"Staff {s.staff_id}: no assigned skills.")
        hours = s.weekly_available_hours
        if not _is_number(hours) or hours <= 0:
            report.warn(f"Staff {s.staff_id}: weekly available hours {hours!r} give no capacity.")

    if not task_records:
        report.warn("No tasks supplied.")
    return report.result()
