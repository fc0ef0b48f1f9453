from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

import numpy as np

from forecast_matrix.aggregation import assemble_matrix, fill
from forecast_matrix.config import Config, cfg
from forecast_matrix.data_models import (
    CapacityDataPoint,
    ClientTaskDemand,
    DemandDataPoint,
    MatrixData,
    MonthInfo,
)
from forecast_matrix.observers import MatrixObserver, resolve_observer
from forecast_matrix.periods import DateRange
from forecast_matrix.records import (
    ClientRecord,
    StaffCapacityRecord,
    TaskRecord,
    ingest_clients,
    ingest_staff,
    ingest_tasks,
    normalize_staff_id,
)
from forecast_matrix.recurrence import monthly_hours, recurrence_pattern


class _DedupObserver:
    """Forwards each distinct warning once per build."""

    def __init__(self, inner: MatrixObserver) -> None:
        self.inner = inner
        self.seen: set[str] = set()

    def build_started(self, *, tasks: int, months: int, skills: int) -> None:
        self.inner.build_started(tasks=tasks, months=months, skills=skills)

    def build_finished(self, matrix: MatrixData) -> None:
        self.inner.build_finished(matrix)

    def warn(self, message: str) -> None:
        if message not in self.seen:
            self.seen.add(message)
            self.inner.warn(message)


def _as_hours(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        return 0.0
    return float(value) if np.isfinite(value) else 0.0


def _capacity_skills(
    member: StaffCapacityRecord, config: Config, observer: MatrixObserver
) -> list[str]:
    if member.assigned_skills:
        return list(member.assigned_skills)
    if config.FALLBACK_CAPACITY_SKILL is not None:
        return [config.FALLBACK_CAPACITY_SKILL.strip()]
    observer.warn(f"Staff {member.staff_id}: no assigned skills; capacity skipped.")
    return []


def _monthly_capacity(member: StaffCapacityRecord, config: Config) -> float:
    weekly = _as_hours(member.weekly_available_hours)
    if weekly <= 0:
        return 0.0
    return weekly * config.WEEKLY_OCCURRENCES_PER_MONTH


def build_capacity(
    staff: Iterable[Any],
    months: Sequence[MonthInfo],
    skills: Sequence[str],
    *,
    config: Optional[Config] = None,
    observer: Optional[MatrixObserver] = None,
) -> tuple[CapacityDataPoint, ...]:
    """
    Dense capacity grid over `skills` x `months` (month-major).

    Each staff member's weekly hours x weeks-per-month are split evenly across
    their assigned skills.
    """
    C = config or cfg
    obs = resolve_observer(observer)
    members = ingest_staff(staff)

    hours: dict[str, float] = {s: 0.0 for s in skills}
    heads: dict[str, int] = {s: 0 for s in skills}
    for member in members:
        member_skills = [s for s in _capacity_skills(member, C, obs) if s in hours]
        monthly = _monthly_capacity(member, C)
        if monthly == 0.0 and member.weekly_available_hours != 0:
            obs.warn(
                f"Staff {member.staff_id}: weekly hours "
                f"{member.weekly_available_hours!r} are not usable; capacity is 0."
            )
        if not member_skills:
            continue
        share = monthly / len(member_skills)
        for s in member_skills:
            hours[s] += share
            heads[s] += 1

    return tuple(
        CapacityDataPoint(
            skill_type=s,
            month=m.key,
            month_label=m.label,
            capacity_hours=hours[s],
            staff_count=heads[s],
        )
        for m in months
        for s in skills
    )


def _client_names(
    clients: Sequence[ClientRecord], config: Config
) -> dict[str, str]:
    names: dict[str, str] = {}
    for c in clients:
        names[c.id] = c.legal_name or config.UNKNOWN_CLIENT_NAME
    return names


def _staff_names(staff: Sequence[StaffCapacityRecord]) -> dict[str, str]:
    names: dict[str, str] = {}
    for member in staff:
        sid = normalize_staff_id(member.staff_id)
        if sid is not None and member.full_name:
            names[sid] = str(member.full_name).strip()
    return names


def _collect_skills(
    tasks: Sequence[TaskRecord],
    staff: Sequence[StaffCapacityRecord],
    config: Config,
) -> list[str]:
    skills: set[str] = set()
    for t in tasks:
        skills.update(t.required_skills)
    for member in staff:
        skills.update(member.assigned_skills)
        if not member.assigned_skills and config.FALLBACK_CAPACITY_SKILL is not None:
            skills.add(config.FALLBACK_CAPACITY_SKILL.strip())
    return sorted(skills)


def build_matrix(
    tasks: Iterable[Any],
    clients: Iterable[Any],
    staff_capacity: Iterable[Any],
    date_range: DateRange,
    *,
    config: Optional[Config] = None,
    observer: Optional[MatrixObserver] = None,
) -> MatrixData:
    """
    Build the dense skill x month demand matrix for `date_range`.

    Raises TypeError for inputs of the wrong shape. Bad task data never
    raises: the task contributes 0 hours and a warning goes to `observer`.
    """
    C = config or cfg
    C.validate()
    if not isinstance(date_range, DateRange):
        raise TypeError(
            f"date_range must be a DateRange, got {type(date_range).__name__}."
        )
    task_records = ingest_tasks(tasks)
    client_records = ingest_clients(clients)
    staff_records = ingest_staff(staff_capacity)
    obs = _DedupObserver(resolve_observer(observer))

    active = [t for t in task_records if t.is_active]
    months = date_range.months(C)
    skills = _collect_skills(active, staff_records, C)
    obs.build_started(tasks=len(active), months=len(months), skills=len(skills))

    client_names = _client_names(client_records, C)
    staff_names = _staff_names(staff_records)

    cells: dict[tuple[str, str], list[ClientTaskDemand]] = {}
    for task in active:
        if not task.required_skills:
            obs.warn(f"Task {task.id}: no required skills; skipped.")
            continue
        client_name = client_names.get(task.client_id)
        if client_name is None:
            obs.warn(f"Task {task.id}: unknown client {task.client_id!r}.")
            client_name = C.UNKNOWN_CLIENT_NAME
        sid = normalize_staff_id(task.preferred_staff_id)
        staff_name = (staff_names.get(sid) if sid else None) or task.preferred_staff_name

        for month in months:
            hours = monthly_hours(task, month.key, config=C, observer=obs)
            if hours <= 0:
                continue
            pattern = recurrence_pattern(task, month.key, config=C)
            for skill in task.required_skills:
                cells.setdefault((skill, month.key), []).append(
                    ClientTaskDemand(
                        client_id=task.client_id,
                        client_name=client_name,
                        recurring_task_id=task.id,
                        task_name=task.name,
                        skill_type=skill,
                        estimated_hours=_as_hours(task.estimated_hours),
                        recurrence_pattern=pattern,
                        monthly_hours=hours,
                        preferred_staff_id=task.preferred_staff_id,
                        preferred_staff_name=staff_name,
                    )
                )

    by_key = {m.key: m for m in months}
    sparse: list[DemandDataPoint] = [
        DemandDataPoint(
            skill_type=skill,
            month=key,
            month_label=by_key[key].label,
            demand_hours=0.0,
            task_count=0,
            client_count=0,
            task_breakdown=tuple(entries),
        )
        for (skill, key), entries in cells.items()
    ]
    capacity = build_capacity(
        staff_records, months, skills, config=C, observer=obs
    )
    matrix = fill(
        assemble_matrix(
            months, skills, sparse, capacity=capacity, horizon=months, config=C
        ),
        config=C,
    )
    obs.build_finished(matrix)
    return matrix
