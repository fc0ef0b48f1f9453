from __future__ import annotations

from typing import Iterable, Optional, Sequence

from forecast_matrix.config import Config, cfg
from forecast_matrix.data_models import (
    CapacityDataPoint,
    ClientTaskDemand,
    DemandDataPoint,
    MatrixData,
    MonthInfo,
    SkillSummary,
    StaffSummary,
)
from forecast_matrix.records import normalize_staff_id

UNASSIGNED_KEY = "unassigned"


def make_cell(
    skill: str,
    month: MonthInfo,
    breakdown: Iterable[ClientTaskDemand] = (),
) -> DemandDataPoint:
    """Build a cell whose aggregates are derived from `breakdown` only."""
    entries = tuple(breakdown)
    return DemandDataPoint(
        skill_type=skill,
        month=month.key,
        month_label=month.label,
        demand_hours=float(sum(e.monthly_hours for e in entries)),
        task_count=len(entries),
        client_count=len({e.client_id for e in entries}),
        task_breakdown=entries,
    )


def _skill_summary(
    skills: Sequence[str], points: Sequence[DemandDataPoint]
) -> dict[str, SkillSummary]:
    hours: dict[str, float] = {s: 0.0 for s in skills}
    tasks: dict[str, int] = {s: 0 for s in skills}
    clients: dict[str, set[str]] = {s: set() for s in skills}
    for p in points:
        hours[p.skill_type] = hours.get(p.skill_type, 0.0) + p.demand_hours
        tasks[p.skill_type] = tasks.get(p.skill_type, 0) + p.task_count
        clients.setdefault(p.skill_type, set()).update(
            e.client_id for e in p.task_breakdown
        )
    return {
        s: SkillSummary(
            total_hours=hours[s], task_count=tasks[s], client_count=len(clients[s])
        )
        for s in hours
    }


def _staff_summary(
    points: Sequence[DemandDataPoint], config: Config
) -> dict[str, StaffSummary]:
    hours: dict[str, float] = {}
    tasks: dict[str, int] = {}
    clients: dict[str, set[str]] = {}
    names: dict[str, tuple[str, str]] = {}
    for p in points:
        for e in p.task_breakdown:
            sid = normalize_staff_id(e.preferred_staff_id)
            key = sid if sid is not None else UNASSIGNED_KEY
            if key not in names:
                if sid is None:
                    names[key] = ("", config.UNASSIGNED_STAFF_LABEL)
                else:
                    label = (e.preferred_staff_name or "").strip() or str(
                        e.preferred_staff_id
                    ).strip()
                    names[key] = (str(e.preferred_staff_id).strip(), label)
            hours[key] = hours.get(key, 0.0) + e.monthly_hours
            tasks[key] = tasks.get(key, 0) + 1
            clients.setdefault(key, set()).add(e.client_id)
    return {
        key: StaffSummary(
            staff_id=names[key][0],
            staff_name=names[key][1],
            total_hours=hours[key],
            task_count=tasks[key],
            client_count=len(clients[key]),
        )
        for key in sorted(names)
    }


def assemble_matrix(
    months: Sequence[MonthInfo],
    skills: Sequence[str],
    data_points: Iterable[DemandDataPoint],
    *,
    capacity: Iterable[CapacityDataPoint] = (),
    horizon: Sequence[MonthInfo] = (),
    scope: str = "all",
    config: Optional[Config] = None,
) -> MatrixData:
    """
    Fold cells into a MatrixData.

    Every cell is rebuilt from its task breakdown and every matrix total and
    summary is folded from those rebuilt cells; stored aggregates on the
    incoming points are never trusted.
    """
    C = config or cfg
    labels = {m.key: m for m in months}
    points = tuple(
        make_cell(
            p.skill_type,
            labels.get(p.month, MonthInfo(key=p.month, label=p.month_label)),
            p.task_breakdown,
        )
        for p in data_points
    )
    client_ids = {e.client_id for p in points for e in p.task_breakdown}
    return MatrixData(
        months=tuple(months),
        skills=tuple(skills),
        data_points=points,
        total_demand=float(sum(p.demand_hours for p in points)),
        total_tasks=sum(p.task_count for p in points),
        total_clients=len(client_ids),
        skill_summary=_skill_summary(skills, points),
        staff_summary=_staff_summary(points, C),
        capacity=tuple(capacity),
        horizon=tuple(horizon),
        scope=str(scope),
    )


def _unique_months(months: Iterable[MonthInfo]) -> list[MonthInfo]:
    seen: dict[str, MonthInfo] = {}
    for m in months:
        seen.setdefault(m.key, m)
    return [seen[k] for k in sorted(seen)]


def fill(
    matrix: MatrixData,
    expected_skills: Optional[Iterable[str]] = None,
    expected_months: Optional[Iterable[MonthInfo]] = None,
    *,
    config: Optional[Config] = None,
) -> MatrixData:
    """
    Densify `matrix` so there is exactly one cell per (skill, month) of the
    expected grid, in month-major order. Missing cells become explicit zero
    cells. Existing cells outside the grid are kept after it.
    """
    if not isinstance(matrix, MatrixData):
        raise TypeError(f"fill expects MatrixData, got {type(matrix).__name__}.")
    skills = sorted(
        set(matrix.skills if expected_skills is None else map(str, expected_skills))
    )
    months = _unique_months(matrix.months if expected_months is None else expected_months)

    existing: dict[tuple[str, str], DemandDataPoint] = {}
    extras: list[DemandDataPoint] = []
    for p in matrix.data_points:
        if (p.skill_type, p.month) in existing:
            extras.append(p)
        else:
            existing[(p.skill_type, p.month)] = p

    grid: list[DemandDataPoint] = []
    for m in months:
        for s in skills:
            hit = existing.pop((s, m.key), None)
            grid.append(hit if hit is not None else make_cell(s, m))
    return assemble_matrix(
        months,
        skills,
        grid + list(existing.values()) + extras,
        capacity=matrix.capacity,
        horizon=matrix.horizon,
        scope=matrix.scope,
        config=config,
    )
